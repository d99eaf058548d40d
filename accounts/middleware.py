import logging

from django.contrib import messages
from django.shortcuts import redirect

from catalog import services
from catalog.client import ApiClient, ApiError, Unauthorized

from .session import SessionStore

logger = logging.getLogger(__name__)

SESSION_EXPIRED = "Your session has expired. Please log in again."


class ApiSessionMiddleware:
    """Attach the session store and a token-bearing API client to each request.

    A signed-in request whose school name is not resolved yet retries the
    lookup before the view runs. A 401 from the backend, during that lookup
    or anywhere in a view, ends the session and sends the browser back to
    the login page.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.store = SessionStore(request.session)
        request.api = ApiClient(token=request.store.token)

        if request.store.is_authenticated and not request.store.hydrated:
            try:
                request.store.resolve_school_name(
                    lambda: services.list_schools(request.api)
                )
            except Unauthorized:
                return self.sign_out(request)
            except ApiError as exc:
                logger.warning("Could not resolve school name: %s", exc)

        return self.get_response(request)

    def process_exception(self, request, exception):
        if not isinstance(exception, Unauthorized):
            return None
        return self.sign_out(request)

    def sign_out(self, request):
        logger.info("Backend rejected the session token, signing out")
        request.store.clear()
        messages.error(request, SESSION_EXPIRED)
        return redirect("accounts:login")
