import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST

from catalog import services as catalog_services
from catalog.client import ApiError, Unauthorized

from . import services
from .decorators import anonymous_required, landing_redirect
from .forms import LoginForm, SignupForm

logger = logging.getLogger(__name__)


def home(request):
    if request.store.is_authenticated:
        response = landing_redirect(request.store.user)
        if response is not None:
            return response
    return redirect("accounts:login")


def start_session(request, result):
    request.store.set_user(result.user, token=result.token)
    request.api.token = result.token
    try:
        request.store.resolve_school_name(
            lambda: catalog_services.list_schools(request.api)
        )
    except Unauthorized:
        raise
    except ApiError as exc:
        logger.warning("Could not resolve school name for %s: %s", result.user.id, exc)

    return landing_redirect(result.user) or redirect("accounts:home")




#-------------------------
#   Login and Logout
#-------------------------

@anonymous_required
def login_view(request):
    form = LoginForm(request.POST or None)

    if request.method == "POST":
        if not form.is_valid():
            messages.error(request, "Please fill in all fields")
        else:
            try:
                result = services.login(
                    request.api,
                    form.cleaned_data["email"],
                    form.cleaned_data["password"],
                )
            except ApiError as exc:
                messages.error(request, f"Login failed: {exc.message}")
            else:
                messages.success(request, "Login successful")
                return start_session(request, result)

    return render(request, "accounts/login.html", {"form": form})


@anonymous_required
def signup_view(request):
    try:
        schools = catalog_services.list_schools(request.api)
    except ApiError as exc:
        messages.error(request, exc.message)
        schools = []

    form = SignupForm(request.POST or None, schools=schools)

    if request.method == "POST":
        if form.is_valid():
            try:
                result = services.register(request.api, form.payload())
            except ApiError as exc:
                messages.error(request, f"Registration failed: {exc.message}")
            else:
                messages.success(request, "Registration successful")
                return start_session(request, result)
        elif "role" in form.errors:
            messages.error(request, "Role is required")

    return render(request, "accounts/signup.html", {"form": form})


@require_POST
def logout_view(request):
    request.session.flush()
    return redirect("accounts:login")


def not_found(request, exception=None):
    return render(request, "404.html", status=404)
