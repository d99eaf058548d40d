from functools import wraps

from django.shortcuts import redirect


def landing_redirect(user):
    """Redirect to the colleges of the user's school, or None without one."""
    if user is None or not user.school_id:
        return None
    return redirect("catalog:college_list", school_id=user.school_id)


def token_required(view_func):
    """Send visitors without a backend token to the login page."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.store.is_authenticated:
            return redirect("accounts:login")
        return view_func(request, *args, **kwargs)

    return _wrapped


def anonymous_required(view_func):
    """Send signed-in users away from the login and signup pages."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if request.store.is_authenticated:
            response = landing_redirect(request.store.user)
            if response is not None:
                return response
        return view_func(request, *args, **kwargs)

    return _wrapped
