from rest_framework.permissions import BasePermission

from accounts.session import TOKEN_KEY


class HasSessionToken(BasePermission):
    message = "Log in to browse the repository."

    def has_permission(self, request, view):
        return bool(request.session.get(TOKEN_KEY))
