from rest_framework.permissions import BasePermission

from users.auth_context import AuthContext


class IsClubAdmin(BasePermission):
    """Staff, superusers and members whose profile role is admin."""

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            return False
        return AuthContext.from_user(user).is_admin
