from rest_framework import permissions
from rest_framework.authentication import SessionAuthentication

from .access import is_allowed
from .roles import role_of


class RouteRolePermission(permissions.BasePermission):
    """Applies ``accounts.access.ROUTE_RULES`` to DRF requests (session or JWT)."""

    message = 'Your role does not allow this endpoint.'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        if not user or not user.is_authenticated:
            return False
        return is_allowed(request.path, role_of(user))


class KeepaliveSessionAuthentication(SessionAuthentication):
    """Session auth without Django's CSRF check; the keepalive view checks its own token."""

    def enforce_csrf(self, request):
        return None
