"""Route-prefix authorization.

``ROUTE_RULES`` is the single source of truth for who may load which page or
API. Rules are checked in order and the first matching prefix wins, so more
specific prefixes must come before the general ones they overlap.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import FrozenSet, Optional, Tuple
from urllib.parse import urlencode

from django.conf import settings
from django.http import JsonResponse
from django.shortcuts import redirect, render

from .roles import ALL_ROLES, OPERATOR_ROLES, Role, role_of

logger = logging.getLogger(__name__)

PUBLIC: FrozenSet[Role] = frozenset()

ADMIN_ONLY = frozenset({Role.ADMIN})
ADMIN_ENTRY = frozenset({Role.ADMIN, Role.ENTRY})
ADMIN_ENTRY_VIEWER = frozenset({Role.ADMIN, Role.ENTRY, Role.VIEWER})
ADMIN_VIEWER = frozenset({Role.ADMIN, Role.VIEWER})
ADMIN_SEARCHER = frozenset({Role.ADMIN, Role.SEARCHER})


@dataclass(frozen=True)
class RouteRule:
    prefix: str
    roles: Optional[FrozenSet[Role]]
    exact: bool = False

    @property
    def is_public(self) -> bool:
        return self.roles is not None and not self.roles

    def matches(self, path: str) -> bool:
        if self.exact:
            return path == self.prefix or path == self.prefix + '/'
        if self.prefix.endswith('/'):
            return path.startswith(self.prefix) or path == self.prefix[:-1]
        return path == self.prefix or path.startswith(self.prefix + '/') or path.startswith(self.prefix + '?')


ROUTE_RULES: Tuple[RouteRule, ...] = (
    RouteRule('/', PUBLIC, exact=True),
    RouteRule('/login', PUBLIC),
    RouteRule('/logout', PUBLIC),
    RouteRule('/oauth2/', PUBLIC),
    RouteRule('/error', PUBLIC),
    RouteRule('/static/', PUBLIC),
    RouteRule('/favicon.ico', PUBLIC),
    RouteRule('/api/token/', PUBLIC),

    RouteRule('/dashboard', ALL_ROLES),

    RouteRule('/admin/', ADMIN_ONLY),
    RouteRule('/qr/', ADMIN_ONLY),

    RouteRule('/vehicle/pending', ADMIN_ONLY),
    RouteRule('/vehicle/approve', ADMIN_ONLY),
    RouteRule('/vehicle/reject', ADMIN_ONLY),
    RouteRule('/vehicle/update', ADMIN_ONLY),
    RouteRule('/vehicle/delete', ADMIN_ONLY),
    RouteRule('/vehicle/certificate/delete', ADMIN_ONLY),

    RouteRule('/vehicle/insert', ADMIN_ENTRY),
    RouteRule('/vehicle/add', ADMIN_ENTRY),

    RouteRule('/staff/', ADMIN_ENTRY_VIEWER),
    RouteRule('/student/', ADMIN_ENTRY_VIEWER),
    RouteRule('/view/detail', ADMIN_ENTRY_VIEWER),
    RouteRule('/idcard/', ADMIN_ENTRY_VIEWER),
    RouteRule('/vehicle/certificate/', ADMIN_ENTRY_VIEWER),

    RouteRule('/view/images/delete', ADMIN_ONLY),
    RouteRule('/view/images', ADMIN_VIEWER),
    RouteRule('/uploads/images/', ADMIN_VIEWER),
    RouteRule('/api/persons/list', ADMIN_VIEWER),
    RouteRule('/api/students/', ADMIN_VIEWER),

    RouteRule('/vehicle/search', ADMIN_SEARCHER),
    RouteRule('/vehicle/scanner', ADMIN_SEARCHER),
    RouteRule('/search/', ADMIN_SEARCHER),

    RouteRule('/my/vehicle', ALL_ROLES),
    RouteRule('/api/keepalive', ALL_ROLES),
    RouteRule('/api/user/', ALL_ROLES),
    RouteRule('/api/', OPERATOR_ROLES),
)

# Anything not listed needs a login but no particular role.
DEFAULT_RULE = RouteRule('', ALL_ROLES)


def rule_for(path: str) -> RouteRule:
    for rule in ROUTE_RULES:
        if rule.matches(path):
            return rule
    return DEFAULT_RULE


def is_allowed(path: str, role: Optional[Role]) -> bool:
    rule = rule_for(path)
    if rule.is_public:
        return True
    if role is None:
        return False
    return role in rule.roles


def _is_api(request) -> bool:
    return request.path.startswith('/api/')


def _login_redirect(request):
    query = urlencode({'next': request.get_full_path()})
    return redirect(f'{settings.LOGIN_URL}?{query}')


def forbidden(request, message: str = 'You do not have access to this page.'):
    """403 response: JSON for API callers, the access-denied page otherwise."""
    if _is_api(request):
        return JsonResponse({'error': 'FORBIDDEN', 'detail': message}, status=403)
    return render(request, 'errors/403.html', {'message': message}, status=403)


class RoleAccessMiddleware:
    """Enforce ``ROUTE_RULES`` before any view runs.

    Session-authenticated principals are checked here. API requests that
    carry a bearer token are left to DRF, whose permission classes apply the
    same table once the JWT has been decoded.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        rule = rule_for(request.path)
        if rule.is_public:
            return self.get_response(request)

        user = getattr(request, 'user', None)
        authenticated = bool(user and user.is_authenticated)

        if not authenticated:
            if _is_api(request):
                if request.META.get('HTTP_AUTHORIZATION', '').startswith('Bearer '):
                    return self.get_response(request)
                return JsonResponse({'ok': False, 'error': 'NOT_AUTHENTICATED'}, status=401)
            return _login_redirect(request)

        role = role_of(user)
        if role not in rule.roles:
            logger.warning('Access denied: user=%s role=%s path=%s', user.username, role, request.path)
            return forbidden(request)

        return self.get_response(request)


def role_required(*roles: Role):
    """View decorator for checks finer than a route prefix (e.g. POST-only admin actions)."""
    allowed = frozenset(roles)

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            user = getattr(request, 'user', None)
            if not user or not user.is_authenticated:
                return _login_redirect(request)
            if role_of(user) not in allowed:
                return forbidden(request)
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator
