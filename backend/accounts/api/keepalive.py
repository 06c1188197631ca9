import logging
import uuid

from django.conf import settings
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions_api import KeepaliveSessionAuthentication
from accounts.session import KEEPALIVE_TOKEN_KEY, SessionContext

logger = logging.getLogger(__name__)

# Non-standard "login timeout" status used by the browser heartbeat script.
SESSION_EXPIRED = 440


def _error(code: str, status: int, **extra):
    return Response({'ok': False, 'error': code, **extra}, status=status)


def _origin_allowed(request, origin: str) -> bool:
    own_origin = f'{request.scheme}://{request.get_host()}'
    allowed = {own_origin, *getattr(settings, 'GATEPASS_KEEPALIVE_ALLOWED_ORIGINS', [])}
    return origin.rstrip('/') in allowed


def session_ttl(request) -> int:
    """Seconds left on the identity-provider token, else on the session itself."""
    context = SessionContext.from_request(request)
    if context is not None and context.is_federated:
        ttl = context.token_ttl()
        if ttl:
            return ttl
    return max(0, int(request.session.get_expiry_age()))


class KeepaliveCsrfView(APIView):
    """Mint the heartbeat token. GET /api/keepalive/csrf"""
    authentication_classes = [KeepaliveSessionAuthentication]
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        token = str(uuid.uuid4())
        request.session[KEEPALIVE_TOKEN_KEY] = token
        return Response({'csrf': token})


class KeepaliveView(APIView):
    """Session heartbeat. POST /api/keepalive

    The token minted by ``KeepaliveCsrfView`` must come back in the
    ``X-CSRF-TOKEN`` header; it is rotated on every successful call.
    """
    authentication_classes = [KeepaliveSessionAuthentication]
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        user = getattr(request, 'user', None)
        if not user or not user.is_authenticated:
            return _error('NOT_AUTHENTICATED', 401)

        session = request.session
        if not session.session_key:
            return _error('NO_SESSION', SESSION_EXPIRED)

        expected = session.get(KEEPALIVE_TOKEN_KEY)
        if not expected:
            return _error('NO_CSRF', SESSION_EXPIRED, detail='No CSRF token in session')

        if request.headers.get('X-CSRF-TOKEN') != expected:
            logger.warning('Keepalive token mismatch for %s', user.username)
            return _error('CSRF', 403)

        origin = request.headers.get('Origin')
        if origin and not _origin_allowed(request, origin):
            logger.warning('Keepalive from foreign origin %s for %s', origin, user.username)
            return _error('BAD_ORIGIN', 403)

        rotated = str(uuid.uuid4())
        session[KEEPALIVE_TOKEN_KEY] = rotated
        return Response({'ok': True, 'ttl': session_ttl(request), 'csrf': rotated})


__all__ = ['KeepaliveCsrfView', 'KeepaliveView']
