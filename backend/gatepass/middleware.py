import logging
import time
from typing import Callable

from django.conf import settings
from django.http import HttpRequest, HttpResponse

logger = logging.getLogger('django.request')


def _principal(request: HttpRequest) -> str:
    user = getattr(request, 'user', None)
    if user is None or not getattr(user, 'is_authenticated', False):
        return 'anonymous'
    return f'{user.username}[{getattr(user, "utype", "")}]'


class SlowRequestLoggingMiddleware:
    """Warn about gate-pass requests slower than SLOW_REQUEST_LOG_MS.

    Backups and batch QR generation run on the request thread, so the
    threshold is read per request to allow tuning without a restart.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest):
        if not getattr(settings, 'SLOW_REQUEST_LOG_ENABLED', True):
            return self.get_response(request)

        threshold_ms = int(getattr(settings, 'SLOW_REQUEST_LOG_MS', 1200))
        started = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        if elapsed_ms >= threshold_ms:
            logger.warning(
                'SLOW_REQUEST method=%s path=%s status=%s duration_ms=%.2f principal=%s',
                request.method,
                request.path,
                getattr(response, 'status_code', 'NA'),
                elapsed_ms,
                _principal(request),
            )
        return response
