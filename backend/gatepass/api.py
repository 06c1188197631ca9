import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(response.data, dict):
            response.data['status_code'] = response.status_code
        return response

    # Anything DRF does not know about is an unexpected server-side failure.
    view = context.get('view')
    logger.exception('Unhandled API error in %s', type(view).__name__ if view else 'unknown view')
    return Response(
        {'error': 'Internal server error', 'status_code': status.HTTP_500_INTERNAL_SERVER_ERROR},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
