"""
DRF exception handler that never leaks internals.

``exceptions`` must not import this module: importing ``rest_framework.views``
loads the default authentication classes, which import ``exceptions``.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    Known API errors are rendered by DRF's default handler.  Anything else
    (database errors, bugs) is logged with its traceback and answered with
    a generic 500 payload.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.exception(
        "Unhandled error in %s: %s", view.__class__.__name__ if view else "?", exc
    )
    return Response(
        {"detail": "Internal server error."},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
