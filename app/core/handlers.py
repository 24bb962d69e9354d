"""
DRF exception handler (settings.REST_FRAMEWORK["EXCEPTION_HANDLER"]).

Kept apart from core.exceptions because importing rest_framework.views
pulls in the authentication classes, which need a ready app registry.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    Render exceptions raised by API views.

    - BaseApplicationError subclasses render as their to_dict() with
      their status_code
    - DRF APIExceptions (validation, 401, 403, 404, throttling) keep DRF's
      default rendering
    - Anything else is logged with its traceback and returned as a generic
      500 so internals never leak to clients
    """
    if isinstance(exc, BaseApplicationError):
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.error(
        f"Unhandled exception in {view.__class__.__name__ if view else 'unknown view'}",
        exc_info=exc,
    )
    return Response(
        {"error": "Internal server error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
