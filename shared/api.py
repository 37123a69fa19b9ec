"""
DRF integration for the shared error types.

Every API error body has the shape ``{"error": message}``; validation
errors from serializers keep their field mapping under ``details``.
"""

from __future__ import annotations

import structlog
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .exceptions import MemberHubError

logger = structlog.get_logger(__name__)


def _first_message(detail) -> str:
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return "Invalid request"
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid request"
    return str(detail)


def exception_handler(exc, context):
    """Render domain and DRF exceptions as ``{"error": ...}`` bodies."""
    if isinstance(exc, MemberHubError):
        return Response({"error": exc.message}, status=exc.status_code)

    if isinstance(exc, Http404):
        return Response({"error": "Not found"}, status=status.HTTP_404_NOT_FOUND)

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        response.data = {"error": _first_message(exc.detail), "details": exc.detail}
    elif isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response.data = {"error": "Unauthorized", "detail": _first_message(exc.detail)}
    elif isinstance(exc, exceptions.APIException):
        response.data = {"error": _first_message(exc.detail)}
    return response


def server_error(message: str, exc: Exception, **event) -> Response:
    """Log an unexpected failure and return a 500 with an operation-specific message."""
    logger.error("api.unexpected_error", error=str(exc), exc_info=True, **event)
    return Response({"error": message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class OperationErrorMixin:
    """Turn unexpected view errors into ``{"error": <operation message>}`` 500s.

    Views map their ``action`` (viewsets) or HTTP method (plain views) to a
    message in ``error_messages``.
    """

    error_messages: dict[str, str] = {}

    def handle_exception(self, exc):  # type: ignore
        if isinstance(exc, (exceptions.APIException, MemberHubError, Http404, DjangoPermissionDenied)):
            return super().handle_exception(exc)
        key = getattr(self, "action", None) or self.request.method.lower()
        message = self.error_messages.get(key)
        if message is None:
            return super().handle_exception(exc)
        return server_error(message, exc, view=type(self).__name__, operation=key)
