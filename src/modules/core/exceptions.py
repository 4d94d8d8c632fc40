"""Shared domain error hierarchy and the DRF exception handler.

Every bounded context raises subclasses of these kinds from its Service
Layer.  Views translate them into HTTP responses explicitly; anything that
escapes a view is mapped by ``api_exception_handler`` using the same table.

``Validation``, ``NotFound``, ``Forbidden`` and ``Conflict`` are
deterministic and must not be retried.  ``StorageFailure`` is transient:
all writes are transactional, so the whole operation may be retried.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class for every business-level failure."""

    code = "error"
    http_status = status.HTTP_400_BAD_REQUEST
    retryable = False

    def __init__(self, message: str = "", field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": str(self), "code": self.code}
        if self.field:
            payload["field"] = self.field
        return payload


class ValidationFailed(DomainError):
    """Malformed or missing input; ``field`` names the offending field."""

    code = "validation"
    http_status = status.HTTP_400_BAD_REQUEST


class NotFound(DomainError):
    """A referenced Customer / Order / HistoryEntry is absent."""

    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND


class Forbidden(DomainError):
    """The caller's role lacks permission for the requested mutation."""

    code = "forbidden"
    http_status = status.HTTP_403_FORBIDDEN


class Conflict(DomainError):
    """Unique-constraint violation or exhausted identifier retries."""

    code = "conflict"
    http_status = status.HTTP_409_CONFLICT


class StorageFailure(DomainError):
    """Underlying transaction / storage error (safe to retry)."""

    code = "storage_failure"
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True


def error_response(exc: DomainError) -> Response:
    """Render a domain error with its mapped HTTP status."""
    return Response(exc.as_payload(), status=exc.http_status)


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Optional[Response]:
    """DRF ``EXCEPTION_HANDLER``: DRF errors first, then domain/storage errors."""
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, DomainError):
        return error_response(exc)

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.error(
            "api.storage_failure",
            view=type(view).__name__ if view else None,
            error=str(exc),
        )
        return error_response(StorageFailure("Storage temporarily unavailable."))

    return None


def validation_failed_from_pydantic(exc: Any) -> ValidationFailed:
    """Convert a Pydantic ``ValidationError`` into ``ValidationFailed``.

    The first reported error decides ``field`` and the message.
    """
    errors = exc.errors()
    if not errors:
        return ValidationFailed(str(exc))
    first = errors[0]
    location = first.get("loc") or ()
    field = str(location[0]) if location else None
    message = str(first.get("msg", "Invalid value.")).removeprefix("Value error, ")
    return ValidationFailed(message, field=field)


def validation_failed_from_serializer(errors: dict[str, Any]) -> ValidationFailed:
    """Convert DRF ``serializer.errors`` into ``ValidationFailed``.

    Object-level errors (``non_field_errors``) carry no ``field``.
    """
    if not errors:
        return ValidationFailed("Invalid input.")
    field, messages = next(iter(errors.items()))
    message = messages[0] if isinstance(messages, list) and messages else messages
    if field == "non_field_errors":
        field = None
    return ValidationFailed(str(message), field=field)
