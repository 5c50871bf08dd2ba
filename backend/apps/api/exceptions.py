from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from django.core.exceptions import (
    PermissionDenied as DjangoPermissionDenied,
    ValidationError as DjangoValidationError,
)
from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    AuthenticationFailed,
    MethodNotAllowed,
    NotAuthenticated,
    NotFound,
    ParseError,
    PermissionDenied,
    Throttled,
    UnsupportedMediaType,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from apps.api.utils import ERROR_STATUS_MAP, error_response
from apps.common import get_logger

logger = get_logger(__name__).bind(component="api", layer="exception")


class ApplicationError(Exception):
    """
    Domain-level application error raised inside services and returned to views
    as the second element of a ``(value, error)`` pair.

    Subclasses fix ``default_code`` / ``default_status`` / ``default_message`` so
    domain errors can be built from a message (or nothing) plus details.

    Args:
        code: Machine readable error code.
        message: Human readable explanation of the error.
        status_code: Optional explicit HTTP status. If omitted, code mapping is used.
        details: Optional structured details for clients.
        hint: Optional hint for remediation.
        extra: Optional additional machine readable fields.
        headers: Optional mapping of headers to include in the response.
    """

    default_code = "SERVER_ERROR"
    default_status: Optional[int] = None
    default_message = "Something went wrong"

    def __init__(
        self,
        code: Optional[str] = None,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
        hint: Optional[str] = None,
        extra: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, Any]] = None,
    ):
        self.code = code or self.default_code
        self.message = message or self.default_message
        super().__init__(self.message)
        self.status_code = status_code if status_code is not None else self.default_status
        self.details = details
        self.hint = hint
        self.extra = extra
        self.headers = headers

    def to_response(self) -> Response:
        return error_response(
            self.code,
            self.message,
            self.details,
            http_status=self.status_code,
            hint=self.hint,
            extra=self.extra,
            headers=self.headers,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class DomainError(ApplicationError):
    """Base for the taxonomy below: constructed from a message and keyword context only."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Any] = None,
        hint: Optional[str] = None,
        extra: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(
            None,
            message,
            details=details,
            hint=hint,
            extra=extra,
        )


class BadRequestError(DomainError):
    """Caller-correctable input problem (400)."""

    default_code = "VALIDATION_ERROR"
    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class NotFoundError(DomainError):
    default_code = "NOT_FOUND"
    default_status = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ForbiddenError(DomainError):
    default_code = "FORBIDDEN"
    default_status = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class ConflictError(DomainError):
    default_code = "CONFLICT"
    default_status = status.HTTP_409_CONFLICT
    default_message = "Resource conflict"


class DependencyError(DomainError):
    """The row store was unreachable or failed a statement.

    ``details`` always says whether anything was persisted so callers can tell
    "nothing happened" from "partially happened".
    """

    default_code = "DEPENDENCY_ERROR"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "A backing service failed while handling the request"


class InternalInvariantError(DomainError):
    default_code = "INTERNAL_INVARIANT"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal consistency check failed"


# First match wins. Each row: exception types, code, message when the payload
# carries none, whether the payload is echoed back as details.
DRF_ERROR_TABLE: Tuple[Tuple[tuple, str, str, bool], ...] = (
    ((ValidationError,), "VALIDATION_ERROR", "Validation failed", True),
    ((ParseError,), "VALIDATION_ERROR", "Malformed request body", False),
    ((NotAuthenticated,), "UNAUTHORIZED", "Authentication credentials were not provided", False),
    ((AuthenticationFailed,), "UNAUTHORIZED", "Invalid credentials", False),
    ((PermissionDenied, DjangoPermissionDenied), "FORBIDDEN", ForbiddenError.default_message, False),
    ((NotFound, Http404), "NOT_FOUND", NotFoundError.default_message, False),
    ((MethodNotAllowed,), "METHOD_NOT_ALLOWED", "Method not allowed", False),
    ((UnsupportedMediaType,), "VALIDATION_ERROR", "Unsupported media type", False),
    ((Throttled,), "TOO_MANY_REQUESTS", "Too many requests", False),
)

GENERIC_SERVER_MESSAGE = "Something went wrong"


def global_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """DRF ``EXCEPTION_HANDLER``: every failure leaves as the shared error envelope.

    Application errors render themselves. Row store failures become
    ``DEPENDENCY_ERROR``. Anything DRF knows how to answer is re-coded through
    ``DRF_ERROR_TABLE``; the rest is logged with its traceback and hidden
    behind a generic 500.
    """
    log = _request_logger(context)

    if isinstance(exc, ApplicationError):
        server_side = (exc.status_code or 0) >= 500
        (log.error if server_side else log.info)(
            "Handled application error", code=exc.code, status=exc.status_code
        )
        return exc.to_response()

    if isinstance(exc, DatabaseError):
        log.exception("Row store failure reached the exception handler")
        return DependencyError(
            "The data store failed while handling the request",
            details={"type": type(exc).__name__},
        ).to_response()

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(
            exc.message_dict if hasattr(exc, "message_dict") else list(exc.messages)
        )

    drf_response = drf_exception_handler(exc, context)
    if drf_response is None:
        log.exception("Unhandled exception bubbled to global handler")
        return error_response(
            "SERVER_ERROR",
            GENERIC_SERVER_MESSAGE,
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return _recode(exc, drf_response, log)


def _request_logger(context: Dict[str, Any]):
    fields: Dict[str, Any] = {}
    if context.get("view"):
        fields["view"] = type(context["view"]).__name__
    request = context.get("request")
    if request is not None:
        fields["method"] = getattr(request, "method", None)
        fields["path"] = getattr(request, "path", None)
    return logger.bind(**fields) if fields else logger


def _recode(exc: Exception, drf_response: Response, log) -> Response:
    status_code = drf_response.status_code
    payload = drf_response.data
    code, fallback, echo = _lookup(exc, status_code)

    details = payload if echo and payload else None
    hint = None
    if isinstance(exc, Throttled) and exc.wait is not None:
        details = {"retryAfter": int(exc.wait)}
        hint = "Wait before retrying the request"

    if status_code >= 500:
        message, details = GENERIC_SERVER_MESSAGE, None
        log.error("Converted server error", code=code, status=status_code)
    else:
        message = _detail_text(payload) or fallback
        log.info("Converted API exception", code=code, status=status_code)

    headers = dict(drf_response.headers) if getattr(drf_response, "headers", None) else None
    return error_response(
        code, message, details, http_status=status_code, hint=hint, headers=headers
    )


def _lookup(exc: Exception, status_code: int) -> Tuple[str, str, bool]:
    for types, code, fallback, echo in DRF_ERROR_TABLE:
        if isinstance(exc, types):
            return code, fallback, echo
    for code, mapped_status in ERROR_STATUS_MAP.items():
        if mapped_status == status_code:
            return code, GENERIC_SERVER_MESSAGE, False
    return "SERVER_ERROR", GENERIC_SERVER_MESSAGE, False


def _detail_text(payload: Any) -> Optional[str]:
    """A single human sentence from a DRF payload, when it carries one."""
    if isinstance(payload, dict):
        payload = payload.get("detail")
    elif isinstance(payload, list) and payload:
        payload = payload[0]
    return str(payload) if isinstance(payload, str) and payload else None


__all__ = [
    "ApplicationError",
    "DomainError",
    "BadRequestError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "DependencyError",
    "InternalInvariantError",
    "global_exception_handler",
]
