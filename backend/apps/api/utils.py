from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Dict, Optional

from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.serializers import as_serializer_error

DEFAULT_ERROR_STATUS = status.HTTP_400_BAD_REQUEST

# Largest value a BIGINT primary key can hold.
MAX_ROW_ID = 2**63 - 1

ERROR_STATUS_MAP = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "METHOD_NOT_ALLOWED": status.HTTP_405_METHOD_NOT_ALLOWED,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "TOO_MANY_REQUESTS": status.HTTP_429_TOO_MANY_REQUESTS,
    "SERVER_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "DEPENDENCY_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "INTERNAL_INVARIANT": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "SERVICE_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    return value


def _normalize_details(details: Any) -> Any:
    if isinstance(details, ValidationError):
        return as_serializer_error(details)
    if isinstance(details, Exception):
        return {"type": details.__class__.__name__}
    return _jsonable(details)


def error_response(
    code: str,
    message: str,
    details: Optional[Any] = None,
    http_status: Optional[int] = None,
    *,
    hint: Optional[str] = None,
    extra: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Response:
    """
    Build the error envelope shared by every endpoint:
    ``{"error": {"code", "message", "status", "details"?, "hint"?, "extra"?}}``.

    Args:
        code: Machine-readable error identifier, upper-cased on output.
        message: Human-readable explanation of the error.
        details: Optional context (validation errors, ids, checkout stage).
        http_status: Explicit HTTP status; defaults to ``ERROR_STATUS_MAP[code]``.
        hint: Optional remediation advice.
        extra: Optional mapping of additional machine-readable fields.
        headers: Optional response headers.
    """

    for label, value in (("code", code), ("message", message)):
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"error_response {label} must be a non-empty string")
    if hint is not None and not isinstance(hint, str):
        raise TypeError("error_response hint must be a string")
    for label, value in (("extra", extra), ("headers", headers)):
        if value is not None and not isinstance(value, Mapping):
            raise TypeError(f"error_response {label} must be a mapping")

    normalized_code = code.strip().upper()
    status_code = int(
        http_status
        if http_status is not None
        else ERROR_STATUS_MAP.get(normalized_code, DEFAULT_ERROR_STATUS)
    )
    if not 100 <= status_code <= 599:
        raise ValueError(f"error_response got invalid HTTP status {status_code}")

    body: Dict[str, Any] = {
        "code": normalized_code,
        "message": message.strip(),
        "status": status_code,
    }
    if details is not None:
        body["details"] = _normalize_details(details)
    if hint is not None:
        body["hint"] = hint
    if extra:
        body["extra"] = _jsonable(dict(extra))

    headers_dict = (
        {str(key): str(value) for key, value in headers.items()} if headers else None
    )
    return Response({"error": body}, status=status_code, headers=headers_dict)


def message_response(
    message: str, http_status: int = status.HTTP_200_OK, **fields: Any
) -> Response:
    """Plain ``{"message": ..., **fields}`` acknowledgement used by write endpoints."""
    payload: Dict[str, Any] = {"message": message}
    payload.update(_jsonable(fields))
    return Response(payload, status=http_status)


def path_id(raw: Any) -> int:
    """Row id from a URL segment; ids no table can hold are simply not found."""
    value = int(raw)
    if value > MAX_ROW_ID:
        raise NotFound("Resource not found")
    return value
