# hospital_core/common/api/exceptions.py

from __future__ import annotations

import logging
import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope.
    Reusable from Django middleware (JsonResponse) and DRF (Response).
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    Use when business rules block an action (slot taken, already dispensed, ...).
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)
        self.error_code = code or self.default_code


class InsufficientStockError(ConflictError):
    """
    Raised by dispensation when a line item cannot be covered.
    Names the medicine so the pharmacy UI can say which item is short.
    """
    default_detail = "Insufficient stock."
    default_code = "insufficient_stock"

    def __init__(self, *, medicine_id=None, medicine_name: str = "", available: int = 0, requested: int = 0):
        self.medicine_id = medicine_id
        self.medicine_name = medicine_name
        self.available = available
        self.requested = requested
        super().__init__(detail=f"Insufficient stock for {medicine_name}. Available: {available}")


class LockTimeoutError(ConflictError):
    """
    Row lock could not be acquired in time (or the database aborted a deadlock).
    The whole unit of work was rolled back; the caller may retry.
    """
    default_detail = "Resource is busy, please retry."
    default_code = "lock_timeout"


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, ConflictError):
        return exc.error_code
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def _details_for(exc: Exception, details: Any) -> Any:
    if isinstance(exc, InsufficientStockError):
        return {
            "medicine_id": str(exc.medicine_id) if exc.medicine_id else None,
            "medicine_name": exc.medicine_name,
            "available": exc.available,
            "requested": exc.requested,
        }
    return details


def _message_and_details(data: Any) -> tuple[str, Any]:
    """
    Split DRF's response.data into (message, details).

    {"detail": "Slot taken"}                 -> ("Slot taken", None)
    {"detail": "...", "extra": 1}            -> ("...", {"extra": 1})
    ["Invalid appointment"]                  -> ("Invalid appointment", None)
    {"doctor": ["This field is required."]}  -> ("Request failed.", {...})
    """
    if isinstance(data, dict) and "detail" in data:
        rest = {k: v for k, v in data.items() if k != "detail"}
        return str(data["detail"]), rest or None
    if isinstance(data, list) and len(data) == 1:
        return str(data[0]), None
    return "Request failed.", data


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled API error", exc_info=exc)
        envelope = build_error_envelope(
            request=request,
            code="server_error",
            message="Unexpected server error.",
        )
        return Response(envelope, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    message, details = _message_and_details(response.data)
    envelope = build_error_envelope(
        request=request,
        code=_code_for(exc, response.status_code),
        message=message,
        details=_details_for(exc, details),
    )
    return Response(envelope, status=response.status_code, headers=response.headers)
