# hospital_core/audit/classify.py
from __future__ import annotations

import re
from typing import Any, Iterable

from django.conf import settings

from hospital_core.audit.models import Severity

_API_PREFIX = re.compile(r"^/api/(?:v\d+/)?")

# First segments under /api/ that are never audited.
SKIPPED_RESOURCES = frozenset({"health", "schema", "docs"})

AUTH_ATTEMPT_PATHS = ("/auth/login", "/auth/register")

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

VERB_BY_METHOD = {
    "POST": "CREATE",
    "PUT": "UPDATE",
    "PATCH": "UPDATE",
    "DELETE": "DELETE",
    "GET": "VIEW",
}

# Standard router actions: these are described by the HTTP verb.
_STANDARD_VIEW_ACTIONS = frozenset(
    {"list", "retrieve", "create", "update", "partial_update", "destroy", "metadata"}
)

DEFAULT_REDACT_FIELDS = ("password", "token", "access", "refresh", "accessToken", "refreshToken", "secret")
REDACTED = "[REDACTED]"


def resource_for(path: str) -> str:
    """/api/v1/prescriptions/<id>/dispense/ -> "prescriptions"."""
    if not _API_PREFIX.match(path):
        return "unknown"
    rest = _API_PREFIX.sub("", path, count=1)
    parts = [p for p in rest.split("/") if p]
    return parts[0] if parts else "unknown"


def action_for(method: str, resource: str, view_action: str | None = None) -> str:
    """
    CREATE_PATIENTS, VIEW_PRESCRIPTIONS, ... or, for custom viewset actions,
    the action name itself: DISPENSE_PRESCRIPTIONS, CHECK_IN_APPOINTMENTS.
    """
    if view_action and view_action not in _STANDARD_VIEW_ACTIONS:
        verb = view_action.upper()
    else:
        verb = VERB_BY_METHOD.get(method.upper(), "ACTION")
    return f"{verb}_{resource.upper()}"


def severity_for(method: str, path: str) -> str:
    method = method.upper()

    if method == "DELETE" or "/payment" in path or "/prescription" in path:
        return Severity.CRITICAL

    if method in WRITE_METHODS:
        if "/patient" in path or "/invoice" in path or "/lab" in path:
            return Severity.HIGH
        if method in ("POST", "PUT"):
            return Severity.MEDIUM

    return Severity.LOW


_ID_KWARGS = ("pk", "id", "patient_id", "doctor_id", "appointment_id")


def resource_id_for(url_kwargs: dict | None, body: Any) -> str:
    for key in _ID_KWARGS:
        value = (url_kwargs or {}).get(key)
        if value:
            return str(value)
    if isinstance(body, dict) and body.get("id"):
        return str(body["id"])
    return ""


def redact(value: Any, fields: Iterable[str] | None = None) -> Any:
    """
    Copy of `value` with credential-like keys replaced, at any depth.
    Matching is case-insensitive.
    """
    if fields is None:
        fields = getattr(settings, "AUDIT_REDACT_FIELDS", DEFAULT_REDACT_FIELDS)
    lowered = {f.lower() for f in fields}
    return _redact(value, lowered)


def _redact(value: Any, lowered: set[str]) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if str(k).lower() in lowered else _redact(v, lowered)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(v, lowered) for v in value]
    return value


def is_auth_attempt(path: str) -> bool:
    return any(p in path for p in AUTH_ATTEMPT_PATHS)


def should_audit(*, method: str, path: str, authenticated: bool) -> bool:
    if not _API_PREFIX.match(path):
        return False

    resource = resource_for(path)
    if resource in SKIPPED_RESOURCES:
        return False

    if not authenticated and not is_auth_attempt(path):
        return False

    method = method.upper()
    if method in WRITE_METHODS:
        return True
    if method == "GET":
        return resource in getattr(settings, "AUDIT_READ_RESOURCES", ())
    return False
