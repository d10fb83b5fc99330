# hospital_core/audit/middleware.py
from __future__ import annotations

import json
import logging

from hospital_core.audit import classify
from hospital_core.audit.emitters import AuditEmitter, AuditEntry, get_audit_emitter
from hospital_core.common.logging import get_request_id
from hospital_core.common.permissions import user_roles

logger = logging.getLogger(__name__)


def _client_ip(request) -> str | None:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.META.get("REMOTE_ADDR") or None


def _json_body(request):
    if request.method not in classify.WRITE_METHODS:
        return None
    if "json" not in (request.content_type or ""):
        return None
    # Reading .body caches it, DRF still parses from the cached stream.
    raw = request.body
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


class AuditLogMiddleware:
    """
    Records state-changing API calls (and reads of sensitive resources) into
    the audit trail after the response has been produced.

    Must sit after AuthenticationMiddleware. DRF authenticates inside the view
    and copies the user back onto the Django request, so by the time the
    response comes back request.user is the API principal.

    Nothing in here can change or fail the response: every error while
    building or emitting the entry is logged and swallowed.
    """

    def __init__(self, get_response, emitter: AuditEmitter | None = None):
        self.get_response = get_response
        self._emitter = emitter

    @property
    def emitter(self) -> AuditEmitter:
        return self._emitter or get_audit_emitter()

    def __call__(self, request):
        body = None
        try:
            body = _json_body(request)
        except Exception:
            logger.warning("Could not capture request body for audit", exc_info=True)

        response = self.get_response(request)

        try:
            entry = self._build_entry(request, response, body)
            if entry is not None:
                self.emitter.emit(entry)
        except Exception:
            logger.exception("Audit logging failed for %s %s", request.method, request.path)

        return response

    def _build_entry(self, request, response, body) -> AuditEntry | None:
        user = getattr(request, "user", None)
        authenticated = bool(user and getattr(user, "is_authenticated", False))

        if not classify.should_audit(method=request.method, path=request.path, authenticated=authenticated):
            return None

        renderer_context = getattr(response, "renderer_context", None) or {}
        view = renderer_context.get("view")
        view_action = getattr(view, "action", None)

        resolver_match = getattr(request, "resolver_match", None)
        url_kwargs = resolver_match.kwargs if resolver_match else {}

        resource = classify.resource_for(request.path)
        status_code = response.status_code

        return AuditEntry(
            action=classify.action_for(request.method, resource, view_action),
            resource=resource,
            resource_id=classify.resource_id_for(url_kwargs, body),
            user_id=user.pk if authenticated else None,
            method=request.method,
            endpoint=request.path,
            ip_address=_client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
            request_body=classify.redact(body) if body is not None else None,
            response_status=status_code,
            severity=str(classify.severity_for(request.method, request.path)),
            success=200 <= status_code < 400,
            metadata={
                "query": {k: v if len(v) > 1 else v[0] for k, v in request.GET.lists()},
                "roles": sorted(user_roles(user)) if authenticated else [],
                "request_id": get_request_id() or getattr(request, "request_id", None),
            },
        )
