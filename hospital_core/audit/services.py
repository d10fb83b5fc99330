# hospital_core/audit/services.py
from __future__ import annotations

from typing import Any, Dict, Optional

from django.db import transaction

from hospital_core.audit.emitters import AuditEmitter, AuditEntry, get_audit_emitter
from hospital_core.audit.models import Severity
from hospital_core.common.logging import get_request_id


class AuditService:
    """
    Explicit audit entries written by services (as opposed to the ones the
    request interceptor derives from HTTP traffic).

    Emission is deferred to the outermost commit, so work that rolls back
    never leaves an entry behind.
    """

    @staticmethod
    def record(
        *,
        action: str,
        resource: str,
        resource_id: Any = "",
        actor_user_id: int | None,
        changes: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        severity: str = Severity.MEDIUM,
        emitter: AuditEmitter | None = None,
        using: str | None = None,
    ) -> AuditEntry:
        meta = dict(metadata or {})
        request_id = get_request_id()
        if request_id:
            meta.setdefault("request_id", request_id)

        entry = AuditEntry(
            action=action,
            resource=resource,
            resource_id=str(resource_id or ""),
            user_id=actor_user_id,
            changes=changes,
            severity=str(severity),
            success=True,
            metadata=meta,
        )

        target = emitter or get_audit_emitter()
        transaction.on_commit(lambda: target.emit(entry), using=using)
        return entry
