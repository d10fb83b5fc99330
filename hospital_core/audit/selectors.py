# hospital_core/audit/selectors.py
from __future__ import annotations

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from hospital_core.audit.models import AuditLogEntry


def list_audit_entries() -> QuerySet[AuditLogEntry]:
    return AuditLogEntry.objects.select_related("user").order_by("-created_at")


def get_audit_entry(*, entry_id) -> AuditLogEntry:
    try:
        return list_audit_entries().get(id=entry_id)
    except AuditLogEntry.DoesNotExist:
        raise NotFound("Audit log entry not found")


def entries_for_resource(*, resource: str, resource_id) -> QuerySet[AuditLogEntry]:
    return list_audit_entries().filter(resource=resource, resource_id=str(resource_id))
