# hospital_core/audit/models.py
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from hospital_core.common.models import UUIDModel


class Severity(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"
    CRITICAL = "critical", "Critical"


class AuditLogEntry(UUIDModel):
    """
    Immutable audit record, written either by the request interceptor or
    directly by services (e.g. CREATE_APPOINTMENT, DISPENSE_MEDICINE).
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="audit_log_entries",
        null=True,
        blank=True,
    )

    action = models.CharField(max_length=128, db_index=True)  # e.g. "DISPENSE_PRESCRIPTIONS"
    resource = models.CharField(max_length=64, db_index=True)  # e.g. "prescriptions"
    resource_id = models.CharField(max_length=64, blank=True, db_index=True)

    method = models.CharField(max_length=10, blank=True)
    endpoint = models.CharField(max_length=512, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)

    request_body = models.JSONField(null=True, blank=True)
    response_status = models.PositiveSmallIntegerField(null=True, blank=True)
    changes = models.JSONField(null=True, blank=True)

    severity = models.CharField(max_length=16, choices=Severity.choices, default=Severity.LOW)
    success = models.BooleanField(default=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "audit_log_entry"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["resource", "resource_id"], name="audit_resource_idx"),
            models.Index(fields=["user", "created_at"], name="audit_user_created_idx"),
            models.Index(fields=["severity", "created_at"], name="audit_severity_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.resource}:{self.resource_id or '-'} @ {self.created_at}"

    def save(self, *args, **kwargs):
        # UUID PK exists even before first save, so use _state.adding
        if not self._state.adding:
            raise ValidationError("AuditLogEntry is immutable and cannot be modified once created.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("AuditLogEntry is immutable and cannot be deleted.")
