# hospital_core/audit/admin.py
from django.contrib import admin

from hospital_core.audit.models import AuditLogEntry


@admin.register(AuditLogEntry)
class AuditLogEntryAdmin(admin.ModelAdmin):
    list_display = (
        "action",
        "resource",
        "resource_id",
        "user",
        "severity",
        "success",
        "response_status",
        "created_at",
    )
    list_filter = ("severity", "success", "resource")
    search_fields = ("action", "resource", "resource_id", "endpoint")
    readonly_fields = [f.name for f in AuditLogEntry._meta.fields]
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
