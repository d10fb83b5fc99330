# hospital_core/audit/api/serializers.py
from rest_framework import serializers

from hospital_core.audit.models import AuditLogEntry


class AuditLogEntrySerializer(serializers.ModelSerializer):
    # Keep API field name "timestamp", mapped to the model's created_at
    timestamp = serializers.DateTimeField(source="created_at", read_only=True)
    user_id = serializers.IntegerField(read_only=True, allow_null=True)
    username = serializers.CharField(source="user.get_username", read_only=True, default=None)

    class Meta:
        model = AuditLogEntry
        fields = [
            "id",
            "user_id",
            "username",
            "action",
            "resource",
            "resource_id",
            "method",
            "endpoint",
            "ip_address",
            "user_agent",
            "request_body",
            "response_status",
            "changes",
            "severity",
            "success",
            "metadata",
            "timestamp",
        ]
        read_only_fields = fields
