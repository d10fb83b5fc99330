# hospital_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from hospital_core.audit.api.serializers import AuditLogEntrySerializer
from hospital_core.audit.filters import AuditLogEntryFilter
from hospital_core.audit.models import AuditLogEntry
from hospital_core.audit.selectors import get_audit_entry, list_audit_entries
from hospital_core.common.api.pagination import paginate
from hospital_core.common.permissions import AuditPermission


@extend_schema(tags=["Audit"])
class AuditLogViewSet(viewsets.GenericViewSet):
    """
    Read-only access to the audit trail (administrators only).
    """
    permission_classes = [AuditPermission]

    # drf-spectacular needs these to type the path params
    serializer_class = AuditLogEntrySerializer
    queryset = AuditLogEntry.objects.none()
    filterset_class = AuditLogEntryFilter
    lookup_value_regex = r"[0-9a-fA-F-]{32,36}"

    def get_queryset(self):
        return list_audit_entries()

    def list(self, request):
        qs = self.filter_queryset(self.get_queryset())
        return paginate(request, qs, AuditLogEntrySerializer)

    def retrieve(self, request, pk=None):
        entry = get_audit_entry(entry_id=pk)
        return Response(AuditLogEntrySerializer(entry).data, status=status.HTTP_200_OK)
