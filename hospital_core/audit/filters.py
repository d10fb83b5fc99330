# hospital_core/audit/filters.py
import django_filters

from hospital_core.audit.models import AuditLogEntry, Severity


class AuditLogEntryFilter(django_filters.FilterSet):
    user = django_filters.NumberFilter(field_name="user_id")
    action = django_filters.CharFilter(field_name="action", lookup_expr="iexact")
    resource = django_filters.CharFilter(field_name="resource", lookup_expr="iexact")
    resource_id = django_filters.CharFilter(field_name="resource_id")
    severity = django_filters.ChoiceFilter(choices=Severity.choices)
    success = django_filters.BooleanFilter(field_name="success")
    start_date = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    end_date = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = AuditLogEntry
        fields = ["user", "action", "resource", "resource_id", "severity", "success"]
