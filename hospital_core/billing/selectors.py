# hospital_core/billing/selectors.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from hospital_core.billing.models import Invoice


def get_invoice(*, invoice_id) -> Invoice:
    try:
        return Invoice.objects.select_related("patient").prefetch_related("payments").get(id=invoice_id)
    except (Invoice.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("Invoice not found")


def list_invoices(*, patient_id=None, status: str | None = None, start_date=None, end_date=None) -> QuerySet[Invoice]:
    qs = Invoice.objects.select_related("patient").prefetch_related("payments")
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if status:
        qs = qs.filter(status=status)
    if start_date:
        qs = qs.filter(created_at__date__gte=start_date)
    if end_date:
        qs = qs.filter(created_at__date__lte=end_date)
    return qs.order_by("-created_at")
