# hospital_core/pharmacy/selectors.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import F, Q, QuerySet
from rest_framework.exceptions import NotFound

from hospital_core.pharmacy.models import Medicine, Prescription


def get_medicine(*, medicine_id) -> Medicine:
    try:
        return Medicine.objects.get(id=medicine_id)
    except (Medicine.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("Medicine not found")


def list_medicines(*, q: str | None = None, category: str | None = None, active_only: bool = True) -> QuerySet[Medicine]:
    qs = Medicine.objects.all()
    if active_only:
        qs = qs.filter(is_active=True)
    if category:
        qs = qs.filter(category__iexact=category)
    qv = (q or "").strip()
    if qv:
        qs = qs.filter(Q(name__icontains=qv) | Q(generic_name__icontains=qv))
    return qs.order_by("name")


def low_stock_medicines() -> QuerySet[Medicine]:
    return Medicine.objects.filter(is_active=True, stock__lte=F("min_stock")).order_by("stock", "name")


def _prescriptions() -> QuerySet[Prescription]:
    return Prescription.objects.select_related("patient", "doctor").prefetch_related("items__medicine")


def get_prescription(*, prescription_id) -> Prescription:
    try:
        return _prescriptions().get(id=prescription_id)
    except (Prescription.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("Prescription not found")


def list_prescriptions(*, patient_id=None, doctor_id=None, status: str | None = None) -> QuerySet[Prescription]:
    qs = _prescriptions()
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if doctor_id:
        qs = qs.filter(doctor_id=doctor_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at")
