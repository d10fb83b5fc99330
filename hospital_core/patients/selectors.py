# hospital_core/patients/selectors.py
from __future__ import annotations

from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q, QuerySet
from rest_framework.exceptions import NotFound

from hospital_core.patients.models import Patient


def get_patient(*, patient_id: UUID | str) -> Patient:
    try:
        return Patient.objects.get(id=patient_id)
    except (Patient.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("Patient not found")


def search_patients(*, q: str | None = None) -> QuerySet[Patient]:
    qs = Patient.objects.all()

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(
            Q(full_name__icontains=qv)
            | Q(medical_record_number__icontains=qv)
            | Q(phone__icontains=qv)
            | Q(email__icontains=qv)
        )

    return qs.order_by("-created_at")
