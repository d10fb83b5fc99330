# hospital_core/lab/selectors.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from hospital_core.lab.models import LabTest


def get_lab_test(*, lab_test_id) -> LabTest:
    try:
        return LabTest.objects.select_related("patient", "doctor").get(id=lab_test_id)
    except (LabTest.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("Lab test not found")


def list_lab_tests(
    *,
    patient_id=None,
    doctor_id=None,
    status: str | None = None,
    test_type: str | None = None,
    priority: str | None = None,
) -> QuerySet[LabTest]:
    qs = LabTest.objects.select_related("patient", "doctor")
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if doctor_id:
        qs = qs.filter(doctor_id=doctor_id)
    if status:
        qs = qs.filter(status=status)
    if test_type:
        qs = qs.filter(test_type=test_type)
    if priority:
        qs = qs.filter(priority=priority)
    return qs.order_by("-created_at")
