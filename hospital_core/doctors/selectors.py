# hospital_core/doctors/selectors.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Count, QuerySet
from rest_framework.exceptions import NotFound

from hospital_core.doctors.models import Department, Doctor


def get_doctor(*, doctor_id) -> Doctor:
    try:
        return Doctor.objects.get(id=doctor_id)
    except (Doctor.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("Doctor not found")


def doctor_for_user(user) -> Doctor | None:
    if not user or not getattr(user, "is_authenticated", False):
        return None
    return Doctor.objects.filter(user_id=user.pk).first()


def list_doctors(
    *,
    specialization: str | None = None,
    department_id=None,
    available_only: bool = False,
) -> QuerySet[Doctor]:
    qs = Doctor.objects.select_related("department")
    if specialization:
        qs = qs.filter(specialization__iexact=specialization)
    if department_id:
        qs = qs.filter(department_id=department_id)
    if available_only:
        qs = qs.filter(is_available=True)
    return qs.order_by("full_name")


def get_department(*, department_id) -> Department:
    try:
        return Department.objects.select_related("head").annotate(doctor_count=Count("doctors")).get(id=department_id)
    except (Department.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("Department not found")


def list_departments(*, is_active: bool | None = None) -> QuerySet[Department]:
    qs = Department.objects.select_related("head").annotate(doctor_count=Count("doctors"))
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs.order_by("name")


def department_doctors(*, department_id) -> QuerySet[Doctor]:
    return Doctor.objects.filter(department_id=department_id).order_by("full_name")
