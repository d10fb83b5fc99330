# hospital_core/appointments/selectors.py
from __future__ import annotations

import datetime as dt

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from hospital_core.appointments.constants import QUEUE_STATUSES, AppointmentStatus
from hospital_core.appointments.models import Appointment


def _base() -> QuerySet[Appointment]:
    return Appointment.objects.select_related("patient", "doctor")


def get_appointment(*, appointment_id) -> Appointment:
    try:
        return _base().get(id=appointment_id)
    except (Appointment.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("Appointment not found")


def list_appointments(
    *,
    doctor_id=None,
    patient_id=None,
    on: dt.date | None = None,
    status: str | None = None,
) -> QuerySet[Appointment]:
    qs = _base()
    if doctor_id:
        qs = qs.filter(doctor_id=doctor_id)
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if on:
        qs = qs.filter(appointment_date=on)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-appointment_date", "appointment_time")


def doctor_schedule(*, doctor_id, on: dt.date) -> QuerySet[Appointment]:
    """Everything booked for the doctor that day, except cancellations."""
    return (
        _base()
        .filter(doctor_id=doctor_id, appointment_date=on)
        .exclude(status=AppointmentStatus.CANCELLED)
        .order_by("appointment_time")
    )


def doctor_queue(*, doctor_id, on: dt.date) -> QuerySet[Appointment]:
    return (
        _base()
        .filter(doctor_id=doctor_id, appointment_date=on, status__in=QUEUE_STATUSES)
        .order_by("appointment_time")
    )


def patient_appointments(*, patient_id) -> QuerySet[Appointment]:
    return _base().filter(patient_id=patient_id).order_by("-appointment_date", "-appointment_time")
