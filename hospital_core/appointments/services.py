# hospital_core/appointments/services.py
from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable
from uuid import UUID

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from hospital_core.appointments.constants import (
    ALLOWED_TRANSITIONS,
    QUEUE_STATUSES,
    SLOT_RELEASING_STATUSES,
    AppointmentStatus,
    AppointmentType,
)
from hospital_core.appointments.models import Appointment
from hospital_core.audit.emitters import AuditEmitter
from hospital_core.audit.services import AuditService
from hospital_core.common.api.exceptions import ConflictError
from hospital_core.common.events import publish_on_commit
from hospital_core.common.sequences import SequenceAllocator
from hospital_core.common.transactions import TransactionContext, run_in_transaction
from hospital_core.doctors.models import Doctor
from hospital_core.patients.models import Patient

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "Time slot already booked"


def _slot_taken() -> ConflictError:
    return ConflictError(SLOT_TAKEN_MESSAGE, code="slot_taken")


def _active_slot_query(ctx: TransactionContext, doctor_id, appointment_date, appointment_time):
    return (
        Appointment.objects.using(ctx.using)
        .filter(
            doctor_id=doctor_id,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
        )
        .exclude(status__in=SLOT_RELEASING_STATUSES)
    )


def _lock_appointment(ctx: TransactionContext, appointment_id) -> Appointment:
    appt = (
        Appointment.objects.using(ctx.using)
        .select_for_update()
        .filter(id=appointment_id)
        .first()
    )
    if appt is None:
        raise NotFound("Appointment not found")
    return appt


class AppointmentService:
    """
    Appointment booking and lifecycle.

    Booking serializes on the doctor row (SELECT ... FOR UPDATE), so for one
    doctor the "is this slot free?" check, the insert and the queue-token count
    all see a stable view. The partial unique constraint on
    (doctor, date, time) catches anything that slips past the check.
    """

    @staticmethod
    def book(
        *,
        patient_id: UUID,
        doctor_id: UUID,
        appointment_date: dt.date,
        appointment_time: dt.time,
        type: str = AppointmentType.CONSULTATION,
        reason: str = "",
        symptoms: Iterable[str] | None = None,
        actor_user_id: int | None = None,
        audit: AuditEmitter | None = None,
    ) -> Appointment:
        def _book(ctx: TransactionContext) -> Appointment:
            doctor = Doctor.objects.using(ctx.using).select_for_update().filter(id=doctor_id).first()
            if doctor is None:
                raise NotFound("Doctor not found")
            if not doctor.is_available:
                raise ConflictError("Doctor not available", code="doctor_unavailable")

            clash = (
                _active_slot_query(ctx, doctor.id, appointment_date, appointment_time)
                .select_for_update()
                .first()
            )
            if clash is not None:
                logger.info(
                    "Slot conflict",
                    extra={"doctor_id": str(doctor.id), "slot": f"{appointment_date} {appointment_time}"},
                )
                raise _slot_taken()

            if not Patient.objects.using(ctx.using).filter(id=patient_id).exists():
                raise NotFound("Patient not found")

            number = SequenceAllocator.next_number("appointment", on=appointment_date, using=ctx.using)
            try:
                with transaction.atomic(using=ctx.using):
                    appt = Appointment.objects.using(ctx.using).create(
                        patient_id=patient_id,
                        doctor_id=doctor.id,
                        appointment_date=appointment_date,
                        appointment_time=appointment_time,
                        type=type or AppointmentType.CONSULTATION,
                        reason=reason or "",
                        symptoms=list(symptoms or []),
                        status=AppointmentStatus.SCHEDULED,
                        appointment_number=number,
                    )
            except IntegrityError:
                # Only the partial unique constraint on the slot means "taken";
                # anything else (e.g. a duplicate appointment_number) propagates.
                if _active_slot_query(ctx, doctor.id, appointment_date, appointment_time).exists():
                    raise _slot_taken()
                raise

            # Count after the insert, under the doctor lock: the new row is included.
            # Completed, cancelled and no-show visits have left the queue.
            position = (
                Appointment.objects.using(ctx.using)
                .filter(
                    doctor_id=doctor.id,
                    appointment_date=appointment_date,
                    status__in=QUEUE_STATUSES,
                )
                .count()
            )
            appt.queue_token = f"Q-{position:03d}"
            appt.save(using=ctx.using, update_fields=["queue_token", "updated_at"])

            AuditService.record(
                action="CREATE_APPOINTMENT",
                resource="appointments",
                resource_id=appt.id,
                actor_user_id=actor_user_id,
                changes={
                    "appointment_number": appt.appointment_number,
                    "queue_token": appt.queue_token,
                    "doctor_id": str(doctor.id),
                    "slot": f"{appointment_date} {appointment_time}",
                },
                emitter=audit,
                using=ctx.using,
            )
            publish_on_commit(
                "appointment.booked",
                {
                    "appointment_id": str(appt.id),
                    "doctor_id": str(doctor.id),
                    "patient_id": str(patient_id),
                    "appointment_date": appointment_date.isoformat(),
                    "queue_token": appt.queue_token,
                },
                using=ctx.using,
            )
            return appt

        return run_in_transaction(_book)

    # ------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------
    @staticmethod
    def _transition(
        *,
        appointment_id,
        to_status: str,
        actor_user_id: int | None,
        action: str,
        apply=None,
    ) -> Appointment:
        def _run(ctx: TransactionContext) -> Appointment:
            appt = _lock_appointment(ctx, appointment_id)
            from_status = appt.status

            if to_status not in ALLOWED_TRANSITIONS.get(from_status, set()):
                raise ConflictError(
                    f"Cannot move appointment from {from_status} to {to_status}",
                    code="invalid_transition",
                )

            appt.status = to_status
            if apply is not None:
                apply(appt)
            appt.save(using=ctx.using)

            AuditService.record(
                action=action,
                resource="appointments",
                resource_id=appt.id,
                actor_user_id=actor_user_id,
                changes={"status": {"from": from_status, "to": to_status}},
                using=ctx.using,
            )
            return appt

        return run_in_transaction(_run)

    @staticmethod
    def check_in(*, appointment_id, actor_user_id: int | None = None) -> Appointment:
        def _stamp(appt: Appointment) -> None:
            appt.check_in_time = timezone.now()

        return AppointmentService._transition(
            appointment_id=appointment_id,
            to_status=AppointmentStatus.CONFIRMED,
            actor_user_id=actor_user_id,
            action="CHECK_IN_APPOINTMENT",
            apply=_stamp,
        )

    @staticmethod
    def start(*, appointment_id, actor_user_id: int | None = None) -> Appointment:
        def _stamp(appt: Appointment) -> None:
            if appt.check_in_time is None:
                appt.check_in_time = timezone.now()

        return AppointmentService._transition(
            appointment_id=appointment_id,
            to_status=AppointmentStatus.IN_PROGRESS,
            actor_user_id=actor_user_id,
            action="START_APPOINTMENT",
            apply=_stamp,
        )

    @staticmethod
    def complete(
        *,
        appointment_id,
        actor_user_id: int | None = None,
        diagnosis: str | None = None,
        notes: str | None = None,
    ) -> Appointment:
        def _stamp(appt: Appointment) -> None:
            appt.check_out_time = timezone.now()
            if diagnosis:
                appt.diagnosis = diagnosis
            if notes:
                appt.notes = notes

        return AppointmentService._transition(
            appointment_id=appointment_id,
            to_status=AppointmentStatus.COMPLETED,
            actor_user_id=actor_user_id,
            action="COMPLETE_APPOINTMENT",
            apply=_stamp,
        )

    @staticmethod
    def cancel(*, appointment_id, actor_user_id: int | None = None, reason: str = "") -> Appointment:
        def _stamp(appt: Appointment) -> None:
            appt.cancel_reason = reason or ""

        return AppointmentService._transition(
            appointment_id=appointment_id,
            to_status=AppointmentStatus.CANCELLED,
            actor_user_id=actor_user_id,
            action="CANCEL_APPOINTMENT",
            apply=_stamp,
        )

    @staticmethod
    def mark_no_show(*, appointment_id, actor_user_id: int | None = None) -> Appointment:
        return AppointmentService._transition(
            appointment_id=appointment_id,
            to_status=AppointmentStatus.NO_SHOW,
            actor_user_id=actor_user_id,
            action="NO_SHOW_APPOINTMENT",
        )
