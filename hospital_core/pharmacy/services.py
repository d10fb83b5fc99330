# hospital_core/pharmacy/services.py
from __future__ import annotations

import datetime as dt
import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List
from uuid import UUID

from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from hospital_core.appointments.models import Appointment
from hospital_core.audit.emitters import AuditEmitter
from hospital_core.audit.models import Severity
from hospital_core.audit.services import AuditService
from hospital_core.common.api.exceptions import ConflictError, InsufficientStockError
from hospital_core.common.events import publish_on_commit
from hospital_core.common.sequences import SequenceAllocator
from hospital_core.common.transactions import TransactionContext, run_in_transaction
from hospital_core.patients.models import Patient
from hospital_core.pharmacy.models import Medicine, Prescription, PrescriptionItem, PrescriptionStatus

logger = logging.getLogger(__name__)


def _publish_low_stock(ctx: TransactionContext, medicine: Medicine) -> None:
    if not medicine.is_low_stock:
        return
    publish_on_commit(
        "medicine.low_stock",
        {
            "medicine_id": str(medicine.id),
            "name": medicine.name,
            "stock": medicine.stock,
            "min_stock": medicine.min_stock,
        },
        using=ctx.using,
    )


class MedicineService:
    @staticmethod
    def create_medicine(*, actor_user_id: int | None, **fields) -> Medicine:
        def _create(ctx: TransactionContext) -> Medicine:
            medicine = Medicine.objects.using(ctx.using).create(**fields)
            AuditService.record(
                action="CREATE_MEDICINE",
                resource="medicines",
                resource_id=medicine.id,
                actor_user_id=actor_user_id,
                changes={"stock": medicine.stock},
                using=ctx.using,
            )
            return medicine

        return run_in_transaction(_create)

    @staticmethod
    def adjust_stock(
        *,
        medicine_id: UUID,
        delta: int,
        reason: str = "",
        actor_user_id: int | None = None,
    ) -> Medicine:
        """
        Administrative stock correction (delivery received, breakage, expiry
        write-off). Never takes stock below zero.
        """
        def _adjust(ctx: TransactionContext) -> Medicine:
            medicine = Medicine.objects.using(ctx.using).select_for_update().filter(id=medicine_id).first()
            if medicine is None:
                raise NotFound("Medicine not found")

            previous = medicine.stock
            new_stock = previous + int(delta)
            if new_stock < 0:
                raise InsufficientStockError(
                    medicine_id=medicine.id,
                    medicine_name=medicine.name,
                    available=previous,
                    requested=-int(delta),
                )

            medicine.stock = new_stock
            medicine.save(using=ctx.using, update_fields=["stock", "updated_at"])

            AuditService.record(
                action="ADJUST_STOCK",
                resource="medicines",
                resource_id=medicine.id,
                actor_user_id=actor_user_id,
                changes={"previous_stock": previous, "new_stock": new_stock, "delta": int(delta)},
                metadata={"reason": reason},
                severity=Severity.HIGH,
                using=ctx.using,
            )
            _publish_low_stock(ctx, medicine)
            return medicine

        return run_in_transaction(_adjust)


class PrescriptionService:
    @staticmethod
    def create(
        *,
        doctor_id: UUID,
        appointment_id: UUID,
        patient_id: UUID,
        diagnosis: str,
        items: Iterable[Dict[str, Any]],
        advice: str = "",
        lab_tests: Iterable[str] | None = None,
        follow_up_date: dt.date | None = None,
        actor_user_id: int | None = None,
    ) -> Prescription:
        items = list(items or [])
        if not items:
            raise ValidationError({"items": "At least one medicine is required."})
        for item in items:
            if int(item.get("quantity") or 0) < 1:
                raise ValidationError({"items": "Quantity must be at least 1."})

        def _create(ctx: TransactionContext) -> Prescription:
            appointment = (
                Appointment.objects.using(ctx.using)
                .select_for_update()
                .filter(id=appointment_id)
                .first()
            )
            if appointment is None or appointment.doctor_id != doctor_id:
                raise ValidationError("Invalid appointment")

            if not Patient.objects.using(ctx.using).filter(id=patient_id).exists():
                raise NotFound("Patient not found")
            if appointment.patient_id != patient_id:
                raise ValidationError("Patient does not match the appointment")

            wanted_ids = {item["medicine"] for item in items}
            found_ids = set(
                Medicine.objects.using(ctx.using).filter(id__in=wanted_ids).values_list("id", flat=True)
            )
            missing = sorted(str(m) for m in wanted_ids - found_ids)
            if missing:
                raise NotFound(f"Medicine not found: {', '.join(missing)}")

            rx = Prescription.objects.using(ctx.using).create(
                prescription_number=SequenceAllocator.next_number("prescription", using=ctx.using),
                patient_id=patient_id,
                doctor_id=doctor_id,
                appointment_id=appointment.id,
                diagnosis=diagnosis,
                advice=advice or "",
                lab_tests=list(lab_tests or []),
                follow_up_date=follow_up_date,
                status=PrescriptionStatus.ACTIVE,
            )
            PrescriptionItem.objects.using(ctx.using).bulk_create(
                [
                    PrescriptionItem(
                        prescription=rx,
                        medicine_id=item["medicine"],
                        quantity=int(item["quantity"]),
                        dosage=item.get("dosage", ""),
                        frequency=item.get("frequency", ""),
                        duration=item.get("duration", ""),
                        instructions=item.get("instructions", ""),
                    )
                    for item in items
                ]
            )

            appointment.diagnosis = diagnosis
            if advice:
                appointment.notes = advice
            appointment.save(using=ctx.using, update_fields=["diagnosis", "notes", "updated_at"])

            AuditService.record(
                action="CREATE_PRESCRIPTION",
                resource="prescriptions",
                resource_id=rx.id,
                actor_user_id=actor_user_id,
                changes={"patient_id": str(patient_id), "items": len(items)},
                severity=Severity.CRITICAL,
                using=ctx.using,
            )
            return rx

        return run_in_transaction(_create)

    @staticmethod
    def cancel(*, prescription_id: UUID, actor_user_id: int | None = None, reason: str = "") -> Prescription:
        def _cancel(ctx: TransactionContext) -> Prescription:
            rx = Prescription.objects.using(ctx.using).select_for_update().filter(id=prescription_id).first()
            if rx is None:
                raise NotFound("Prescription not found")
            if rx.status != PrescriptionStatus.ACTIVE:
                raise ConflictError(f"Prescription is {rx.status}", code="invalid_transition")

            rx.status = PrescriptionStatus.CANCELLED
            rx.cancel_reason = reason or ""
            rx.save(using=ctx.using, update_fields=["status", "cancel_reason", "updated_at"])

            AuditService.record(
                action="CANCEL_PRESCRIPTION",
                resource="prescriptions",
                resource_id=rx.id,
                actor_user_id=actor_user_id,
                changes={"status": {"from": PrescriptionStatus.ACTIVE, "to": PrescriptionStatus.CANCELLED}},
                severity=Severity.CRITICAL,
                using=ctx.using,
            )
            return rx

        return run_in_transaction(_cancel)


class DispensationService:
    """
    Turns an active prescription into stock movements, all or nothing.

    Every medicine row involved is locked in one query, ordered by id, so two
    dispensations touching overlapping medicines always lock in the same order
    and cannot deadlock each other. All line items are validated before the
    first decrement.
    """

    @staticmethod
    def dispense(
        *,
        prescription_id: UUID,
        actor_user_id: int | None = None,
        audit: AuditEmitter | None = None,
    ) -> Prescription:
        def _dispense(ctx: TransactionContext) -> Prescription:
            rx = Prescription.objects.using(ctx.using).select_for_update().filter(id=prescription_id).first()
            if rx is None:
                raise NotFound("Prescription not found")
            if rx.status == PrescriptionStatus.COMPLETED:
                raise ConflictError("Prescription already dispensed", code="already_dispensed")
            if rx.status == PrescriptionStatus.CANCELLED:
                raise ConflictError("Prescription has been cancelled", code="prescription_cancelled")

            # medicine id -> total quantity, in line-item order
            wanted: "OrderedDict[UUID, int]" = OrderedDict()
            for medicine_id, quantity in (
                PrescriptionItem.objects.using(ctx.using)
                .filter(prescription_id=rx.id)
                .order_by("id")
                .values_list("medicine_id", "quantity")
            ):
                wanted[medicine_id] = wanted.get(medicine_id, 0) + quantity

            if not wanted:
                raise ConflictError("Prescription has no items to dispense", code="empty_prescription")

            locked = {
                m.id: m
                for m in Medicine.objects.using(ctx.using)
                .select_for_update()
                .filter(id__in=list(wanted))
                .order_by("id")
            }

            for medicine_id, quantity in wanted.items():
                medicine = locked.get(medicine_id)
                if medicine is None or not medicine.is_active or medicine.stock < quantity:
                    logger.info("Dispensation blocked", extra={"prescription_id": str(rx.id), "medicine_id": str(medicine_id)})
                    raise InsufficientStockError(
                        medicine_id=medicine_id,
                        medicine_name=medicine.name if medicine is not None else str(medicine_id),
                        available=medicine.stock if medicine is not None and medicine.is_active else 0,
                        requested=quantity,
                    )

            movements: List[Dict[str, Any]] = []
            for medicine_id, quantity in wanted.items():
                medicine = locked[medicine_id]
                previous = medicine.stock
                medicine.stock = previous - quantity
                medicine.save(using=ctx.using, update_fields=["stock", "updated_at"])
                movements.append(
                    {"medicine": medicine, "quantity": quantity, "previous_stock": previous, "new_stock": medicine.stock}
                )

            rx.status = PrescriptionStatus.COMPLETED
            rx.dispensed_at = timezone.now()
            rx.dispensed_by_id = actor_user_id
            rx.save(using=ctx.using, update_fields=["status", "dispensed_at", "dispensed_by", "updated_at"])

            for move in movements:
                medicine = move["medicine"]
                AuditService.record(
                    action="DISPENSE_MEDICINE",
                    resource="medicines",
                    resource_id=medicine.id,
                    actor_user_id=actor_user_id,
                    changes={
                        "prescription_id": str(rx.id),
                        "quantity": move["quantity"],
                        "previous_stock": move["previous_stock"],
                        "new_stock": move["new_stock"],
                    },
                    severity=Severity.CRITICAL,
                    emitter=audit,
                    using=ctx.using,
                )
                _publish_low_stock(ctx, medicine)

            return rx

        return run_in_transaction(_dispense)
