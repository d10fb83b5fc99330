# hospital_core/lab/services.py
from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from hospital_core.appointments.models import Appointment
from hospital_core.audit.models import Severity
from hospital_core.audit.services import AuditService
from hospital_core.common.api.exceptions import ConflictError
from hospital_core.common.sequences import SequenceAllocator
from hospital_core.common.transactions import TransactionContext, run_in_transaction
from hospital_core.doctors.models import Doctor
from hospital_core.lab.models import LabPriority, LabTest, LabTestStatus
from hospital_core.patients.models import Patient

_CLOSED = (LabTestStatus.COMPLETED, LabTestStatus.CANCELLED)


def _lock_test(ctx: TransactionContext, lab_test_id) -> LabTest:
    test = LabTest.objects.using(ctx.using).select_for_update().filter(id=lab_test_id).first()
    if test is None:
        raise NotFound("Lab test not found")
    return test


class LabTestService:
    @staticmethod
    def order(
        *,
        patient_id: UUID,
        doctor_id: UUID,
        test_name: str,
        test_type: str,
        actor_user_id: int | None,
        appointment_id: UUID | None = None,
        priority: str = LabPriority.ROUTINE,
        instructions: str = "",
        cost: Decimal = Decimal("0.00"),
    ) -> LabTest:
        def _order(ctx: TransactionContext) -> LabTest:
            if not Patient.objects.using(ctx.using).filter(id=patient_id).exists():
                raise NotFound("Patient not found")
            if not Doctor.objects.using(ctx.using).filter(id=doctor_id).exists():
                raise NotFound("Doctor not found")
            if appointment_id:
                appt = Appointment.objects.using(ctx.using).filter(id=appointment_id).first()
                if appt is None:
                    raise NotFound("Appointment not found")
                if appt.patient_id != patient_id:
                    raise ValidationError({"appointment": "Appointment does not belong to this patient."})

            test = LabTest.objects.using(ctx.using).create(
                test_number=SequenceAllocator.next_number("lab_test", using=ctx.using),
                patient_id=patient_id,
                doctor_id=doctor_id,
                appointment_id=appointment_id,
                test_name=test_name,
                test_type=test_type,
                priority=priority or LabPriority.ROUTINE,
                instructions=instructions or "",
                cost=cost or Decimal("0.00"),
                status=LabTestStatus.ORDERED,
            )

            AuditService.record(
                action="CREATE_LAB_TEST",
                resource="lab",
                resource_id=test.id,
                actor_user_id=actor_user_id,
                changes={"test_number": test.test_number, "test_name": test_name, "priority": test.priority},
                severity=Severity.HIGH,
                using=ctx.using,
            )
            return test

        return run_in_transaction(_order)

    @staticmethod
    def collect_sample(*, lab_test_id: UUID, actor_user_id: int | None, performed_by: str = "") -> LabTest:
        def _collect(ctx: TransactionContext) -> LabTest:
            test = _lock_test(ctx, lab_test_id)
            if test.status != LabTestStatus.ORDERED:
                raise ConflictError(f"Cannot collect a sample for a {test.status} lab test", code="invalid_transition")

            test.status = LabTestStatus.SAMPLE_COLLECTED
            test.sample_collected_at = timezone.now()
            if performed_by:
                test.performed_by = performed_by
            test.save(using=ctx.using)

            AuditService.record(
                action="COLLECT_SAMPLE",
                resource="lab",
                resource_id=test.id,
                actor_user_id=actor_user_id,
                changes={"status": {"from": LabTestStatus.ORDERED, "to": test.status}},
                severity=Severity.HIGH,
                using=ctx.using,
            )
            return test

        return run_in_transaction(_collect)

    @staticmethod
    def record_results(
        *,
        lab_test_id: UUID,
        results: dict,
        actor_user_id: int | None,
        findings: str = "",
        interpretation: str = "",
        normal_range: str = "",
        performed_by: str = "",
    ) -> LabTest:
        if not results:
            raise ValidationError({"results": "Results are required."})

        def _record(ctx: TransactionContext) -> LabTest:
            test = _lock_test(ctx, lab_test_id)
            if test.status in _CLOSED:
                raise ConflictError(f"Lab test is already {test.status}", code="invalid_transition")

            previous = test.status
            test.results = results
            test.findings = findings or test.findings
            test.interpretation = interpretation or test.interpretation
            test.normal_range = normal_range or test.normal_range
            if performed_by:
                test.performed_by = performed_by
            test.status = LabTestStatus.COMPLETED
            test.reported_at = timezone.now()
            test.save(using=ctx.using)

            AuditService.record(
                action="RECORD_LAB_RESULTS",
                resource="lab",
                resource_id=test.id,
                actor_user_id=actor_user_id,
                changes={"status": {"from": previous, "to": test.status}},
                severity=Severity.HIGH,
                using=ctx.using,
            )
            return test

        return run_in_transaction(_record)

    @staticmethod
    def cancel(*, lab_test_id: UUID, actor_user_id: int | None) -> LabTest:
        def _cancel(ctx: TransactionContext) -> LabTest:
            test = _lock_test(ctx, lab_test_id)
            if test.status == LabTestStatus.COMPLETED:
                raise ConflictError("Cannot cancel a completed lab test", code="invalid_transition")
            if test.status == LabTestStatus.CANCELLED:
                raise ConflictError("Lab test is already cancelled", code="invalid_transition")

            previous = test.status
            test.status = LabTestStatus.CANCELLED
            test.save(using=ctx.using, update_fields=["status", "updated_at"])

            AuditService.record(
                action="CANCEL_LAB_TEST",
                resource="lab",
                resource_id=test.id,
                actor_user_id=actor_user_id,
                changes={"status": {"from": previous, "to": test.status}},
                severity=Severity.HIGH,
                using=ctx.using,
            )
            return test

        return run_in_transaction(_cancel)
