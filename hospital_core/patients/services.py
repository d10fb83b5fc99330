# hospital_core/patients/services.py
from __future__ import annotations

from uuid import UUID

from rest_framework.exceptions import NotFound

from hospital_core.audit.services import AuditService
from hospital_core.audit.models import Severity
from hospital_core.common.sequences import SequenceAllocator
from hospital_core.common.transactions import run_in_transaction
from hospital_core.patients.models import Patient

UPDATABLE_FIELDS = frozenset(
    {
        "full_name",
        "phone",
        "email",
        "gender",
        "date_of_birth",
        "blood_group",
        "allergies",
        "chronic_conditions",
        "emergency_contact",
        "medical_history",
    }
)


class PatientService:
    @staticmethod
    def create_patient(
        *,
        actor_user_id: int | None,
        full_name: str,
        phone: str = "",
        email: str = "",
        gender: str = "",
        date_of_birth=None,
        blood_group: str = "",
        allergies: list | None = None,
        chronic_conditions: list | None = None,
        emergency_contact: dict | None = None,
        medical_history: str = "",
        user_id: int | None = None,
    ) -> Patient:
        def _create(ctx) -> Patient:
            patient = Patient.objects.using(ctx.using).create(
                full_name=full_name,
                medical_record_number=SequenceAllocator.next_number("medical_record", using=ctx.using),
                phone=phone or "",
                email=email or "",
                gender=gender or "",
                date_of_birth=date_of_birth,
                blood_group=blood_group or "",
                allergies=list(allergies or []),
                chronic_conditions=list(chronic_conditions or []),
                emergency_contact=dict(emergency_contact or {}),
                medical_history=medical_history or "",
                user_id=user_id,
            )

            AuditService.record(
                action="CREATE_PATIENT",
                resource="patients",
                resource_id=patient.id,
                actor_user_id=actor_user_id,
                changes={"medical_record_number": patient.medical_record_number},
                severity=Severity.HIGH,
                using=ctx.using,
            )
            return patient

        return run_in_transaction(_create)

    @staticmethod
    def update_patient(*, actor_user_id: int | None, patient_id: UUID, data: dict) -> Patient:
        def _update(ctx) -> Patient:
            patient = Patient.objects.using(ctx.using).select_for_update().filter(id=patient_id).first()
            if patient is None:
                raise NotFound("Patient not found")

            updates = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}
            for k, v in updates.items():
                setattr(patient, k, v)
            patient.save(using=ctx.using)

            AuditService.record(
                action="UPDATE_PATIENT",
                resource="patients",
                resource_id=patient.id,
                actor_user_id=actor_user_id,
                changes={"updated_fields": sorted(updates)},
                severity=Severity.HIGH,
                using=ctx.using,
            )
            return patient

        return run_in_transaction(_update)
