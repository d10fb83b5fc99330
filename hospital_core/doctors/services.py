# hospital_core/doctors/services.py
from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from django.contrib.auth import get_user_model
from rest_framework.exceptions import NotFound, ValidationError

from hospital_core.audit.models import Severity
from hospital_core.audit.services import AuditService
from hospital_core.common.api.exceptions import ConflictError
from hospital_core.common.transactions import TransactionContext, run_in_transaction
from hospital_core.doctors.models import Department, Doctor

DOCTOR_UPDATABLE_FIELDS = frozenset(
    {
        "full_name",
        "specialization",
        "department_id",
        "qualifications",
        "experience_years",
        "consultation_fee",
        "availability",
        "is_available",
    }
)

DEPARTMENT_UPDATABLE_FIELDS = frozenset({"name", "description", "head_id", "is_active"})


def _active_department(ctx: TransactionContext, department_id) -> Department | None:
    if department_id is None:
        return None
    department = Department.objects.using(ctx.using).filter(id=department_id, is_active=True).first()
    if department is None:
        raise ValidationError({"department": "Unknown or inactive department."})
    return department


def _head_doctor(ctx: TransactionContext, doctor_id) -> Doctor | None:
    if doctor_id is None:
        return None
    head = Doctor.objects.using(ctx.using).filter(id=doctor_id).first()
    if head is None:
        raise ValidationError({"head": "Head of department must be a valid doctor."})
    return head


def _name_taken(ctx: TransactionContext, name: str, *, exclude_id=None) -> bool:
    qs = Department.objects.using(ctx.using).filter(name__iexact=name)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    return qs.exists()


class DoctorService:
    """
    Doctor profiles. Login accounts and passwords belong to the identity
    service; a profile may only point at an existing, unlinked user.

    `is_available` is the flag the slot allocator checks, so it is only
    changed under the same doctor row lock that booking takes.
    """

    @staticmethod
    def create_doctor(
        *,
        actor_user_id: int | None,
        full_name: str,
        specialization: str,
        licence_number: str,
        department_id: UUID | None = None,
        qualifications: list | None = None,
        experience_years: int = 0,
        consultation_fee: Decimal | None = None,
        availability: dict | None = None,
        user_id: int | None = None,
    ) -> Doctor:
        def _create(ctx: TransactionContext) -> Doctor:
            if Doctor.objects.using(ctx.using).filter(licence_number=licence_number).exists():
                raise ConflictError("Doctor with this licence number already exists", code="duplicate_licence")

            if user_id is not None:
                if not get_user_model().objects.using(ctx.using).filter(pk=user_id).exists():
                    raise ValidationError({"user": "Unknown user."})
                if Doctor.objects.using(ctx.using).filter(user_id=user_id).exists():
                    raise ValidationError({"user": "User already has a doctor profile."})

            fields = {}
            if consultation_fee is not None:
                fields["consultation_fee"] = consultation_fee
            if availability:
                fields["availability"] = availability

            doctor = Doctor.objects.using(ctx.using).create(
                full_name=full_name,
                specialization=specialization,
                licence_number=licence_number,
                department=_active_department(ctx, department_id),
                qualifications=list(qualifications or []),
                experience_years=experience_years or 0,
                user_id=user_id,
                is_available=True,
                **fields,
            )

            AuditService.record(
                action="CREATE_DOCTOR",
                resource="doctors",
                resource_id=doctor.id,
                actor_user_id=actor_user_id,
                changes={"licence_number": doctor.licence_number},
                using=ctx.using,
            )
            return doctor

        return run_in_transaction(_create)

    @staticmethod
    def update_doctor(*, actor_user_id: int | None, doctor_id: UUID, data: dict) -> Doctor:
        def _update(ctx: TransactionContext) -> Doctor:
            doctor = Doctor.objects.using(ctx.using).select_for_update().filter(id=doctor_id).first()
            if doctor is None:
                raise NotFound("Doctor not found")

            updates = {k: v for k, v in (data or {}).items() if k in DOCTOR_UPDATABLE_FIELDS}
            if updates.get("department_id") is not None:
                _active_department(ctx, updates["department_id"])

            changes = {}
            for k, v in updates.items():
                if k == "is_available" and doctor.is_available != v:
                    changes["is_available"] = {"from": doctor.is_available, "to": v}
                setattr(doctor, k, v)
            doctor.save(using=ctx.using)

            changes["updated_fields"] = sorted(updates)
            AuditService.record(
                action="UPDATE_DOCTOR",
                resource="doctors",
                resource_id=doctor.id,
                actor_user_id=actor_user_id,
                changes=changes,
                using=ctx.using,
            )
            return doctor

        return run_in_transaction(_update)

    @staticmethod
    def deactivate_doctor(*, actor_user_id: int | None, doctor_id: UUID) -> Doctor:
        """Soft delete: the profile stays, but no new bookings are accepted."""
        def _deactivate(ctx: TransactionContext) -> Doctor:
            doctor = Doctor.objects.using(ctx.using).select_for_update().filter(id=doctor_id).first()
            if doctor is None:
                raise NotFound("Doctor not found")
            if doctor.user_id is not None and doctor.user_id == actor_user_id:
                raise ConflictError("Cannot deactivate your own profile", code="self_deactivation")

            doctor.is_available = False
            doctor.save(using=ctx.using, update_fields=["is_available", "updated_at"])

            AuditService.record(
                action="DEACTIVATE_DOCTOR",
                resource="doctors",
                resource_id=doctor.id,
                actor_user_id=actor_user_id,
                severity=Severity.HIGH,
                using=ctx.using,
            )
            return doctor

        return run_in_transaction(_deactivate)


class DepartmentService:
    @staticmethod
    def create_department(
        *,
        actor_user_id: int | None,
        name: str,
        description: str = "",
        head_id: UUID | None = None,
    ) -> Department:
        def _create(ctx: TransactionContext) -> Department:
            if _name_taken(ctx, name):
                raise ConflictError("Department with this name already exists", code="duplicate_department")

            department = Department.objects.using(ctx.using).create(
                name=name,
                description=description or "",
                head=_head_doctor(ctx, head_id),
                is_active=True,
            )

            AuditService.record(
                action="CREATE_DEPARTMENT",
                resource="departments",
                resource_id=department.id,
                actor_user_id=actor_user_id,
                changes={"name": department.name},
                using=ctx.using,
            )
            return department

        return run_in_transaction(_create)

    @staticmethod
    def update_department(*, actor_user_id: int | None, department_id: UUID, data: dict) -> Department:
        def _update(ctx: TransactionContext) -> Department:
            department = Department.objects.using(ctx.using).select_for_update().filter(id=department_id).first()
            if department is None:
                raise NotFound("Department not found")

            updates = {k: v for k, v in (data or {}).items() if k in DEPARTMENT_UPDATABLE_FIELDS}
            if "name" in updates and _name_taken(ctx, updates["name"], exclude_id=department.id):
                raise ConflictError("Department with this name already exists", code="duplicate_department")
            if updates.get("head_id") is not None:
                _head_doctor(ctx, updates["head_id"])

            for k, v in updates.items():
                setattr(department, k, v)
            department.save(using=ctx.using)

            AuditService.record(
                action="UPDATE_DEPARTMENT",
                resource="departments",
                resource_id=department.id,
                actor_user_id=actor_user_id,
                changes={"updated_fields": sorted(updates)},
                using=ctx.using,
            )
            return department

        return run_in_transaction(_update)

    @staticmethod
    def deactivate_department(*, actor_user_id: int | None, department_id: UUID) -> Department:
        def _deactivate(ctx: TransactionContext) -> Department:
            department = Department.objects.using(ctx.using).select_for_update().filter(id=department_id).first()
            if department is None:
                raise NotFound("Department not found")

            assigned = Doctor.objects.using(ctx.using).filter(department_id=department.id).count()
            if assigned:
                raise ValidationError(
                    f"Cannot delete department. It has {assigned} doctor(s) assigned. "
                    "Please reassign them first."
                )

            department.is_active = False
            department.save(using=ctx.using, update_fields=["is_active", "updated_at"])

            AuditService.record(
                action="DEACTIVATE_DEPARTMENT",
                resource="departments",
                resource_id=department.id,
                actor_user_id=actor_user_id,
                severity=Severity.HIGH,
                using=ctx.using,
            )
            return department

        return run_in_transaction(_deactivate)
