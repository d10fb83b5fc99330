# hospital_core/common/permissions.py

from __future__ import annotations

from typing import Set

from rest_framework.permissions import BasePermission, SAFE_METHODS

# Group/role names (Django auth Group names)
ROLE_ADMIN = "ADMIN"
ROLE_DOCTOR = "DOCTOR"
ROLE_NURSE = "NURSE"
ROLE_RECEPTION = "RECEPTION"
ROLE_PHARMACIST = "PHARMACIST"
ROLE_LAB = "LAB"
ROLE_BILLING = "BILLING"
ROLE_PATIENT = "PATIENT"
ROLE_READONLY = "READONLY"

ALL_ROLES = frozenset(
    {
        ROLE_ADMIN,
        ROLE_DOCTOR,
        ROLE_NURSE,
        ROLE_RECEPTION,
        ROLE_PHARMACIST,
        ROLE_LAB,
        ROLE_BILLING,
        ROLE_PATIENT,
        ROLE_READONLY,
    }
)
STAFF_ROLES = ALL_ROLES - {ROLE_PATIENT}
CLINICAL_ROLES = frozenset({ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE})


# -------------------------------------------------------------------
# Capability -> roles table.
# Every API operation is gated by exactly one entry, looked up once per request.
# ADMIN is implicitly allowed everything.
# -------------------------------------------------------------------

CAPABILITIES: dict[str, frozenset[str]] = {
    # Patients
    "patients.list": STAFF_ROLES,
    "patients.retrieve": STAFF_ROLES,
    "patients.create": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION}),
    "patients.partial_update": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION}),

    # Doctors
    "doctors.list": ALL_ROLES,
    "doctors.retrieve": ALL_ROLES,
    "doctors.schedule": ALL_ROLES,
    "doctors.queue": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION}),
    "doctors.create": frozenset(),
    "doctors.partial_update": frozenset(),
    "doctors.destroy": frozenset(),

    # Departments
    "departments.list": ALL_ROLES,
    "departments.retrieve": ALL_ROLES,
    "departments.doctors": ALL_ROLES,
    "departments.create": frozenset(),
    "departments.partial_update": frozenset(),
    "departments.destroy": frozenset(),

    # Appointments
    "appointments.list": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION, ROLE_READONLY}),
    "appointments.retrieve": STAFF_ROLES | {ROLE_PATIENT},
    "appointments.create": frozenset({ROLE_RECEPTION, ROLE_PATIENT, ROLE_NURSE}),
    "appointments.check_in": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION}),
    "appointments.start": CLINICAL_ROLES,
    "appointments.complete": CLINICAL_ROLES,
    "appointments.cancel": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION, ROLE_PATIENT}),
    "appointments.no_show": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION}),

    # Pharmacy
    "prescriptions.list": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_PHARMACIST, ROLE_READONLY}),
    "prescriptions.retrieve": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_PHARMACIST, ROLE_PATIENT, ROLE_READONLY}),
    "prescriptions.create": frozenset({ROLE_DOCTOR}),
    "prescriptions.dispense": frozenset({ROLE_PHARMACIST, ROLE_RECEPTION}),
    "prescriptions.cancel": frozenset({ROLE_DOCTOR}),
    "medicines.list": STAFF_ROLES,
    "medicines.retrieve": STAFF_ROLES,
    "medicines.create": frozenset({ROLE_PHARMACIST}),
    "medicines.low_stock": frozenset({ROLE_PHARMACIST, ROLE_DOCTOR, ROLE_NURSE}),
    "medicines.adjust_stock": frozenset({ROLE_PHARMACIST}),

    # Billing
    "invoices.list": frozenset({ROLE_RECEPTION, ROLE_BILLING, ROLE_READONLY}),
    "invoices.retrieve": frozenset({ROLE_RECEPTION, ROLE_BILLING, ROLE_PATIENT, ROLE_READONLY}),
    "invoices.create": frozenset({ROLE_RECEPTION, ROLE_BILLING}),
    "invoices.payments": frozenset({ROLE_RECEPTION, ROLE_BILLING}),
    "invoices.cancel": frozenset(),

    # Lab
    "lab_tests.list": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_LAB, ROLE_READONLY}),
    "lab_tests.retrieve": frozenset({ROLE_DOCTOR, ROLE_NURSE, ROLE_LAB, ROLE_PATIENT, ROLE_READONLY}),
    "lab_tests.create": frozenset({ROLE_DOCTOR, ROLE_NURSE}),
    "lab_tests.collect_sample": frozenset({ROLE_LAB, ROLE_NURSE}),
    "lab_tests.results": frozenset({ROLE_LAB}),
    "lab_tests.cancel": frozenset({ROLE_DOCTOR, ROLE_LAB}),

    # Audit
    "audit.list": frozenset(),
    "audit.retrieve": frozenset(),
}


def user_roles(user) -> Set[str]:
    """
    Resolve roles from:
    1) Django groups: user.groups
    2) Optional user.role attribute

    - Superuser is treated as ADMIN.
    - Authenticated user with no roles/groups is treated as READONLY.
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False):
        roles.add(ROLE_ADMIN)
        return roles

    if hasattr(user, "groups"):
        roles.update(user.groups.values_list("name", flat=True))

    if hasattr(user, "role") and user.role:
        roles.add(str(user.role).upper())

    if not roles:
        roles.add(ROLE_READONLY)

    return roles


def has_capability(user, capability: str) -> bool:
    roles = user_roles(user)
    if not roles:
        return False
    if ROLE_ADMIN in roles:
        return True
    # Unknown capability => deny by default
    allowed = CAPABILITIES.get(capability, frozenset())
    return bool(roles & allowed)


class CapabilityPermission(BasePermission):
    """
    Role-based access control driven by CAPABILITIES.

    Subclasses set `resource`; the viewset action becomes the capability,
    e.g. resource="appointments" + action "cancel" -> "appointments.cancel".
    If the action is unknown and the request is SAFE, fall back to
    list/retrieve instead of denying.
    """
    message = "You do not have permission to perform this action."
    resource: str = ""

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        return None

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        action = self._infer_action(request, view)
        capability = f"{self.resource}.{action}"

        if capability not in CAPABILITIES and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            capability = f"{self.resource}.{'retrieve' if is_detail else 'list'}"

        return has_capability(user, capability)

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class PatientPermission(CapabilityPermission):
    resource = "patients"


class DoctorPermission(CapabilityPermission):
    resource = "doctors"


class DepartmentPermission(CapabilityPermission):
    resource = "departments"


class AppointmentPermission(CapabilityPermission):
    resource = "appointments"


class PrescriptionPermission(CapabilityPermission):
    resource = "prescriptions"


class MedicinePermission(CapabilityPermission):
    resource = "medicines"


class InvoicePermission(CapabilityPermission):
    resource = "invoices"


class LabTestPermission(CapabilityPermission):
    resource = "lab_tests"


class AuditPermission(CapabilityPermission):
    resource = "audit"
