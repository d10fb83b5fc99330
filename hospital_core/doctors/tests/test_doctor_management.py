# hospital_core/doctors/tests/test_doctor_management.py
import datetime as dt

import pytest

from hospital_core.appointments.services import AppointmentService
from hospital_core.common.api.exceptions import ConflictError
from hospital_core.doctors.models import Doctor
from hospital_core.doctors.services import DoctorService

pytestmark = pytest.mark.django_db

BASE = "/api/v1/doctors/"


def _booking(patient, doctor, visit_day):
    return {
        "patient": str(patient.id),
        "doctor": str(doctor.id),
        "appointment_date": visit_day.isoformat(),
        "appointment_time": "10:00",
    }


def test_admin_creates_doctor_in_department(api_client, department):
    r = api_client.post(
        BASE,
        {
            "full_name": "James Wilson",
            "specialization": "Oncology",
            "licence_number": "LIC-0100",
            "department_id": str(department.id),
            "consultation_fee": "750.00",
        },
        format="json",
    )

    assert r.status_code == 201, r.content
    assert r.data["is_available"] is True
    assert str(r.data["department"]) == str(department.id)
    assert r.data["department_name"] == "Internal Medicine"
    assert r.data["consultation_fee"] == "750.00"


def test_duplicate_licence_is_a_conflict(api_client, doctor):
    r = api_client.post(
        BASE,
        {"full_name": "Copy", "specialization": "GP", "licence_number": doctor.licence_number},
        format="json",
    )
    assert r.status_code == 409
    assert r.data["error"]["code"] == "duplicate_licence"


def test_inactive_department_is_rejected(api_client, department):
    department.is_active = False
    department.save(update_fields=["is_active"])

    r = api_client.post(
        BASE,
        {"full_name": "X", "specialization": "GP", "licence_number": "LIC-0101", "department_id": str(department.id)},
        format="json",
    )
    assert r.status_code == 400
    assert "department" in r.data["error"]["details"]


def test_profile_cannot_reuse_a_linked_user(api_client, doctor, doctor_user):
    r = api_client.post(
        BASE,
        {"full_name": "Twin", "specialization": "GP", "licence_number": "LIC-0102", "user_id": doctor_user.id},
        format="json",
    )
    assert r.status_code == 400


def test_availability_toggle_gates_booking(api_client, client_for, reception_user, patient, doctor, visit_day):
    off = api_client.patch(f"{BASE}{doctor.id}/", {"is_available": False}, format="json")
    assert off.status_code == 200
    assert off.data["is_available"] is False

    blocked = client_for(reception_user).post("/api/v1/appointments/", _booking(patient, doctor, visit_day), format="json")
    assert blocked.status_code == 409
    assert blocked.data["error"]["code"] == "doctor_unavailable"

    on = api_client.patch(f"{BASE}{doctor.id}/", {"is_available": True}, format="json")
    assert on.data["is_available"] is True

    booked = client_for(reception_user).post("/api/v1/appointments/", _booking(patient, doctor, visit_day), format="json")
    assert booked.status_code == 201


def test_patch_keeps_fields_not_sent(api_client, doctor):
    r = api_client.patch(f"{BASE}{doctor.id}/", {"experience_years": 12}, format="json")
    assert r.status_code == 200
    assert r.data["experience_years"] == 12
    assert r.data["is_available"] is True
    assert r.data["department_name"] == "Internal Medicine"


def test_empty_patch_is_rejected(api_client, doctor):
    r = api_client.patch(f"{BASE}{doctor.id}/", {}, format="json")
    assert r.status_code == 400


def test_deactivate_is_a_soft_delete(api_client, patient, doctor, visit_day):
    r = api_client.delete(f"{BASE}{doctor.id}/")
    assert r.status_code == 204

    doctor.refresh_from_db()
    assert doctor.is_available is False
    assert Doctor.objects.filter(id=doctor.id).exists()

    with pytest.raises(ConflictError) as exc:
        AppointmentService.book(
            patient_id=patient.id,
            doctor_id=doctor.id,
            appointment_date=visit_day,
            appointment_time=dt.time(10, 0),
        )
    assert exc.value.error_code == "doctor_unavailable"


def test_doctor_cannot_deactivate_own_profile(doctor, doctor_user):
    with pytest.raises(ConflictError) as exc:
        DoctorService.deactivate_doctor(actor_user_id=doctor_user.id, doctor_id=doctor.id)
    assert exc.value.error_code == "self_deactivation"


def test_staff_management_is_admin_only(client_for, doctor_user, reception_user, doctor):
    assert client_for(reception_user).post(
        BASE, {"full_name": "X", "specialization": "GP", "licence_number": "LIC-0199"}, format="json"
    ).status_code == 403
    assert client_for(doctor_user).patch(f"{BASE}{doctor.id}/", {"is_available": False}, format="json").status_code == 403
    assert client_for(reception_user).delete(f"{BASE}{doctor.id}/").status_code == 403


def test_update_is_audited_after_commit(doctor, audit_emitter, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        DoctorService.update_doctor(actor_user_id=None, doctor_id=doctor.id, data={"is_available": False})

    entry = audit_emitter.entries[-1]
    assert entry.action == "UPDATE_DOCTOR"
    assert entry.changes["is_available"] == {"from": True, "to": False}
