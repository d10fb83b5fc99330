# hospital_core/appointments/tests/test_appointments_api.py
import uuid

import pytest

pytestmark = pytest.mark.django_db

BASE = "/api/v1/appointments/"


def _payload(patient, doctor, at="10:00"):
    return {
        "patient": str(patient.id),
        "doctor": str(doctor.id),
        "appointment_date": "2026-02-20",
        "appointment_time": at,
        "type": "consultation",
        "reason": "Headache",
        "symptoms": ["headache", "fever"],
    }


def test_book_conflict_then_next_slot(client_for, reception_user, patient, other_patient, doctor):
    c = client_for(reception_user)

    r1 = c.post(BASE, _payload(patient, doctor), format="json")
    assert r1.status_code == 201, r1.content
    assert r1.data["appointment_number"] == "APT-20260220-001"
    assert r1.data["queue_token"] == "Q-001"
    assert r1.data["doctor_name"] == doctor.full_name

    r2 = c.post(BASE, _payload(other_patient, doctor), format="json")
    assert r2.status_code == 409
    assert r2.data["error"]["code"] == "slot_taken"
    assert r2.data["error"]["message"] == "Time slot already booked"
    assert r2.data["error"]["request_id"]

    r3 = c.post(BASE, _payload(other_patient, doctor, at="10:30"), format="json")
    assert r3.status_code == 201
    assert r3.data["queue_token"] == "Q-002"


def test_book_unknown_doctor_returns_404_envelope(client_for, reception_user, patient, doctor):
    payload = _payload(patient, doctor)
    payload["doctor"] = str(uuid.uuid4())
    r = client_for(reception_user).post(BASE, payload, format="json")
    assert r.status_code == 404
    assert r.data["error"]["code"] == "not_found"


def test_book_requires_valid_body(client_for, reception_user):
    r = client_for(reception_user).post(BASE, {"patient": "nope"}, format="json")
    assert r.status_code == 400
    assert r.data["error"]["code"] == "validation_error"
    assert "doctor" in r.data["error"]["details"]


def test_pharmacist_cannot_book(client_for, pharmacist_user, patient, doctor):
    r = client_for(pharmacist_user).post(BASE, _payload(patient, doctor), format="json")
    assert r.status_code == 403
    assert r.data["error"]["code"] == "permission_denied"


def test_patient_principal_books_only_for_self(make_user, client_for, patient, other_patient, doctor):
    user = make_user("patient1", "PATIENT")
    patient.user = user
    patient.save(update_fields=["user"])
    c = client_for(user)

    assert c.post(BASE, _payload(other_patient, doctor), format="json").status_code == 403
    assert c.post(BASE, _payload(patient, doctor), format="json").status_code == 201


def test_unauthenticated_request_is_rejected(patient, doctor):
    from rest_framework.test import APIClient

    r = APIClient().post(BASE, _payload(patient, doctor), format="json")
    assert r.status_code == 401


def test_workflow_actions_and_invalid_transition(client_for, reception_user, doctor_user, patient, doctor):
    created = client_for(reception_user).post(BASE, _payload(patient, doctor), format="json").data
    c = client_for(doctor_user)

    assert c.post(f"{BASE}{created['id']}/check_in/").data["status"] == "confirmed"
    assert c.post(f"{BASE}{created['id']}/start/").data["status"] == "in-progress"
    done = c.post(f"{BASE}{created['id']}/complete/", {"diagnosis": "Migraine"}, format="json")
    assert done.status_code == 200
    assert done.data["diagnosis"] == "Migraine"

    r = c.post(f"{BASE}{created['id']}/cancel/", {"reason": "late"}, format="json")
    assert r.status_code == 409
    assert r.data["error"]["code"] == "invalid_transition"


def test_retrieve_unknown_and_malformed_ids(api_client):
    assert api_client.get(f"{BASE}{uuid.uuid4()}/").status_code == 404
    assert api_client.get(f"{BASE}not-a-uuid/").status_code == 404


def test_list_filters_by_doctor_and_date(client_for, reception_user, patient, doctor, other_doctor):
    c = client_for(reception_user)
    c.post(BASE, _payload(patient, doctor), format="json")
    c.post(BASE, _payload(patient, other_doctor), format="json")

    r = c.get(BASE, {"doctor": str(doctor.id), "date": "2026-02-20"})
    assert r.status_code == 200
    assert r.data["count"] == 1
    assert str(r.data["results"][0]["doctor"]) == str(doctor.id)


def test_doctor_schedule_and_queue(client_for, reception_user, patient, other_patient, doctor):
    c = client_for(reception_user)
    first = c.post(BASE, _payload(patient, doctor, at="11:00"), format="json").data
    second = c.post(BASE, _payload(other_patient, doctor, at="09:30"), format="json").data
    c.post(f"{BASE}{first['id']}/cancel/", {}, format="json")

    schedule = c.get(f"/api/v1/doctors/{doctor.id}/schedule/", {"date": "2026-02-20"})
    assert schedule.status_code == 200
    assert [a["id"] for a in schedule.data] == [second["id"]]

    queue = c.get(f"/api/v1/doctors/{doctor.id}/queue/", {"date": "2026-02-20"})
    assert [a["queue_token"] for a in queue.data] == ["Q-002"]
