# hospital_core/doctors/tests/test_doctor_api.py
import uuid

import pytest

pytestmark = pytest.mark.django_db

BASE = "/api/v1/doctors/"


def test_list_filters_by_specialization_and_availability(client_for, make_user, doctor, other_doctor):
    other_doctor.is_available = False
    other_doctor.save(update_fields=["is_available"])
    c = client_for(make_user("p1", "PATIENT"))

    everyone = c.get(BASE)
    assert everyone.status_code == 200
    assert [d["full_name"] for d in everyone.data["results"]] == ["Gregory House", "Lisa Cuddy"]

    assert c.get(BASE, {"specialization": "diagnostics"}).data["count"] == 1
    assert [d["id"] for d in c.get(BASE, {"available": "true"}).data["results"]] == [str(doctor.id)]


def test_retrieve_and_unknown(api_client, doctor):
    r = api_client.get(f"{BASE}{doctor.id}/")
    assert r.status_code == 200
    assert r.data["consultation_fee"] == "500.00"
    assert set(r.data["availability"]) >= {"monday", "sunday"}

    assert api_client.get(f"{BASE}{uuid.uuid4()}/schedule/").status_code == 404


def test_schedule_rejects_bad_date(api_client, doctor):
    r = api_client.get(f"{BASE}{doctor.id}/schedule/", {"date": "20-02-2026"})
    assert r.status_code == 400
    assert r.data["error"]["code"] == "validation_error"


def test_queue_is_staff_only(client_for, make_user, doctor):
    r = client_for(make_user("p2", "PATIENT")).get(f"{BASE}{doctor.id}/queue/")
    assert r.status_code == 403
