# hospital_core/lab/tests/test_lab_api.py
import pytest

pytestmark = pytest.mark.django_db

BASE = "/api/v1/lab/tests/"


def test_order_collect_report(client_for, doctor_user, lab_user, patient, doctor):
    created = client_for(doctor_user).post(
        BASE,
        {
            "patient": str(patient.id),
            "doctor": str(doctor.id),
            "test_name": "Lipid profile",
            "test_type": "blood",
            "priority": "urgent",
        },
        format="json",
    )
    assert created.status_code == 201, created.content
    assert created.data["status"] == "ordered"
    assert created.data["patient_name"] == patient.full_name

    lab = client_for(lab_user)
    collected = lab.post(f"{BASE}{created.data['id']}/collect_sample/", {"performed_by": "Tech A"}, format="json")
    assert collected.data["status"] == "sample-collected"

    reported = lab.post(
        f"{BASE}{created.data['id']}/results/",
        {"results": {"ldl": "110 mg/dL"}, "findings": "Borderline LDL"},
        format="json",
    )
    assert reported.status_code == 200
    assert reported.data["status"] == "completed"
    assert reported.data["results"] == {"ldl": "110 mg/dL"}

    cancelled = lab.post(f"{BASE}{created.data['id']}/cancel/")
    assert cancelled.status_code == 409


def test_doctor_cannot_enter_results(client_for, doctor_user, patient, doctor):
    created = client_for(doctor_user).post(
        BASE,
        {"patient": str(patient.id), "doctor": str(doctor.id), "test_name": "X-ray chest", "test_type": "imaging"},
        format="json",
    )
    r = client_for(doctor_user).post(f"{BASE}{created.data['id']}/results/", {"results": {"a": 1}}, format="json")
    assert r.status_code == 403


def test_list_by_status(client_for, doctor_user, lab_user, patient, doctor):
    c = client_for(doctor_user)
    for name in ("CBC", "ESR"):
        c.post(BASE, {"patient": str(patient.id), "doctor": str(doctor.id), "test_name": name, "test_type": "blood"}, format="json")

    r = client_for(lab_user).get(BASE, {"status": "ordered"})
    assert r.status_code == 200
    assert r.data["count"] == 2
