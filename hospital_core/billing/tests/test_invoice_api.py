# hospital_core/billing/tests/test_invoice_api.py
import uuid

import pytest

pytestmark = pytest.mark.django_db

BASE = "/api/v1/billing/invoices/"


def test_create_pay_and_read_back(client_for, billing_user, patient):
    c = client_for(billing_user)

    created = c.post(
        BASE,
        {"patient": str(patient.id), "consultation_fee": "500.00", "lab_charges": "250.00"},
        format="json",
    )
    assert created.status_code == 201, created.content
    assert created.data["total_amount"] == "750.00"
    assert created.data["status"] == "pending"

    paid = c.post(f"{BASE}{created.data['id']}/payments/", {"amount": "750.00", "method": "card"}, format="json")
    assert paid.status_code == 201
    assert paid.data["status"] == "paid"
    assert paid.data["balance_due"] == "0.00"
    assert len(paid.data["payments"]) == 1

    again = c.post(f"{BASE}{created.data['id']}/payments/", {"amount": "1.00", "method": "cash"}, format="json")
    assert again.status_code == 409
    assert again.data["error"]["code"] == "invoice_closed"


def test_payment_on_unknown_invoice(client_for, billing_user):
    r = client_for(billing_user).post(f"{BASE}{uuid.uuid4()}/payments/", {"amount": "10.00", "method": "cash"}, format="json")
    assert r.status_code == 404


def test_invalid_payment_method(client_for, billing_user, patient):
    c = client_for(billing_user)
    created = c.post(BASE, {"patient": str(patient.id), "consultation_fee": "100.00"}, format="json")

    r = c.post(f"{BASE}{created.data['id']}/payments/", {"amount": "10.00", "method": "barter"}, format="json")
    assert r.status_code == 400
    assert "method" in r.data["error"]["details"]


def test_only_admin_cancels(client_for, billing_user, admin_user, patient):
    created = client_for(billing_user).post(BASE, {"patient": str(patient.id), "consultation_fee": "100.00"}, format="json")

    assert client_for(billing_user).post(f"{BASE}{created.data['id']}/cancel/").status_code == 403

    r = client_for(admin_user).post(f"{BASE}{created.data['id']}/cancel/", {"reason": "duplicate"}, format="json")
    assert r.status_code == 200
    assert r.data["status"] == "cancelled"


def test_list_filters_by_patient(client_for, billing_user, patient, other_patient):
    c = client_for(billing_user)
    c.post(BASE, {"patient": str(patient.id), "consultation_fee": "100.00"}, format="json")
    c.post(BASE, {"patient": str(other_patient.id), "consultation_fee": "100.00"}, format="json")

    r = c.get(BASE, {"patient": str(patient.id)})
    assert r.status_code == 200
    assert r.data["count"] == 1
