# hospital_core/conftest.py
import datetime as dt

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from hospital_core.audit.emitters import get_audit_emitter
from hospital_core.doctors.models import Department, Doctor
from hospital_core.patients.models import Patient
from hospital_core.pharmacy.models import Medicine

ROLES = ["ADMIN", "DOCTOR", "NURSE", "RECEPTION", "PHARMACIST", "LAB", "BILLING", "PATIENT", "READONLY"]


@pytest.fixture
def make_user(db):
    """
    make_user("reception1", "RECEPTION") -> user in that auth group.
    Pass role=None for a user without groups (treated as READONLY).
    """
    User = get_user_model()

    def _make(username: str, role: str | None = None, **extra):
        user = User.objects.create_user(username=username, password="pass123", is_active=True, **extra)
        if role:
            group, _ = Group.objects.get_or_create(name=role)
            user.groups.add(group)
        return user

    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user("admin", "ADMIN")


@pytest.fixture
def doctor_user(make_user):
    return make_user("dr_house", "DOCTOR")


@pytest.fixture
def pharmacist_user(make_user):
    return make_user("pharma", "PHARMACIST")


@pytest.fixture
def reception_user(make_user):
    return make_user("frontdesk", "RECEPTION")


@pytest.fixture
def lab_user(make_user):
    return make_user("labtech", "LAB")


@pytest.fixture
def billing_user(make_user):
    return make_user("cashier", "BILLING")


@pytest.fixture
def client_for():
    """client_for(user) -> APIClient authenticated as that user."""

    def _client(user):
        c = APIClient()
        c.force_authenticate(user=user)
        return c

    return _client


@pytest.fixture
def api_client(client_for, admin_user):
    return client_for(admin_user)


@pytest.fixture
def department(db):
    return Department.objects.create(name="Internal Medicine")


@pytest.fixture
def doctor(db, doctor_user, department):
    return Doctor.objects.create(
        user=doctor_user,
        full_name="Gregory House",
        specialization="Diagnostics",
        licence_number="LIC-0001",
        department=department,
    )


@pytest.fixture
def other_doctor(db):
    return Doctor.objects.create(
        full_name="Lisa Cuddy",
        specialization="Endocrinology",
        licence_number="LIC-0002",
    )


@pytest.fixture
def patient(db):
    return Patient.objects.create(
        full_name="Test Patient",
        phone="9000000001",
        medical_record_number="PT-2026-0001",
    )


@pytest.fixture
def other_patient(db):
    return Patient.objects.create(
        full_name="Other Patient",
        phone="9000000002",
        medical_record_number="PT-2026-0002",
    )


@pytest.fixture
def make_medicine(db):
    def _make(name: str, stock: int, **extra):
        extra.setdefault("min_stock", 2)
        return Medicine.objects.create(name=name, stock=stock, **extra)

    return _make


@pytest.fixture
def visit_day():
    return dt.date(2026, 2, 20)


@pytest.fixture
def audit_emitter(settings):
    """
    Swap the configured emitter for an in-memory one.
    Service entries only reach it once their transaction commits, so wrap the
    call in django_capture_on_commit_callbacks(execute=True).
    """
    settings.AUDIT_EMITTER = "hospital_core.audit.emitters.InMemoryAuditEmitter"
    return get_audit_emitter()
