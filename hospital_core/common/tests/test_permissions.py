# hospital_core/common/tests/test_permissions.py
import pytest

from hospital_core.common.permissions import CAPABILITIES, has_capability, user_roles

pytestmark = pytest.mark.django_db


def test_superuser_is_admin(make_user):
    root = make_user("root", is_superuser=True)
    assert user_roles(root) == {"ADMIN"}
    assert has_capability(root, "audit.list")


def test_user_without_groups_is_readonly(make_user):
    plain = make_user("plain")
    assert user_roles(plain) == {"READONLY"}
    assert has_capability(plain, "appointments.list")
    assert not has_capability(plain, "appointments.create")


@pytest.mark.parametrize(
    "role, capability, allowed",
    [
        ("PHARMACIST", "prescriptions.dispense", True),
        ("DOCTOR", "prescriptions.dispense", False),
        ("DOCTOR", "prescriptions.create", True),
        ("RECEPTION", "appointments.create", True),
        ("LAB", "lab_tests.results", True),
        ("NURSE", "lab_tests.results", False),
        ("BILLING", "invoices.payments", True),
        ("BILLING", "invoices.cancel", False),
        ("DOCTOR", "audit.list", False),
    ],
)
def test_capability_table(make_user, role, capability, allowed):
    user = make_user(f"u_{role.lower()}", role)
    assert has_capability(user, capability) is allowed


def test_unknown_capability_is_denied(make_user):
    assert "patients.destroy" not in CAPABILITIES
    assert not has_capability(make_user("doc", "DOCTOR"), "patients.destroy")
