# hospital_core/audit/tests/test_classify.py
import pytest

from hospital_core.audit import classify


@pytest.mark.parametrize(
    "path, resource",
    [
        ("/api/v1/prescriptions/abc/dispense/", "prescriptions"),
        ("/api/patients/", "patients"),
        ("/api/v1/billing/invoices/1/payments/", "billing"),
        ("/admin/", "unknown"),
    ],
)
def test_resource_for(path, resource):
    assert classify.resource_for(path) == resource


def test_action_uses_custom_viewset_action_name():
    assert classify.action_for("POST", "prescriptions", "dispense") == "DISPENSE_PRESCRIPTIONS"
    assert classify.action_for("POST", "appointments", "check_in") == "CHECK_IN_APPOINTMENTS"
    assert classify.action_for("POST", "patients", "create") == "CREATE_PATIENTS"
    assert classify.action_for("PATCH", "patients", "partial_update") == "UPDATE_PATIENTS"
    assert classify.action_for("GET", "lab", None) == "VIEW_LAB"


@pytest.mark.parametrize(
    "method, path, severity",
    [
        ("DELETE", "/api/v1/doctors/1/", "critical"),
        ("POST", "/api/v1/billing/invoices/1/payments/", "critical"),
        ("GET", "/api/v1/prescriptions/", "critical"),
        ("POST", "/api/v1/patients/", "high"),
        ("PATCH", "/api/v1/patients/1/", "high"),
        ("POST", "/api/v1/lab/tests/", "high"),
        ("POST", "/api/v1/appointments/", "medium"),
        ("PUT", "/api/v1/medicines/1/", "medium"),
        ("PATCH", "/api/v1/doctors/1/", "low"),
        ("PATCH", "/api/v1/departments/1/", "low"),
        ("GET", "/api/v1/appointments/", "low"),
    ],
)
def test_severity_for(method, path, severity):
    assert classify.severity_for(method, path) == severity


def test_resource_id_prefers_url_kwargs_over_body():
    assert classify.resource_id_for({"pk": "42"}, {"id": "7"}) == "42"
    assert classify.resource_id_for({"doctor_id": "d1"}, None) == "d1"
    assert classify.resource_id_for({}, {"id": "7"}) == "7"
    assert classify.resource_id_for(None, ["not", "a", "dict"]) == ""


def test_redact_is_recursive_and_case_insensitive():
    body = {
        "username": "alice",
        "Password": "hunter2",
        "nested": {"accessToken": "abc", "items": [{"secret": "s", "keep": 1}]},
    }
    assert classify.redact(body) == {
        "username": "alice",
        "Password": "[REDACTED]",
        "nested": {"accessToken": "[REDACTED]", "items": [{"secret": "[REDACTED]", "keep": 1}]},
    }
    # input is left untouched
    assert body["Password"] == "hunter2"


@pytest.mark.parametrize(
    "method, path, authenticated, expected",
    [
        ("POST", "/api/v1/appointments/", True, True),
        ("GET", "/api/v1/appointments/", True, False),
        ("GET", "/api/v1/patients/", True, True),
        ("GET", "/api/v1/lab/tests/", True, True),
        ("POST", "/api/v1/appointments/", False, False),
        ("POST", "/api/v1/auth/login/", False, True),
        ("GET", "/api/v1/health/", True, False),
        ("GET", "/api/schema/", True, False),
        ("POST", "/admin/login/", True, False),
    ],
)
def test_should_audit(method, path, authenticated, expected):
    assert classify.should_audit(method=method, path=path, authenticated=authenticated) is expected
