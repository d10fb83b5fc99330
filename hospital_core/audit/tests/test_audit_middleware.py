# hospital_core/audit/tests/test_audit_middleware.py
import json

import pytest
from django.http import HttpResponse
from django.test import RequestFactory

from hospital_core.audit.emitters import AuditEmitter, InMemoryAuditEmitter
from hospital_core.audit.middleware import AuditLogMiddleware
from hospital_core.audit.models import AuditLogEntry

pytestmark = pytest.mark.django_db


class ExplodingEmitter(AuditEmitter):
    def emit(self, entry):
        raise RuntimeError("audit store is down")


def _post(path, body, user):
    request = RequestFactory().post(
        path,
        data=json.dumps(body),
        content_type="application/json",
        HTTP_USER_AGENT="pytest",
        HTTP_X_FORWARDED_FOR="10.0.0.9, 172.16.0.1",
    )
    request.user = user
    return request


def test_emitter_failure_never_changes_the_response(reception_user):
    response = HttpResponse(status=201, content=b"created")
    mw = AuditLogMiddleware(lambda request: response, emitter=ExplodingEmitter())

    result = mw(_post("/api/v1/appointments/", {"reason": "x"}, reception_user))

    assert result is response
    assert result.status_code == 201


def test_view_sees_the_body_and_entry_is_redacted(reception_user):
    seen = {}

    def view(request):
        seen["body"] = json.loads(request.body)
        return HttpResponse(status=400)

    emitter = InMemoryAuditEmitter()
    mw = AuditLogMiddleware(view, emitter=emitter)
    mw(_post("/api/v1/patients/", {"full_name": "A", "password": "p"}, reception_user))

    assert seen["body"] == {"full_name": "A", "password": "p"}
    (entry,) = emitter.entries
    assert entry.action == "CREATE_PATIENTS"
    assert entry.resource == "patients"
    assert entry.request_body == {"full_name": "A", "password": "[REDACTED]"}
    assert entry.severity == "high"
    assert entry.success is False
    assert entry.response_status == 400
    assert entry.ip_address == "10.0.0.9"
    assert entry.user_agent == "pytest"
    assert entry.user_id == reception_user.id
    assert entry.metadata["roles"] == ["RECEPTION"]


def test_anonymous_writes_are_not_audited():
    from django.contrib.auth.models import AnonymousUser

    emitter = InMemoryAuditEmitter()
    mw = AuditLogMiddleware(lambda request: HttpResponse(status=401), emitter=emitter)
    mw(_post("/api/v1/appointments/", {}, AnonymousUser()))

    assert emitter.entries == []


def test_api_request_writes_audit_row(client_for, reception_user):
    r = client_for(reception_user).post("/api/v1/patients/", {"full_name": "Jane Roe", "phone": "900"}, format="json")
    assert r.status_code == 201

    entry = AuditLogEntry.objects.get(action="CREATE_PATIENTS")
    assert entry.user_id == reception_user.id
    assert entry.method == "POST"
    assert entry.endpoint == "/api/v1/patients/"
    assert entry.response_status == 201
    assert entry.severity == "high"
    assert entry.metadata["request_id"] == r["X-Request-ID"]


def test_custom_action_and_url_id_are_recorded(client_for, admin_user, make_medicine):
    med = make_medicine("Amoxicillin", stock=5)
    r = client_for(admin_user).post(f"/api/v1/medicines/{med.id}/adjust_stock/", {"delta": 3}, format="json")
    assert r.status_code == 200

    entry = AuditLogEntry.objects.get(action="ADJUST_STOCK_MEDICINES")
    assert entry.resource_id == str(med.id)
    assert entry.severity == "medium"


def test_sensitive_reads_are_audited_but_plain_reads_are_not(api_client):
    api_client.get("/api/v1/patients/")
    api_client.get("/api/v1/doctors/")

    assert AuditLogEntry.objects.filter(action="VIEW_PATIENTS", severity="low").count() == 1
    assert not AuditLogEntry.objects.filter(resource="doctors").exists()


def test_patch_outside_sensitive_paths_is_low_severity(api_client, doctor):
    r = api_client.patch(f"/api/v1/doctors/{doctor.id}/", {"is_available": False}, format="json")
    assert r.status_code == 200

    entry = AuditLogEntry.objects.get(action="UPDATE_DOCTORS")
    assert entry.resource_id == str(doctor.id)
    assert entry.severity == "low"
