# hospital_core/tests/test_api_contract.py
import uuid

import pytest
from rest_framework.test import APIRequestFactory

from hospital_core.common.api.exceptions import api_exception_handler

pytestmark = pytest.mark.django_db


def test_request_id_is_echoed_and_used_in_errors(api_client):
    r = api_client.get(f"/api/v1/patients/{uuid.uuid4()}/", HTTP_X_REQUEST_ID="trace-123")

    assert r.status_code == 404
    assert r["X-Request-ID"] == "trace-123"
    assert r.data == {
        "error": {
            "code": "not_found",
            "message": "Patient not found",
            "details": None,
            "request_id": "trace-123",
        }
    }


def test_malformed_request_id_is_replaced(api_client):
    r = api_client.get("/api/v1/doctors/", HTTP_X_REQUEST_ID="bad id with spaces")
    assert r["X-Request-ID"] != "bad id with spaces"
    assert len(r["X-Request-ID"]) == 32


def test_unexpected_errors_become_server_error_envelope():
    request = APIRequestFactory().get("/api/v1/doctors/")
    request.request_id = "rid-500"

    response = api_exception_handler(RuntimeError("kaboom"), {"request": request})

    assert response.status_code == 500
    assert response.data["error"]["code"] == "server_error"
    assert response.data["error"]["request_id"] == "rid-500"
    assert "kaboom" not in response.data["error"]["message"]


def test_health_is_public():
    from rest_framework.test import APIClient

    r = APIClient().get("/api/v1/health/")
    assert r.status_code == 200
    assert r.data == {"status": "ok", "database": "up"}
