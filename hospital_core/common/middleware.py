# hospital_core/common/middleware.py
from __future__ import annotations

import re

from hospital_core.common.api.exceptions import ensure_request_id
from hospital_core.common.logging import reset_request_id, set_request_id

REQUEST_ID_HEADER = "HTTP_X_REQUEST_ID"
RESPONSE_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIdMiddleware:
    """
    Gives every request a stable id:
      - reuses an incoming X-Request-ID when it looks sane
      - otherwise generates one (same helper the error envelope uses)
    Exposes it to logging for the duration of the request and echoes it back.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        incoming = request.META.get(REQUEST_ID_HEADER, "")
        if incoming and _VALID_REQUEST_ID.match(incoming):
            request.request_id = incoming

        rid = ensure_request_id(request)
        token = set_request_id(rid)
        try:
            response = self.get_response(request)
        finally:
            reset_request_id(token)

        response[RESPONSE_HEADER] = rid
        return response
