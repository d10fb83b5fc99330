"""
Structured logging helpers.

- RequestIdFilter stamps every record with the id of the request being served
  (set by RequestIdMiddleware), or "-" outside a request.
- SanitizedJSONFormatter renders records as one JSON object per line and
  redacts credential-like keys passed through `extra=`.
"""
import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)

SENSITIVE_FIELDS = {
    "password",
    "token",
    "access",
    "refresh",
    "secret",
    "api_key",
    "authorization",
}

_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "pathname", "process",
    "processName", "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "taskName", "message", "asctime",
}


def set_request_id(value: str | None):
    return _request_id.set(value)


def reset_request_id(token) -> None:
    _request_id.reset(token)


def get_request_id() -> str | None:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    def filter(self, record):
        record.request_id = get_request_id() or "-"
        return True


class SanitizedJSONFormatter(logging.Formatter):
    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }

        for key, value in record.__dict__.items():
            if key in log_data or key in _STANDARD_ATTRS or key.startswith("_"):
                continue
            if key.lower() in SENSITIVE_FIELDS:
                log_data[key] = "[REDACTED]"
            else:
                log_data[key] = self._sanitize_value(value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)

    def _sanitize_value(self, value):
        if isinstance(value, dict):
            return {
                k: "[REDACTED]" if str(k).lower() in SENSITIVE_FIELDS else self._sanitize_value(v)
                for k, v in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [self._sanitize_value(v) for v in value]
        return value
