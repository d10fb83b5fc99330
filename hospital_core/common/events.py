# hospital_core/common/events.py
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

from django.db import transaction

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]

_registry: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(event_name: str):
    """
    Decorator to register an event handler.
    Usage:
        @subscribe("appointment.booked")
        def handler(payload): ...
    """
    def _decorator(fn: Handler) -> Handler:
        _registry[event_name].append(fn)
        return fn
    return _decorator


def publish(event_name: str, payload: Dict[str, Any]) -> None:
    """
    Publish an event to in-process subscribers.
    Keep payloads ID-based to avoid cross-app imports.

    A failing subscriber is logged and skipped: events fire after the business
    transaction committed, so they must not turn a success into an error.
    """
    for handler in _registry.get(event_name, []):
        try:
            handler(payload)
        except Exception:
            logger.exception("Event subscriber failed", extra={"event": event_name})


def publish_on_commit(event_name: str, payload: Dict[str, Any], *, using: str | None = None) -> None:
    transaction.on_commit(lambda: publish(event_name, payload), using=using)
