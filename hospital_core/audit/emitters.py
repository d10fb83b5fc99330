# hospital_core/audit/emitters.py
"""
Audit emitters: where audit entries go once they leave the request path.

Everything that records an audit entry (the request interceptor and services
via AuditService) only ever calls `emit(entry)` on an AuditEmitter. Which
emitter is used is configured with the AUDIT_EMITTER setting (dotted path):

- BackgroundAuditEmitter (default): bounded in-process queue drained by one
  daemon worker thread. emit() never blocks and never raises.
- SynchronousAuditEmitter: writes the row inline, logging any failure.
- InMemoryAuditEmitter: keeps entries in a list, for tests.
"""
from __future__ import annotations

import logging
import queue
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.signals import setting_changed
from django.db import close_old_connections
from django.dispatch import receiver
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditEntry:
    action: str
    resource: str
    resource_id: str = ""
    user_id: Optional[int] = None
    method: str = ""
    endpoint: str = ""
    ip_address: Optional[str] = None
    user_agent: str = ""
    request_body: Optional[Dict[str, Any]] = None
    response_status: Optional[int] = None
    changes: Optional[Dict[str, Any]] = None
    severity: str = "low"
    success: bool = True
    metadata: Dict[str, Any] = field(default_factory=dict)


def write_entry(entry: AuditEntry):
    from hospital_core.audit.models import AuditLogEntry

    data = asdict(entry)
    data["resource_id"] = str(data["resource_id"] or "")
    return AuditLogEntry.objects.create(**data)


class AuditEmitter:
    def emit(self, entry: AuditEntry) -> None:
        raise NotImplementedError


class SynchronousAuditEmitter(AuditEmitter):
    def emit(self, entry: AuditEntry) -> None:
        try:
            write_entry(entry)
        except Exception:
            logger.exception("Audit write failed for %s", entry.action)


class InMemoryAuditEmitter(AuditEmitter):
    def __init__(self):
        self.entries: List[AuditEntry] = []

    def emit(self, entry: AuditEntry) -> None:
        self.entries.append(entry)

    def actions(self) -> List[str]:
        return [e.action for e in self.entries]

    def clear(self) -> None:
        self.entries.clear()


_STOP = object()


class BackgroundAuditEmitter(AuditEmitter):
    """
    Queue + single daemon worker. The worker is started lazily on first emit
    (so importing/configuring never spawns threads) and owns its own DB
    connection, released after every write.

    When the queue is full the entry is dropped and logged; the request that
    produced it is never slowed down.
    """

    def __init__(self, maxsize: int | None = None):
        if maxsize is None:
            maxsize = getattr(settings, "AUDIT_QUEUE_MAXSIZE", 10000)
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._lock = threading.Lock()
        self._worker: threading.Thread | None = None

    def emit(self, entry: AuditEntry) -> None:
        self._ensure_worker()
        try:
            self._queue.put_nowait(entry)
        except queue.Full:
            logger.error(
                "Audit queue full, dropping entry",
                extra={"audit_action": entry.action, "audit_resource": entry.resource},
            )

    def _ensure_worker(self) -> None:
        if self._worker is not None and self._worker.is_alive():
            return
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(target=self._run, name="audit-writer", daemon=True)
            self._worker.start()

    def _run(self) -> None:
        while True:
            entry = self._queue.get()
            try:
                if entry is _STOP:
                    return
                write_entry(entry)
            except Exception:
                logger.exception("Background audit write failed")
            finally:
                close_old_connections()
                self._queue.task_done()

    def flush(self) -> None:
        """Block until every queued entry has been handled."""
        if self._worker is not None and self._worker.is_alive():
            self._queue.join()

    def stop(self) -> None:
        if self._worker is None or not self._worker.is_alive():
            return
        self._queue.put(_STOP)
        self._worker.join()
        self._worker = None


# -------------------------------------------------------------------
# Configured emitter (process-wide)
# -------------------------------------------------------------------

_emitter: AuditEmitter | None = None
_emitter_lock = threading.Lock()


def get_audit_emitter() -> AuditEmitter:
    global _emitter
    if _emitter is None:
        with _emitter_lock:
            if _emitter is None:
                _emitter = import_string(settings.AUDIT_EMITTER)()
    return _emitter


def reset_audit_emitter() -> None:
    global _emitter
    with _emitter_lock:
        previous, _emitter = _emitter, None
    if isinstance(previous, BackgroundAuditEmitter):
        previous.stop()


@receiver(setting_changed)
def _audit_emitter_setting_changed(*, setting, **kwargs):
    if setting in ("AUDIT_EMITTER", "AUDIT_QUEUE_MAXSIZE"):
        reset_audit_emitter()
