# hospital_core/audit/tests/test_audit_service.py
import pytest
from django.core.exceptions import ValidationError
from django.db import transaction

from hospital_core.audit.emitters import (
    AuditEntry,
    BackgroundAuditEmitter,
    InMemoryAuditEmitter,
    SynchronousAuditEmitter,
    get_audit_emitter,
    write_entry,
)
from hospital_core.audit.models import AuditLogEntry
from hospital_core.audit.services import AuditService


@pytest.mark.django_db
def test_record_is_deferred_until_commit(django_capture_on_commit_callbacks):
    emitter = InMemoryAuditEmitter()

    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        AuditService.record(action="CREATE_THING", resource="things", resource_id=1, actor_user_id=None, emitter=emitter)
        assert emitter.entries == []

    assert len(callbacks) == 1
    callbacks[0]()
    assert emitter.actions() == ["CREATE_THING"]
    assert emitter.entries[0].resource_id == "1"


@pytest.mark.django_db
def test_rolled_back_work_records_nothing(django_capture_on_commit_callbacks):
    emitter = InMemoryAuditEmitter()

    with django_capture_on_commit_callbacks(execute=True):
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                AuditService.record(action="CREATE_THING", resource="things", actor_user_id=None, emitter=emitter)
                raise RuntimeError("boom")

    assert emitter.entries == []


@pytest.mark.django_db
def test_configured_emitter_is_used_by_default(audit_emitter, django_capture_on_commit_callbacks):
    assert isinstance(audit_emitter, InMemoryAuditEmitter)
    assert get_audit_emitter() is audit_emitter

    with django_capture_on_commit_callbacks(execute=True):
        AuditService.record(action="NOTE", resource="things", actor_user_id=None)

    assert audit_emitter.actions() == ["NOTE"]


@pytest.mark.django_db
def test_entries_are_append_only():
    row = write_entry(AuditEntry(action="VIEW_PATIENTS", resource="patients"))

    row.action = "TAMPERED"
    with pytest.raises(ValidationError):
        row.save()
    with pytest.raises(ValidationError):
        row.delete()

    assert AuditLogEntry.objects.get(id=row.id).action == "VIEW_PATIENTS"


@pytest.mark.django_db
def test_synchronous_emitter_swallows_write_errors(monkeypatch):
    def broken(entry):
        raise RuntimeError("db down")

    monkeypatch.setattr("hospital_core.audit.emitters.write_entry", broken)
    SynchronousAuditEmitter().emit(AuditEntry(action="X", resource="y"))


@pytest.mark.django_db(transaction=True)
def test_background_emitter_writes_from_worker_thread():
    emitter = BackgroundAuditEmitter(maxsize=10)
    try:
        emitter.emit(AuditEntry(action="CREATE_PATIENTS", resource="patients", resource_id="p1"))
        emitter.flush()
    finally:
        emitter.stop()

    assert AuditLogEntry.objects.filter(action="CREATE_PATIENTS", resource_id="p1").exists()


def test_background_emitter_drops_when_full(monkeypatch):
    emitter = BackgroundAuditEmitter(maxsize=1)
    # no worker: the queue fills up and the second entry is dropped
    monkeypatch.setattr(emitter, "_ensure_worker", lambda: None)

    emitter.emit(AuditEntry(action="A", resource="r"))
    emitter.emit(AuditEntry(action="B", resource="r"))

    assert emitter._queue.qsize() == 1
