# hospital_core/common/transactions.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, TypeVar

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, OperationalError, connections, transaction

from hospital_core.common.api.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgreSQL SQLSTATEs that mean "we lost the race for a lock".
LOCK_NOT_AVAILABLE = "55P03"
DEADLOCK_DETECTED = "40P01"
SERIALIZATION_FAILURE = "40001"
_RETRYABLE_SQLSTATES = {LOCK_NOT_AVAILABLE, DEADLOCK_DETECTED, SERIALIZATION_FAILURE}


@dataclass(frozen=True)
class TransactionContext:
    """
    Handle passed to a unit of work.

    - using: database alias every query in the unit of work must target
    - on_commit(fn): defer a side effect until the outermost commit
      (dropped if the transaction rolls back)
    """
    using: str

    def on_commit(self, fn: Callable[[], None]) -> None:
        transaction.on_commit(fn, using=self.using)


def _sqlstate(exc: BaseException) -> str | None:
    cause = exc.__cause__ or exc.__context__
    if cause is None:
        return None
    # psycopg 3 exposes .sqlstate, psycopg2 exposes .pgcode
    return getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)


def is_lock_failure(exc: BaseException) -> bool:
    return isinstance(exc, OperationalError) and _sqlstate(exc) in _RETRYABLE_SQLSTATES


def _apply_lock_timeout(using: str, lock_timeout_ms: int | None) -> None:
    conn = connections[using]
    if conn.vendor != "postgresql":
        return

    timeout = lock_timeout_ms if lock_timeout_ms is not None else getattr(settings, "HOSPITAL_LOCK_TIMEOUT_MS", None)
    if not timeout:
        return

    with conn.cursor() as cursor:
        # SET LOCAL lasts until the end of the current transaction only.
        cursor.execute(f"SET LOCAL lock_timeout = {int(timeout)}")


def run_in_transaction(
    unit_of_work: Callable[[TransactionContext], T],
    *,
    using: str | None = None,
    lock_timeout_ms: int | None = None,
) -> T:
    """
    Transaction boundary for every multi-step mutation.

    Begins a transaction, runs unit_of_work(ctx), commits if it returns,
    rolls back and re-raises if it raises. Callers never observe partially
    applied state.

    Lock timeouts / deadlocks reported by the database are re-raised as
    LockTimeoutError (409, retryable). No retry happens here.

    When called inside an already open atomic block the unit of work runs in a
    savepoint of the outer transaction (the lock timeout is only applied by the
    outermost boundary).
    """
    alias = using or DEFAULT_DB_ALIAS
    ctx = TransactionContext(using=alias)
    outermost = not connections[alias].in_atomic_block

    try:
        with transaction.atomic(using=alias):
            if outermost:
                _apply_lock_timeout(alias, lock_timeout_ms)
            return unit_of_work(ctx)
    except OperationalError as exc:
        if is_lock_failure(exc):
            logger.info("Unit of work rolled back after lock failure: %s", exc)
            raise LockTimeoutError() from exc
        raise
