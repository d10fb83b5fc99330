# hospital_core/common/sequences.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Callable

from django.db import connections, transaction
from django.db.models import QuerySet
from django.utils import timezone

from hospital_core.common.models import SequenceCounter


class Scope:
    GLOBAL = "global"
    DATE = "date"
    YEAR = "year"


@dataclass(frozen=True)
class SequenceSpec:
    """
    How one kind of display number is built.

    prefix + datepart + zero-padded counter, e.g. APT-20260220-001.
    `scope` decides when the counter restarts; `existing` returns the rows
    already numbered in a scope and seeds a brand new counter from their count.
    """
    prefix: str
    width: int
    datepart: str  # strftime format
    scope: str
    existing: Callable[[dt.date], QuerySet]


_REGISTRY: dict[str, SequenceSpec] = {}


def register(kind: str, spec: SequenceSpec) -> None:
    _REGISTRY[kind] = spec


def get_spec(kind: str) -> SequenceSpec:
    try:
        return _REGISTRY[kind]
    except KeyError:
        raise LookupError(f"No sequence registered for {kind!r}") from None


def format_number(spec: SequenceSpec, on: dt.date, value: int) -> str:
    return f"{spec.prefix}-{on.strftime(spec.datepart)}-{value:0{spec.width}d}"


def _scope_key(kind: str, spec: SequenceSpec, on: dt.date) -> str:
    if spec.scope == Scope.DATE:
        return f"{kind}:{on:%Y%m%d}"
    if spec.scope == Scope.YEAR:
        return f"{kind}:{on:%Y}"
    return kind


class SequenceAllocator:
    """
    Hands out human-readable numbers (appointments, invoices, prescriptions,
    lab tests, medical records).

    A plain "count rows, add one" read races under concurrency, so the counter
    lives in a SequenceCounter row that is locked and bumped inside the caller's
    transaction. Two concurrent inserts serialize on that row and always get
    distinct numbers; a rolled-back insert also rolls back its increment.
    """

    @staticmethod
    def next_number(kind: str, *, on: dt.date | None = None, using: str = "default") -> str:
        if not connections[using].in_atomic_block:
            raise transaction.TransactionManagementError(
                "SequenceAllocator.next_number() must run inside the inserting transaction."
            )

        spec = get_spec(kind)
        on = on or timezone.localdate()
        key = _scope_key(kind, spec, on)

        counter, _ = (
            SequenceCounter.objects.using(using)
            .select_for_update()
            .get_or_create(key=key, defaults={"value": lambda: spec.existing(on).using(using).count()})
        )
        counter.value += 1
        counter.save(using=using, update_fields=["value", "updated_at"])

        return format_number(spec, on, counter.value)
