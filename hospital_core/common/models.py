# hospital_core/common/models.py
from __future__ import annotations

import uuid
from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UUIDModel(TimeStampedModel):
    """
    UUID primary key + timestamps. Base for every domain aggregate.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


# -------------------------------------------------------------------
# Display-number counters
# -------------------------------------------------------------------

class SequenceCounter(TimeStampedModel):
    """
    Last value handed out for one numbering scope, e.g. "appointment:20260220"
    or "invoice". Only touched under SELECT ... FOR UPDATE inside the same
    transaction that inserts the numbered row.
    """
    key = models.CharField(max_length=64, unique=True)
    value = models.PositiveBigIntegerField(default=0)

    class Meta:
        db_table = "common_sequence_counter"

    def __str__(self) -> str:
        return f"{self.key}={self.value}"
