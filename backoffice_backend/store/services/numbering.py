# store/services/numbering.py

from __future__ import annotations

from datetime import date

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from store.models import DailyCounter, SequenceCounter


@transaction.atomic
def next_daily_number(*, prefix: str, day: date | None = None) -> int:
    """
    Atomically increment and return the counter for (prefix, day).
    The first call of a day returns 1.
    """
    day = day or timezone.localdate()

    counter, _ = DailyCounter.objects.select_for_update().get_or_create(prefix=prefix, day=day)
    DailyCounter.objects.filter(pk=counter.pk).update(last_value=F("last_value") + 1)
    counter.refresh_from_db(fields=["last_value"])
    return counter.last_value


def format_daily_number(*, prefix: str, day: date | None = None, width: int = 4) -> str:
    """PREFIX-YYYYMMDD-NNNN"""
    day = day or timezone.localdate()
    n = next_daily_number(prefix=prefix, day=day)
    return f"{prefix}-{day:%Y%m%d}-{n:0{width}d}"


@transaction.atomic
def next_sequence_value(*, prefix: str, start_after=None) -> int:
    """
    Atomically increment and return the undated counter for `prefix`.

    `start_after` (int or callable returning int) seeds the counter when
    the row is first created, so numbering continues past values issued
    before the counter existed.
    """
    counter = SequenceCounter.objects.select_for_update().filter(prefix=prefix).first()
    if counter is None:
        seed = start_after() if callable(start_after) else start_after
        # get_or_create re-reads the row if a concurrent first call created it
        counter, _ = SequenceCounter.objects.select_for_update().get_or_create(
            prefix=prefix,
            defaults={"last_value": int(seed or 0)},
        )

    SequenceCounter.objects.filter(pk=counter.pk).update(last_value=F("last_value") + 1)
    counter.refresh_from_db(fields=["last_value"])
    return counter.last_value
