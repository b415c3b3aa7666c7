# store/services/periods.py

"""
Date range helpers shared by list filters and reports.

Ranges are inclusive calendar days in the active time zone.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from django.utils import timezone
from django.utils.dateparse import parse_date


class PeriodError(ValueError):
    pass


def parse_day(value, *, field: str = "date") -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return timezone.localdate(value) if timezone.is_aware(value) else value.date()
    if isinstance(value, date):
        return value

    try:
        parsed = parse_date(str(value).strip())
    except ValueError:
        parsed = None
    if parsed is None:
        raise PeriodError(f"Invalid {field} format (YYYY-MM-DD)")
    return parsed


def parse_period(start, end) -> tuple[date | None, date | None]:
    start_day = parse_day(start, field="start_date")
    end_day = parse_day(end, field="end_date")
    if start_day and end_day and start_day > end_day:
        raise PeriodError("start_date cannot be after end_date")
    return start_day, end_day


def start_of_day(d: date) -> datetime:
    return timezone.make_aware(datetime.combine(d, time.min), timezone.get_current_timezone())


def end_of_day(d: date) -> datetime:
    """Exclusive upper bound: midnight of the following day."""
    return start_of_day(d + timedelta(days=1))


def filter_period(qs, field: str, start=None, end=None):
    """
    Restrict `qs` to rows whose datetime/date `field` falls within [start, end].
    """
    start_day, end_day = parse_period(start, end)
    model_field = qs.model._meta.get_field(field)
    is_datetime = model_field.get_internal_type() == "DateTimeField"

    if start_day:
        lookup = start_of_day(start_day) if is_datetime else start_day
        qs = qs.filter(**{f"{field}__gte": lookup})
    if end_day:
        if is_datetime:
            qs = qs.filter(**{f"{field}__lt": end_of_day(end_day)})
        else:
            qs = qs.filter(**{f"{field}__lte": end_day})
    return qs
