"""
Dates -- Calendar-aware date arithmetic for contract schedules.

Responsibility:
    Month and year arithmetic that lands on the same day-of-month where
    possible and clamps to the last valid day otherwise (Jan 31 + 1 month
    is Feb 28, or Feb 29 in a leap year). Durations are never approximated
    as fixed 30/365-day blocks.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Recurring dates are always computed from the anchor date, so clamping
      in a short month never drifts later occurrences (Jan 31, Feb 28,
      Mar 31, ...).
    - coerce_date() never raises; unparsable input yields None.

Failure modes:
    - ValueError or OverflowError when a result falls outside the range
      ``datetime.date`` can represent (year 1 to 9999).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any

from dateutil.relativedelta import relativedelta


class DurationUnit(str, Enum):
    """Units a contract duration can be expressed in."""

    DAYS = "days"
    MONTHS = "months"
    YEARS = "years"

    @classmethod
    def parse(cls, value: Any) -> DurationUnit | None:
        """Resolve a unit name (singular or plural, any case); None if unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        if not normalized.endswith("s"):
            normalized += "s"
        try:
            return cls(normalized)
        except ValueError:
            return None


def add_months(anchor: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    return anchor + relativedelta(months=months)


def add_years(anchor: date, years: int) -> date:
    """Add calendar years; Feb 29 clamps to Feb 28 in non-leap years."""
    return anchor + relativedelta(years=years)


def add_duration(anchor: date, value: int, unit: DurationUnit) -> date:
    """Add ``value`` units of ``unit`` to ``anchor``."""
    if unit == DurationUnit.DAYS:
        return anchor + timedelta(days=value)
    if unit == DurationUnit.MONTHS:
        return add_months(anchor, value)
    if unit == DurationUnit.YEARS:
        return add_years(anchor, value)
    raise ValueError(f"Unsupported duration unit: {unit!r}")


def contract_end_date(start: date, value: int, unit: DurationUnit) -> date:
    """
    Last calendar day covered by a contract starting on ``start``.

    A 3-month contract from Jan 1 runs through Mar 31; a 1-day contract
    ends on its start date.
    """
    return add_duration(start, value, unit) - timedelta(days=1)


def days_between_inclusive(first: date, last: date) -> int:
    """Number of calendar days from ``first`` to ``last``, both counted."""
    return (last - first).days + 1


def coerce_date(value: Any) -> date | None:
    """
    Normalize a date-like value to a calendar date.

    Accepts ``date``, ``datetime`` (time-of-day is dropped) and ISO-8601
    strings ("2025-01-31" or "2025-01-31T10:00:00"). Returns None for
    anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None
