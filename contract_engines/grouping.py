"""
Date and block grouping for timeline rendering.

Partitions an already-sorted event list into buckets without reordering
anything: events keep their order inside a bucket and buckets appear in
order of first appearance.  For engine output that is ascending date.

Pure functions; the same input always yields the same grouping.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from contract_engines.events import ContractEvent
from contract_kernel.domain.dates import coerce_date

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def format_date_label(day: date) -> str:
    """Display label such as "Mon, 6 Jan 2025" (locale independent)."""
    return f"{_WEEKDAYS[day.weekday()]}, {day.day} {_MONTHS[day.month - 1]} {day.year}"


@dataclass(frozen=True)
class DateGroup:
    """Events sharing one calendar date."""

    date: date
    events: tuple[ContractEvent, ...]

    @property
    def date_label(self) -> str:
        return format_date_label(self.date)

    @property
    def service_events(self) -> tuple[ContractEvent, ...]:
        return tuple(e for e in self.events if e.is_service)

    @property
    def billing_events(self) -> tuple[ContractEvent, ...]:
        return tuple(e for e in self.events if e.is_billing)

    @property
    def billing_total(self) -> Decimal:
        """Sum of the billing amounts due on this date."""
        return sum(
            (e.amount for e in self.events if e.is_billing and e.amount is not None),
            Decimal("0"),
        )


@dataclass(frozen=True)
class BlockGroup:
    """Events originating from one block (or the contract-level EMI series)."""

    block_id: str
    block_name: str
    events: tuple[ContractEvent, ...]


def group_events_by_date(events: Iterable[ContractEvent]) -> tuple[DateGroup, ...]:
    """Bucket events by calendar date, ignoring any time-of-day."""
    buckets: dict[date, list[ContractEvent]] = {}
    for event in events:
        day = coerce_date(event.scheduled_date)
        buckets.setdefault(day, []).append(event)
    return tuple(DateGroup(date=day, events=tuple(evts)) for day, evts in buckets.items())


def group_events_by_block(events: Iterable[ContractEvent]) -> tuple[BlockGroup, ...]:
    """Bucket events by block id; the first event's name labels the group."""
    buckets: dict[str, list[ContractEvent]] = {}
    for event in events:
        buckets.setdefault(event.block_id, []).append(event)
    return tuple(
        BlockGroup(block_id=block_id, block_name=evts[0].block_name, events=tuple(evts))
        for block_id, evts in buckets.items()
    )
