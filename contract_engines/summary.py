"""
Event Summarizer.

Reduces a timeline to the aggregate counts and totals shown above the
preview: how many events of each kind, what is billed in total, and how
many calendar days the timeline spans.

Pure function.  Empty input yields all-zero fields.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from types import MappingProxyType

from contract_engines.events import ContractEvent
from contract_engines.tracer import traced_engine
from contract_kernel.domain.dates import days_between_inclusive
from contract_kernel.domain.values import Money
from contract_kernel.logging_config import get_logger

logger = get_logger("engines.summary")


@dataclass(frozen=True)
class EventSummary:
    """
    Aggregate view of a timeline.

    Attributes:
        total_events: Number of events.
        service_events: Number of service events.
        billing_events: Number of billing events.
        total_billing_amount: Sum of all billing amounts.
        totals_by_currency: Billing sum per currency code, as Money.
            Billing amounts without a currency count only towards
            ``total_billing_amount``.
        first_event_date: Earliest scheduled date, None when empty.
        last_event_date: Latest scheduled date, None when empty.
        span_days: Days from first to last event, both inclusive; 0 when
            empty.
    """

    total_events: int = 0
    service_events: int = 0
    billing_events: int = 0
    total_billing_amount: Decimal = Decimal("0")
    totals_by_currency: Mapping[str, Money] = field(default_factory=dict)
    first_event_date: date | None = None
    last_event_date: date | None = None
    span_days: int = 0

    @property
    def currency(self) -> str | None:
        """The single billing currency, None when there are zero or several."""
        if len(self.totals_by_currency) == 1:
            return next(iter(self.totals_by_currency))
        return None


@traced_engine("event_summary", "1.0")
def summarize_events(events: Iterable[ContractEvent]) -> EventSummary:
    """Count, total and span a list of events."""
    events = tuple(events)
    if not events:
        return EventSummary()

    service_count = 0
    billing_count = 0
    total = Decimal("0")
    by_currency: dict[str, Money] = {}

    for event in events:
        if event.is_service:
            service_count += 1
            continue
        billing_count += 1
        if event.amount is None:
            continue
        total += event.amount
        money = event.money
        if money is None:
            continue
        code = money.currency.code
        by_currency[code] = by_currency[code] + money if code in by_currency else money

    if len(by_currency) > 1:
        logger.warning("summary_mixed_currencies", extra={
            "currencies": sorted(by_currency),
        })

    dates = [e.scheduled_date for e in events]
    first, last = min(dates), max(dates)

    return EventSummary(
        total_events=len(events),
        service_events=service_count,
        billing_events=billing_count,
        total_billing_amount=total,
        totals_by_currency=MappingProxyType(by_currency),
        first_event_date=first,
        last_event_date=last,
        span_days=days_between_inclusive(first, last),
    )
