"""
Block Model.

A block is one sellable / deliverable line item inside a contract.  It
carries a unit price, a quantity (or an "unlimited" flag), a recurrence
cycle, and a category that decides whether it has a service-delivery
dimension or is billing-only.

Pure value objects and functions.  No I/O.

Usage:
    from contract_engines.blocks import Block, BlockCycle, occurrence_dates

    block = Block(
        id="blk-amc",
        name="Annual Maintenance Visit",
        price=Decimal("500"),
        cycle=BlockCycle.QUARTERLY,
        category_id="service",
    )
    dates = occurrence_dates(block.cycle, date(2025, 1, 1), date(2025, 12, 31))
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from contract_kernel.domain.dates import add_months
from contract_kernel.domain.values import Currency, to_decimal
from contract_kernel.logging_config import get_logger

logger = get_logger("engines.blocks")


class BlockCycle(str, Enum):
    """Recurrence cadence of a block's deliveries and charges."""

    ONE_TIME = "one_time"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"

    @property
    def months(self) -> int:
        """Calendar months between occurrences (0 for one-time)."""
        return _CYCLE_MONTHS[self]

    @property
    def is_recurring(self) -> bool:
        return self is not BlockCycle.ONE_TIME

    @property
    def label(self) -> str:
        return _CYCLE_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> BlockCycle:
        """
        Resolve a cycle from its value or a catalog alias.

        The catalog historically stored ``prepaid``/``postpaid`` as a
        block's cycle to mean a single charge; those resolve to ONE_TIME,
        as does anything unrecognised (logged).
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_").replace(" ", "_") if value else ""
        cycle = _CYCLE_ALIASES.get(key)
        if cycle is None:
            logger.warning("block_cycle_unrecognized", extra={
                "cycle": str(value),
                "resolved": cls.ONE_TIME.value,
            })
            return cls.ONE_TIME
        return cycle


_CYCLE_MONTHS = {
    BlockCycle.ONE_TIME: 0,
    BlockCycle.MONTHLY: 1,
    BlockCycle.QUARTERLY: 3,
    BlockCycle.ANNUALLY: 12,
}

_CYCLE_LABELS = {
    BlockCycle.ONE_TIME: "One-time",
    BlockCycle.MONTHLY: "Monthly",
    BlockCycle.QUARTERLY: "Quarterly",
    BlockCycle.ANNUALLY: "Annually",
}

_CYCLE_ALIASES = {
    "one_time": BlockCycle.ONE_TIME,
    "onetime": BlockCycle.ONE_TIME,
    "once": BlockCycle.ONE_TIME,
    "prepaid": BlockCycle.ONE_TIME,
    "postpaid": BlockCycle.ONE_TIME,
    "monthly": BlockCycle.MONTHLY,
    "quarterly": BlockCycle.QUARTERLY,
    "annually": BlockCycle.ANNUALLY,
    "annual": BlockCycle.ANNUALLY,
    "yearly": BlockCycle.ANNUALLY,
}


@dataclass(frozen=True)
class Block:
    """
    A configurable line item in a contract.

    Attributes:
        id: Unique within the contract; part of every event id.
        name: Display name copied onto events.
        price: Unit price.
        quantity: Units per occurrence (>= 1); ignored when unlimited.
        unlimited: One flat charge of ``price`` per occurrence.
        cycle: Recurrence cadence of deliveries and charges.
        category_id: Catalog category; decides the service dimension.
        currency: Registered block currency, or None to use the contract
            currency.
        billing_only: Explicit service-dimension override; None defers to
            the category rule.
    """

    id: str
    name: str
    price: Decimal
    quantity: int = 1
    unlimited: bool = False
    cycle: BlockCycle = BlockCycle.ONE_TIME
    category_id: str = ""
    currency: str | None = None
    billing_only: bool | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Block id is required")
        object.__setattr__(self, "price", to_decimal(self.price))
        if self.price < 0:
            raise ValueError(f"Block {self.id}: price must be non-negative")
        if not isinstance(self.cycle, BlockCycle):
            object.__setattr__(self, "cycle", BlockCycle.parse(self.cycle))
        if isinstance(self.quantity, bool) or int(self.quantity) != self.quantity:
            raise ValueError(f"Block {self.id}: quantity must be an integer")
        object.__setattr__(self, "quantity", int(self.quantity))
        if self.quantity < 1:
            raise ValueError(f"Block {self.id}: quantity must be at least 1")
        if self.currency is not None:
            object.__setattr__(self, "currency", Currency(self.currency).code)

    @property
    def unit_amount(self) -> Decimal:
        """Charge for a single occurrence."""
        if self.unlimited:
            return self.price
        return self.price * self.quantity


def has_service_dimension(
    block: Block,
    billing_only_categories: Collection[str],
) -> bool:
    """True when the block produces service-delivery events."""
    if block.billing_only is not None:
        return not block.billing_only
    return block.category_id not in billing_only_categories


def block_total(block: Block, occurrences: int) -> Decimal:
    """Total value a block contributes over ``occurrences`` occurrences."""
    return block.unit_amount * occurrences


def occurrence_dates(cycle: BlockCycle, start: date, end: date) -> tuple[date, ...]:
    """
    Occurrence dates of ``cycle`` within ``[start, end]``.

    Each date is computed from ``start`` (not from the previous
    occurrence) so month-end clamping never drifts.  A window that fits no
    occurrence still yields ``(start,)``.
    """
    if not cycle.is_recurring or end < start:
        return (start,)

    dates: list[date] = []
    step = 0
    current = start
    while current <= end:
        dates.append(current)
        step += 1
        current = add_months(start, step * cycle.months)
    return tuple(dates) or (start,)
