"""
Contract Event Computation Engine.

Pure functions with deterministic behavior. No I/O.

Given a signed contract's configuration (start date, duration, selected
blocks, payment mode, billing-cycle policy) this engine computes the full
timeline of future service-delivery and billing events.  It reconciles
per-block recurrence cycles, EMI installment schedules, unified vs mixed
billing, and prepaid vs postpaid block billing into one sorted list.

Billing policy:
- billing_cycle_type None: service-only preview, no billing events.
- payment_mode EMI (unified or mixed): ``emi_months`` monthly installments
  of the grand total, attributed to the contract rather than to blocks.
  EMI always wins over per-block billing.
- unified + prepaid: one upfront charge per block for its whole term.
- unified + defined: every block bills once per occurrence of its cycle.
- mixed: each block's own prepaid/postpaid entry decides; missing or
  unrecognised entries fall back to prepaid.

The engine is total: malformed input (non-positive duration, unknown
unit, a window running past the last representable date) yields an empty
timeline instead of raising.

Usage:
    from contract_engines.events import (
        ContractConfiguration,
        PaymentMode,
        BillingCycleType,
        compute_contract_events,
    )

    config = ContractConfiguration(
        start_date=date(2025, 1, 1),
        duration_value=12,
        duration_unit="months",
        selected_blocks=(block,),
        payment_mode=PaymentMode.PREPAID,
        billing_cycle_type=BillingCycleType.UNIFIED,
        grand_total=Decimal("6000"),
        currency="INR",
    )
    events = compute_contract_events(config)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

from contract_engines.blocks import (
    Block,
    block_total,
    has_service_dimension,
    occurrence_dates,
)
from contract_engines.settings import DEFAULT_SETTINGS, EngineSettings
from contract_engines.tracer import traced_engine
from contract_kernel.domain.dates import (
    DurationUnit,
    add_months,
    coerce_date,
    contract_end_date,
)
from contract_kernel.domain.values import Currency, Money, to_decimal
from contract_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.events")

ENGINE_NAME = "contract_events"
ENGINE_VERSION = "1.0"


# ============================================================================
# Enums
# ============================================================================


class PaymentMode(str, Enum):
    """How the contract's grand total is paid."""

    PREPAID = "prepaid"
    EMI = "emi"
    DEFINED = "defined"


class BillingCycleType(str, Enum):
    """Whether one billing policy governs all blocks or each block its own."""

    UNIFIED = "unified"
    MIXED = "mixed"


class BlockPaymentType(str, Enum):
    """Per-block payment timing under mixed billing."""

    PREPAID = "prepaid"
    POSTPAID = "postpaid"


class EventType(str, Enum):
    """Kinds of timeline events."""

    SERVICE = "service"
    BILLING = "billing"

    @property
    def rank(self) -> int:
        """Same-day ordering: a delivery precedes its invoice."""
        return 0 if self is EventType.SERVICE else 1


class BillingSubType(str, Enum):
    """How a billing event came about."""

    UPFRONT = "upfront"  # Whole block term charged at start
    EMI = "emi"  # Contract-level installment
    RECURRING = "recurring"  # One charge per occurrence


# ============================================================================
# Value Objects
# ============================================================================


@dataclass(frozen=True)
class ContractConfiguration:
    """
    Engine input, immutable per call.

    Attributes:
        start_date: Date the contract becomes active.
        duration_value: Contract span in ``duration_unit`` units.
        duration_unit: days, months or years.
        selected_blocks: Ordered blocks of the contract.
        payment_mode: prepaid, emi or defined.
        emi_months: Installment count, used only under EMI.
        per_block_payment_type: Block id -> prepaid/postpaid, used only
            under mixed billing.
        billing_cycle_type: unified, mixed, or None for no billing.
        grand_total: Contract total payable (EMI installments split it).
        currency: Contract currency code; must be registered.
        contract_id: Optional identifier, used for logging only.
    """

    start_date: date
    duration_value: int
    duration_unit: DurationUnit | str
    selected_blocks: tuple[Block, ...] = ()
    payment_mode: PaymentMode = PaymentMode.PREPAID
    emi_months: int = 1
    per_block_payment_type: Mapping[str, str] = field(default_factory=dict)
    billing_cycle_type: BillingCycleType | None = BillingCycleType.UNIFIED
    grand_total: Decimal = Decimal("0")
    currency: str = "INR"
    contract_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "selected_blocks", tuple(self.selected_blocks))
        object.__setattr__(
            self,
            "per_block_payment_type",
            MappingProxyType(dict(self.per_block_payment_type or {})),
        )
        object.__setattr__(self, "grand_total", to_decimal(self.grand_total))
        start = coerce_date(self.start_date)
        if start is not None:
            object.__setattr__(self, "start_date", start)
        # Unknown units are kept as given; end_date then reports malformed
        unit = DurationUnit.parse(self.duration_unit)
        if unit is not None:
            object.__setattr__(self, "duration_unit", unit)
        if isinstance(self.duration_value, float) and self.duration_value.is_integer():
            object.__setattr__(self, "duration_value", int(self.duration_value))
        if isinstance(self.emi_months, float) and self.emi_months.is_integer():
            object.__setattr__(self, "emi_months", int(self.emi_months))
        object.__setattr__(self, "currency", Currency(self.currency).code)
        if not isinstance(self.payment_mode, PaymentMode):
            object.__setattr__(
                self, "payment_mode", PaymentMode(str(self.payment_mode).strip().lower())
            )
        if self.billing_cycle_type is not None and not isinstance(
            self.billing_cycle_type, BillingCycleType
        ):
            object.__setattr__(
                self,
                "billing_cycle_type",
                BillingCycleType(str(self.billing_cycle_type).strip().lower()),
            )

    @property
    def end_date(self) -> date | None:
        """Last covered day; None for a malformed or out-of-range duration."""
        if not isinstance(self.duration_unit, DurationUnit):
            return None
        if not isinstance(self.start_date, date):
            return None
        if not isinstance(self.duration_value, int) or self.duration_value <= 0:
            return None
        try:
            return contract_end_date(self.start_date, self.duration_value, self.duration_unit)
        except (ValueError, OverflowError):
            return None


@dataclass(frozen=True)
class ContractEvent:
    """
    One scheduled occurrence on the contract timeline.

    Immutable.  ``original_date`` is the engine-computed date; overrides
    only ever replace ``scheduled_date``.
    """

    id: str
    event_type: EventType
    block_id: str
    block_name: str
    scheduled_date: date
    original_date: date
    sequence_number: int
    total_occurrences: int
    category_id: str = ""
    amount: Decimal | None = None
    currency: str | None = None
    billing_cycle_label: str | None = None
    billing_sub_type: BillingSubType | None = None
    status: str = "scheduled"

    @property
    def is_service(self) -> bool:
        return self.event_type is EventType.SERVICE

    @property
    def is_billing(self) -> bool:
        return self.event_type is EventType.BILLING

    @property
    def is_overridden(self) -> bool:
        return self.scheduled_date != self.original_date

    @property
    def occurrence_label(self) -> str:
        """Position within the series, e.g. "2/4"."""
        return f"{self.sequence_number}/{self.total_occurrences}"

    @property
    def money(self) -> Money | None:
        """Amount as Money; raises ValueError for an unknown currency code."""
        if self.amount is None or self.currency is None:
            return None
        return Money.of(self.amount, self.currency)


def make_event_id(block_id: str, event_type: EventType | str, sequence: int) -> str:
    """Deterministic event id from block, type and 1-based sequence."""
    kind = event_type.value if isinstance(event_type, EventType) else event_type
    return f"evt_{kind}_{block_id}_{sequence}"


def event_sort_key(event: ContractEvent) -> tuple[date, int]:
    """Timeline order: by date, service before billing on the same day."""
    return (event.scheduled_date, event.event_type.rank)


# ============================================================================
# Core Computation
# ============================================================================


@traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("config",))
def compute_contract_events(
    config: ContractConfiguration,
    settings: EngineSettings | None = None,
) -> tuple[ContractEvent, ...]:
    """
    Compute the full, sorted timeline of service and billing events.

    Pure function - no side effects, no I/O, deterministic output.

    Args:
        config: Contract configuration
        settings: Labels and classification rules (defaults if None)

    Returns:
        Events sorted by (scheduled_date, service before billing).
        Empty when the duration or start date is malformed, or when the
        schedule would run past the last representable date.
    """
    settings = settings or DEFAULT_SETTINGS

    with LogContext.bind(contract_id=config.contract_id):
        end_date = config.end_date
        if end_date is None:
            _log_invalid_duration(config)
            return ()

        logger.info("contract_events_computation_started", extra={
            "start_date": config.start_date.isoformat(),
            "end_date": end_date.isoformat(),
            "block_count": len(config.selected_blocks),
            "payment_mode": config.payment_mode.value,
            "billing_cycle_type": (
                config.billing_cycle_type.value if config.billing_cycle_type else None
            ),
        })

        emi_active = (
            config.billing_cycle_type is not None
            and config.payment_mode is PaymentMode.EMI
        )
        try:
            events = _build_events(config, settings, end_date, emi_active)
        except (ValueError, OverflowError) as exc:
            # A recurrence or installment landed past date.max
            _log_invalid_duration(config, error=str(exc))
            return ()

        # Stable sort: generation order breaks remaining ties
        events.sort(key=event_sort_key)
        result = tuple(events)

        logger.info("contract_events_computed", extra={
            "event_count": len(result),
            "service_event_count": sum(1 for e in result if e.is_service),
            "billing_event_count": sum(1 for e in result if e.is_billing),
            "emi_active": emi_active,
        })
        return result


def _build_events(
    config: ContractConfiguration,
    settings: EngineSettings,
    end_date: date,
    emi_active: bool,
) -> list[ContractEvent]:
    events: list[ContractEvent] = []
    block_billing = config.billing_cycle_type is not None and not emi_active

    for block in config.selected_blocks:
        dates = occurrence_dates(block.cycle, config.start_date, end_date)
        has_service = has_service_dimension(block, settings.billing_only_categories)
        if has_service:
            events.extend(_service_events(block, dates))
        if block_billing:
            events.extend(_block_billing_events(block, dates, config, settings))
        elif not has_service:
            logger.warning("block_without_events", extra={
                "block_id": block.id,
                "category_id": block.category_id,
                "reason": "emi" if emi_active else "no_billing",
            })

    if emi_active:
        events.extend(_emi_events(config, settings))
    return events


def _log_invalid_duration(config: ContractConfiguration, error: str | None = None) -> None:
    logger.warning("contract_events_invalid_duration", extra={
        "start_date": str(config.start_date),
        "duration_value": config.duration_value,
        "duration_unit": str(getattr(config.duration_unit, "value", config.duration_unit)),
        "error": error,
    })


def resolve_block_payment_type(
    block: Block,
    per_block_payment_type: Mapping[str, Any],
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> BlockPaymentType:
    """
    Payment type of ``block`` under mixed billing.

    Missing or unrecognised entries fall back to the configured default
    (prepaid unless configured otherwise): billing upfront is safer than
    silently never billing.
    """
    raw = per_block_payment_type.get(block.id)
    if isinstance(raw, BlockPaymentType):
        return raw
    if isinstance(raw, str):
        try:
            return BlockPaymentType(raw.strip().lower())
        except ValueError:
            pass

    fallback = BlockPaymentType(settings.default_block_payment_type)
    logger.warning("block_payment_type_defaulted", extra={
        "block_id": block.id,
        "payment_type": None if raw is None else str(raw),
        "resolved": fallback.value,
    })
    return fallback


# ============================================================================
# Event Builders
# ============================================================================


def _service_events(block: Block, dates: tuple[date, ...]) -> list[ContractEvent]:
    total = len(dates)
    return [
        ContractEvent(
            id=make_event_id(block.id, EventType.SERVICE, seq),
            event_type=EventType.SERVICE,
            block_id=block.id,
            block_name=block.name,
            category_id=block.category_id,
            scheduled_date=when,
            original_date=when,
            sequence_number=seq,
            total_occurrences=total,
        )
        for seq, when in enumerate(dates, start=1)
    ]


def _block_billing_events(
    block: Block,
    dates: tuple[date, ...],
    config: ContractConfiguration,
    settings: EngineSettings,
) -> list[ContractEvent]:
    """Per-block billing under unified (prepaid/defined) or mixed billing."""
    if config.billing_cycle_type is BillingCycleType.MIXED:
        payment_type = resolve_block_payment_type(
            block, config.per_block_payment_type, settings,
        )
        per_occurrence = payment_type is BlockPaymentType.POSTPAID
    else:
        per_occurrence = config.payment_mode is PaymentMode.DEFINED

    currency = block.currency or config.currency

    if not per_occurrence:
        label = (
            settings.prepaid_label if block.cycle.is_recurring else block.cycle.label
        )
        return [ContractEvent(
            id=make_event_id(block.id, EventType.BILLING, 1),
            event_type=EventType.BILLING,
            block_id=block.id,
            block_name=block.name,
            category_id=block.category_id,
            scheduled_date=config.start_date,
            original_date=config.start_date,
            sequence_number=1,
            total_occurrences=1,
            amount=Money.of(block_total(block, len(dates)), currency).round().amount,
            currency=currency,
            billing_cycle_label=label,
            billing_sub_type=BillingSubType.UPFRONT,
        )]

    # One charge per occurrence, dated on the occurrence's service date
    amount = Money.of(block.unit_amount, currency).round().amount
    total = len(dates)
    return [
        ContractEvent(
            id=make_event_id(block.id, EventType.BILLING, seq),
            event_type=EventType.BILLING,
            block_id=block.id,
            block_name=block.name,
            category_id=block.category_id,
            scheduled_date=when,
            original_date=when,
            sequence_number=seq,
            total_occurrences=total,
            amount=amount,
            currency=currency,
            billing_cycle_label=block.cycle.label,
            billing_sub_type=BillingSubType.RECURRING,
        )
        for seq, when in enumerate(dates, start=1)
    ]


def emi_installments(grand_total: Decimal, emi_months: int, currency: str) -> tuple[Money, ...]:
    """
    Split ``grand_total`` into ``emi_months`` installments.

    The last installment absorbs the rounding remainder, so the
    installments sum to ``grand_total`` exactly.
    """
    return Money.of(grand_total, currency).split(max(1, emi_months))


def _emi_events(
    config: ContractConfiguration,
    settings: EngineSettings,
) -> list[ContractEvent]:
    months = config.emi_months
    if not isinstance(months, int) or months < 1:
        logger.warning("emi_months_defaulted", extra={
            "emi_months": str(months),
            "resolved": 1,
        })
        months = 1

    installments = emi_installments(config.grand_total, months, config.currency)
    events: list[ContractEvent] = []
    for index, installment in enumerate(installments):
        when = add_months(config.start_date, index)
        events.append(ContractEvent(
            id=make_event_id(settings.emi_block_id, EventType.BILLING, index + 1),
            event_type=EventType.BILLING,
            block_id=settings.emi_block_id,
            block_name=settings.emi_block_name,
            scheduled_date=when,
            original_date=when,
            sequence_number=index + 1,
            total_occurrences=months,
            amount=installment.amount,
            currency=config.currency,
            billing_cycle_label=settings.emi_label,
            billing_sub_type=BillingSubType.EMI,
        ))

    logger.debug("emi_schedule_built", extra={
        "emi_months": months,
        "installment": str(installments[0].amount),
        "final_installment": str(installments[-1].amount),
        "grand_total": str(config.grand_total),
    })
    return events
