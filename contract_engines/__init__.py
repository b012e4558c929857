"""
Module: contract_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    contract scheduling engines.  This is the canonical import surface
    for callers (the wizard backend, contract_config, scripts).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import contract_kernel (and sibling engine modules).
    MUST NOT import contract_config.

Invariants enforced:
    - Purity: engines never call ``date.today()``; the contract start
      date and any override dates are passed in.
    - Decimal-only arithmetic for amounts.
    - Determinism: identical inputs always produce identical outputs,
      including event ids and ordering.

Usage:
    from contract_engines import (
        compute_contract_events,
        apply_overrides,
        summarize_events,
        group_events_by_date,
    )

    events = compute_contract_events(config)
    timeline = apply_overrides(events, overrides)
    summary = summarize_events(timeline)
    groups = group_events_by_date(timeline)
"""

from contract_engines.blocks import (
    Block,
    BlockCycle,
    block_total,
    has_service_dimension,
    occurrence_dates,
)
from contract_engines.events import (
    BillingCycleType,
    BillingSubType,
    BlockPaymentType,
    ContractConfiguration,
    ContractEvent,
    EventType,
    PaymentMode,
    compute_contract_events,
    emi_installments,
    event_sort_key,
    make_event_id,
    resolve_block_payment_type,
)
from contract_engines.grouping import (
    BlockGroup,
    DateGroup,
    format_date_label,
    group_events_by_block,
    group_events_by_date,
)
from contract_engines.overrides import (
    apply_overrides,
    count_overridden,
    reset_override,
    set_override,
)
from contract_engines.settings import DEFAULT_SETTINGS, EngineSettings
from contract_engines.summary import EventSummary, summarize_events
from contract_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Blocks
    "Block",
    "BlockCycle",
    "block_total",
    "has_service_dimension",
    "occurrence_dates",
    # Events
    "BillingCycleType",
    "BillingSubType",
    "BlockPaymentType",
    "ContractConfiguration",
    "ContractEvent",
    "EventType",
    "PaymentMode",
    "compute_contract_events",
    "emi_installments",
    "event_sort_key",
    "make_event_id",
    "resolve_block_payment_type",
    # Grouping
    "BlockGroup",
    "DateGroup",
    "format_date_label",
    "group_events_by_block",
    "group_events_by_date",
    # Overrides
    "apply_overrides",
    "count_overridden",
    "reset_override",
    "set_override",
    # Settings
    "DEFAULT_SETTINGS",
    "EngineSettings",
    # Summary
    "EventSummary",
    "summarize_events",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
]
