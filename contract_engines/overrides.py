"""
Override Application.

Users may move individual events on the preview timeline.  Their choices
live in a caller-owned mapping of event id -> replacement date; this
module applies that mapping to the engine's output without touching the
underlying computation.

Invariants enforced:
    - Only ``scheduled_date`` changes; amounts, sequence numbers and
      occurrence counts never do.
    - ``original_date`` keeps the computed date, so removing an override
      restores the computed date exactly, even when the events passed in
      already carry an earlier application's dates.
    - Override values that do not parse as dates are ignored; a corrupt
      date never reaches the sorted output.
    - Neither the events nor the mapping passed in are mutated.

Usage:
    overrides = set_override({}, "evt_service_blk-1_2", "2025-02-10")
    timeline = apply_overrides(events, overrides)
    overrides = reset_override(overrides, "evt_service_blk-1_2")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import date
from typing import Any

from contract_engines.events import ContractEvent, event_sort_key
from contract_engines.tracer import traced_engine
from contract_kernel.domain.dates import coerce_date
from contract_kernel.logging_config import get_logger

logger = get_logger("engines.overrides")


@traced_engine("event_overrides", "1.0", fingerprint_fields=("overrides",))
def apply_overrides(
    events: Iterable[ContractEvent],
    overrides: Mapping[str, Any] | None,
) -> tuple[ContractEvent, ...]:
    """
    Replace scheduled dates from ``overrides`` and re-sort the timeline.

    Args:
        events: Engine output (any order).
        overrides: Event id -> date, datetime or ISO string.

    Returns:
        New events sorted by (scheduled_date, service before billing).
    """
    overrides = overrides or {}
    applied = 0
    result: list[ContractEvent] = []

    for event in events:
        if event.id not in overrides:
            # Events from an earlier application fall back to the computed date
            if event.is_overridden:
                event = replace(event, scheduled_date=event.original_date)
            result.append(event)
            continue

        raw = overrides[event.id]
        new_date = coerce_date(raw)
        if new_date is None:
            logger.warning("override_ignored_invalid_date", extra={
                "event_id": event.id,
                "override_value": str(raw),
            })
            result.append(replace(event, scheduled_date=event.original_date))
            continue

        applied += 1
        result.append(replace(event, scheduled_date=new_date))

    known_ids = {e.id for e in result}
    unknown = sorted(key for key in overrides if key not in known_ids)
    if unknown:
        logger.debug("override_unknown_event_ids", extra={
            "event_ids": unknown,
        })

    result.sort(key=event_sort_key)

    logger.info("overrides_applied", extra={
        "event_count": len(result),
        "override_count": len(overrides),
        "applied_count": applied,
    })
    return tuple(result)


def set_override(
    overrides: Mapping[str, Any] | None,
    event_id: str,
    value: Any,
) -> dict[str, date]:
    """
    Return a copy of ``overrides`` with ``event_id`` moved to ``value``.

    An unparsable value leaves the mapping unchanged (a copy is still
    returned).
    """
    updated = dict(overrides or {})
    new_date = coerce_date(value)
    if new_date is None:
        logger.warning("override_rejected_invalid_date", extra={
            "event_id": event_id,
            "override_value": str(value),
        })
        return updated
    updated[event_id] = new_date
    return updated


def reset_override(
    overrides: Mapping[str, Any] | None,
    event_id: str,
) -> dict[str, Any]:
    """Return a copy of ``overrides`` without ``event_id``."""
    updated = dict(overrides or {})
    updated.pop(event_id, None)
    return updated


def count_overridden(events: Iterable[ContractEvent]) -> int:
    """Number of events whose date differs from the computed one."""
    return sum(1 for e in events if e.is_overridden)
