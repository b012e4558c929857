#!/usr/bin/env python3
"""
Preview the event timeline of a contract document.

Loads a YAML contract document, computes its service and billing events,
applies any date overrides and prints the timeline grouped by date with
service events on the left and billing events on the right, followed by
the summary.

Usage:
    python3 scripts/preview_events.py contract.yaml
    python3 scripts/preview_events.py contract.yaml --overrides moves.yaml
    python3 scripts/preview_events.py contract.yaml --settings labels.yaml --json
    python3 scripts/preview_events.py contract.yaml --log-level INFO
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

W = 96
COL = (W - 4) // 2


def _event_line(event) -> str:
    line = f"{event.block_name} ({event.occurrence_label})"
    if event.amount is not None:
        line += f"  {event.currency} {event.amount:,}"
    if event.billing_cycle_label:
        line += f"  [{event.billing_cycle_label}]"
    if event.is_overridden:
        line += f"  *moved from {event.original_date.isoformat()}"
    return line[:COL]


def print_timeline(groups) -> None:
    print("=" * W)
    print(f"  {'SERVICE':<{COL}}{'BILLING':<{COL}}")
    print("=" * W)
    for group in groups:
        print(f"  {group.date_label}")
        services = group.service_events
        billings = group.billing_events
        for i in range(max(len(services), len(billings))):
            left = _event_line(services[i]) if i < len(services) else ""
            right = _event_line(billings[i]) if i < len(billings) else ""
            print(f"    {left:<{COL - 2}}{right}")
        if billings:
            print(f"    {'':<{COL - 2}}Billed on this date: {group.billing_total:,}")
        print("-" * W)


def print_summary(summary, overridden: int) -> None:
    print("  SUMMARY".center(W))
    print("=" * W)
    print(f"  Total events:      {summary.total_events}")
    print(f"  Service events:    {summary.service_events}")
    print(f"  Billing events:    {summary.billing_events}")
    for code, total in sorted(summary.totals_by_currency.items()):
        print(f"  Billed ({code}):      {total.amount:,}")
    if summary.first_event_date is not None:
        print(f"  First event:       {summary.first_event_date.isoformat()}")
        print(f"  Last event:        {summary.last_event_date.isoformat()}")
        print(f"  Span (days):       {summary.span_days}")
    print(f"  Overridden:        {overridden}")
    print()


def timeline_as_json(events, summary) -> str:
    payload = {
        "events": [
            {
                "id": e.id,
                "event_type": e.event_type.value,
                "block_id": e.block_id,
                "block_name": e.block_name,
                "category_id": e.category_id,
                "scheduled_date": e.scheduled_date.isoformat(),
                "original_date": e.original_date.isoformat(),
                "sequence_number": e.sequence_number,
                "total_occurrences": e.total_occurrences,
                "amount": None if e.amount is None else str(e.amount),
                "currency": e.currency,
                "billing_cycle_label": e.billing_cycle_label,
                "billing_sub_type": e.billing_sub_type.value if e.billing_sub_type else None,
                "status": e.status,
            }
            for e in events
        ],
        "summary": {
            "total_events": summary.total_events,
            "service_events": summary.service_events,
            "billing_events": summary.billing_events,
            "total_billing_amount": str(summary.total_billing_amount),
            "totals_by_currency": {
                code: str(total.amount) for code, total in summary.totals_by_currency.items()
            },
            "first_event_date": (
                summary.first_event_date.isoformat() if summary.first_event_date else None
            ),
            "last_event_date": (
                summary.last_event_date.isoformat() if summary.last_event_date else None
            ),
            "span_days": summary.span_days,
        },
    }
    return json.dumps(payload, indent=2)


def main() -> int:
    parser = argparse.ArgumentParser(description="Contract event timeline preview")
    parser.add_argument("contract", type=Path, help="Contract document (YAML)")
    parser.add_argument("--overrides", type=Path,
                        help="YAML mapping of event id -> date (replaces the document's)")
    parser.add_argument("--settings", type=Path,
                        help="YAML engine settings (replaces the document's)")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    parser.add_argument("--log-level", default="WARNING",
                        help="Structured log level on stderr (default WARNING)")
    args = parser.parse_args()

    from contract_config.loader import (
        load_contract_document,
        load_engine_settings,
        load_yaml_file,
        parse_overrides,
    )
    from contract_engines import (
        apply_overrides,
        compute_contract_events,
        count_overridden,
        group_events_by_date,
        summarize_events,
    )
    from contract_kernel.exceptions import ContractKernelError
    from contract_kernel.logging_config import LogContext, configure_logging

    level = logging.getLevelName(args.log_level.upper())
    if not isinstance(level, int):
        print(f"  ERROR: Unknown log level: {args.log_level}", file=sys.stderr)
        return 2
    configure_logging(level=level, stream=sys.stderr)

    try:
        document = load_contract_document(args.contract)
        settings = load_engine_settings(args.settings) if args.settings else document.settings
        overrides = (
            parse_overrides(load_yaml_file(args.overrides)) if args.overrides
            else document.overrides
        )
    except (OSError, yaml.YAMLError, ContractKernelError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    with LogContext.bind(contract_id=document.configuration.contract_id):
        events = compute_contract_events(document.configuration, settings)
        timeline = apply_overrides(events, overrides)
        summary = summarize_events(timeline)

    if args.json:
        print(timeline_as_json(timeline, summary))
        return 0

    if not timeline:
        print("  No events: check the contract start date and duration.")
        return 0

    print_timeline(group_events_by_date(timeline))
    print_summary(summary, count_overridden(timeline))
    return 0


if __name__ == "__main__":
    sys.exit(main())
