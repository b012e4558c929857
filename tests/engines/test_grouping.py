"""Tests for date and block grouping (contract_engines.grouping)."""

from datetime import date
from decimal import Decimal

from contract_engines.blocks import BlockCycle
from contract_engines.events import PaymentMode, compute_contract_events
from contract_engines.grouping import (
    format_date_label,
    group_events_by_block,
    group_events_by_date,
)
from contract_engines.overrides import apply_overrides


class TestGroupEventsByDate:

    def test_one_group_per_date(self, make_block, make_config):
        blocks = [
            make_block("hosting", price=100, cycle=BlockCycle.MONTHLY),
            make_block("setup", price=1000),
        ]
        events = compute_contract_events(make_config(blocks, duration_value=3))

        groups = group_events_by_date(events)

        assert [g.date for g in groups] == [date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1)]
        assert sum(len(g.events) for g in groups) == len(events)

    def test_preserves_engine_order_within_group(self, make_block, make_config):
        blocks = [make_block("a"), make_block("b")]
        events = compute_contract_events(make_config(blocks, duration_value=1))

        (group,) = group_events_by_date(events)

        assert group.events == events
        assert [e.event_type.value for e in group.events] == [
            "service", "service", "billing", "billing",
        ]

    def test_service_and_billing_columns(self, make_block, make_config):
        events = compute_contract_events(make_config([make_block("setup")], duration_value=1))

        (group,) = group_events_by_date(events)

        assert [e.id for e in group.service_events] == ["evt_service_setup_1"]
        assert [e.id for e in group.billing_events] == ["evt_billing_setup_1"]

    def test_billing_total_per_date(self, make_block, make_config):
        blocks = [
            make_block("hosting", price=100, cycle=BlockCycle.MONTHLY),
            make_block("setup", price="1000.50"),
        ]
        config = make_config(blocks, duration_value=3, payment_mode=PaymentMode.DEFINED)

        groups = group_events_by_date(compute_contract_events(config))

        assert [g.billing_total for g in groups] == [
            Decimal("1100.50"), Decimal("100"), Decimal("100"),
        ]

    def test_billing_total_zero_without_billing(self, make_block, make_config):
        config = make_config([make_block("setup")], duration_value=1, billing_cycle_type=None)

        (group,) = group_events_by_date(compute_contract_events(config))

        assert group.billing_total == Decimal("0")

    def test_overridden_event_joins_new_date(self, make_block, make_config):
        events = compute_contract_events(make_config([make_block("setup")], duration_value=1))
        moved = apply_overrides(events, {"evt_billing_setup_1": date(2025, 1, 5)})

        groups = group_events_by_date(moved)

        assert [g.date for g in groups] == [date(2025, 1, 1), date(2025, 1, 5)]

    def test_empty(self):
        assert group_events_by_date([]) == ()

    def test_date_label(self, make_block, make_config):
        events = compute_contract_events(make_config([make_block("setup")], duration_value=1))
        (group,) = group_events_by_date(events)
        assert group.date_label == "Wed, 1 Jan 2025"


class TestGroupEventsByBlock:

    def test_groups_in_first_appearance_order(self, make_block, make_config):
        blocks = [
            make_block("hosting", price=100, cycle=BlockCycle.MONTHLY),
            make_block("setup", price=1000),
        ]
        events = compute_contract_events(make_config(blocks, duration_value=3))

        groups = group_events_by_block(events)

        assert [g.block_id for g in groups] == ["hosting", "setup"]
        assert len(groups[0].events) == 4
        assert groups[1].block_name == "Setup"


def test_format_date_label():
    assert format_date_label(date(2025, 1, 6)) == "Mon, 6 Jan 2025"
    assert format_date_label(date(2024, 12, 29)) == "Sun, 29 Dec 2024"
