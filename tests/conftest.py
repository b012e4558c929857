"""
Pytest fixtures for the contract scheduling test suite.

Provides:
- Structured logging setup and a JSON log capture fixture
- Block and contract configuration factories
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from contract_engines.blocks import Block, BlockCycle
from contract_engines.events import (
    BillingCycleType,
    ContractConfiguration,
    PaymentMode,
)
from contract_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

CONTRACT_START = date(2025, 1, 1)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture contract_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            compute_contract_events(config)
            logs = captured_logs()
            assert any(r["message"] == "contract_events_computed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("contract_kernel")
    previous_level = root.level
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain factories
# =============================================================================


@pytest.fixture
def contract_start() -> date:
    return CONTRACT_START


@pytest.fixture
def make_block():
    """Factory for blocks with sensible defaults."""

    def _make(
        block_id: str = "blk-1",
        price: str | int | Decimal = "500",
        cycle: BlockCycle | str = BlockCycle.ONE_TIME,
        **kwargs,
    ) -> Block:
        kwargs.setdefault("name", block_id.replace("-", " ").title())
        kwargs.setdefault("category_id", "service")
        return Block(id=block_id, price=Decimal(str(price)), cycle=cycle, **kwargs)

    return _make


@pytest.fixture
def make_config():
    """Factory for contract configurations starting 2025-01-01."""

    def _make(
        blocks=(),
        duration_value: int = 12,
        duration_unit: str = "months",
        **kwargs,
    ) -> ContractConfiguration:
        kwargs.setdefault("start_date", CONTRACT_START)
        kwargs.setdefault("payment_mode", PaymentMode.PREPAID)
        kwargs.setdefault("billing_cycle_type", BillingCycleType.UNIFIED)
        kwargs.setdefault("currency", "INR")
        return ContractConfiguration(
            duration_value=duration_value,
            duration_unit=duration_unit,
            selected_blocks=tuple(blocks),
            **kwargs,
        )

    return _make
