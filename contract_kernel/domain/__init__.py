"""
Pure domain layer.

Value objects and calendar helpers with NO dependencies on:
- Database
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from contract_kernel.domain.dates import (
    DurationUnit,
    add_duration,
    add_months,
    add_years,
    coerce_date,
    contract_end_date,
    days_between_inclusive,
)
from contract_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from contract_kernel.domain.values import (
    Currency,
    Money,
    quantize_amount,
    split_amount,
    to_decimal,
)

__all__ = [
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "DurationUnit",
    "Money",
    "add_duration",
    "add_months",
    "add_years",
    "coerce_date",
    "contract_end_date",
    "days_between_inclusive",
    "quantize_amount",
    "split_amount",
    "to_decimal",
]
