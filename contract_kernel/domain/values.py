"""
Values -- Immutable, self-validating money value objects.

Responsibility:
    Provides the monetary types the scheduling engine computes with:
    Currency and Money, plus a registry-aware quantize helper. Amounts are
    Decimal everywhere; floats are converted through ``str`` at the
    boundary so 0.1 stays 0.1.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except contract_kernel.domain.currency.

Invariants enforced:
    - Money pairs an amount with its currency; they are never separated.
    - Currency codes are validated against CurrencyRegistry at construction.
    - Money.split() returns parts that sum back to the original exactly.

Failure modes:
    - ValueError on construction with invalid amounts or currencies.
    - ValueError when addition mixes currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

from contract_kernel.domain.currency import CurrencyRegistry


def to_decimal(value: Decimal | str | int | float) -> Decimal:
    """Convert a raw amount to Decimal, going through ``str`` for floats."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


def quantize_amount(
    amount: Decimal,
    currency_code: str | None,
    rounding: str = ROUND_HALF_UP,
) -> Decimal:
    """
    Round a raw amount to the precision of ``currency_code``.

    Unlike Money.round() this never validates the code: unknown or missing
    codes use the registry's default precision, so callers that must not
    raise (the event engine) can still round consistently.
    """
    return amount.quantize(CurrencyRegistry.quantum(currency_code or ""), rounding=rounding)


def split_amount(amount: Decimal, parts: int, currency_code: str | None) -> tuple[Decimal, ...]:
    """
    Split ``amount`` into ``parts`` installments that sum back to it exactly.

    Every installment but the last is truncated to the currency's smallest
    unit; the last absorbs the remainder, so it is never smaller in
    magnitude than the others.

    Raises:
        ValueError: If parts is less than 1.
    """
    if parts < 1:
        raise ValueError(f"parts must be at least 1, got {parts}")
    if parts == 1:
        return (amount,)
    installment = quantize_amount(amount / Decimal(parts), currency_code, rounding=ROUND_DOWN)
    return (installment,) * (parts - 1) + (amount - installment * (parts - 1),)


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Guarantees:
        - Immutable and hashable
        - code is always uppercase, stripped, and known to CurrencyRegistry
    """

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if self.code else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    @property
    def quantum(self) -> Decimal:
        """Smallest unit of this currency."""
        return CurrencyRegistry.quantum(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency. Does NOT auto-round;
        callers round explicitly with .round() or get rounded parts from
        .split().
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int | float, currency: str | Currency) -> Money:
        """Factory method for creating Money."""
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=to_decimal(amount), currency=currency)

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to the currency's decimal places."""
        rounded = self.amount.quantize(self.currency.quantum, rounding=rounding)
        return Money(amount=rounded, currency=self.currency)

    def split(self, parts: int) -> tuple[Money, ...]:
        """Split into ``parts`` installments; see split_amount()."""
        return tuple(
            Money(amount=part, currency=self.currency)
            for part in split_amount(self.amount, parts, self.currency.code)
        )

    def _check_currency(self, other: Money, operation: str) -> None:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {operation} Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"
