"""Currency -- ISO 4217 registry and precision-derived rounding."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def quantum(self) -> Decimal:
        """Smallest representable unit, usable with Decimal.quantize()."""
        return Decimal(1).scaleb(-self.decimal_places)


# (code, decimal places, name) for the currencies contracts are priced in.
# Source: https://www.iso.org/iso-4217-currency-codes.html
_ISO_4217: tuple[tuple[str, int, str], ...] = (
    ("AED", 2, "UAE Dirham"),
    ("AUD", 2, "Australian Dollar"),
    ("BDT", 2, "Bangladeshi Taka"),
    ("BHD", 3, "Bahraini Dinar"),
    ("BRL", 2, "Brazilian Real"),
    ("CAD", 2, "Canadian Dollar"),
    ("CHF", 2, "Swiss Franc"),
    ("CLP", 0, "Chilean Peso"),
    ("CNY", 2, "Chinese Yuan"),
    ("CZK", 2, "Czech Koruna"),
    ("DKK", 2, "Danish Krone"),
    ("EGP", 2, "Egyptian Pound"),
    ("EUR", 2, "Euro"),
    ("GBP", 2, "Pound Sterling"),
    ("HKD", 2, "Hong Kong Dollar"),
    ("IDR", 2, "Indonesian Rupiah"),
    ("ILS", 2, "Israeli New Shekel"),
    ("INR", 2, "Indian Rupee"),
    ("JOD", 3, "Jordanian Dinar"),
    ("JPY", 0, "Japanese Yen"),
    ("KES", 2, "Kenyan Shilling"),
    ("KRW", 0, "South Korean Won"),
    ("KWD", 3, "Kuwaiti Dinar"),
    ("LKR", 2, "Sri Lankan Rupee"),
    ("MXN", 2, "Mexican Peso"),
    ("MYR", 2, "Malaysian Ringgit"),
    ("NGN", 2, "Nigerian Naira"),
    ("NOK", 2, "Norwegian Krone"),
    ("NPR", 2, "Nepalese Rupee"),
    ("NZD", 2, "New Zealand Dollar"),
    ("OMR", 3, "Omani Rial"),
    ("PHP", 2, "Philippine Peso"),
    ("PKR", 2, "Pakistani Rupee"),
    ("PLN", 2, "Polish Zloty"),
    ("QAR", 2, "Qatari Riyal"),
    ("SAR", 2, "Saudi Riyal"),
    ("SEK", 2, "Swedish Krona"),
    ("SGD", 2, "Singapore Dollar"),
    ("THB", 2, "Thai Baht"),
    ("TND", 3, "Tunisian Dinar"),
    ("TRY", 2, "Turkish Lira"),
    ("TWD", 2, "New Taiwan Dollar"),
    ("UGX", 0, "Ugandan Shilling"),
    ("USD", 2, "US Dollar"),
    ("VND", 0, "Vietnamese Dong"),
    ("ZAR", 2, "South African Rand"),
)


class CurrencyRegistry:
    """Registry of ISO 4217 currencies with their decimal places."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        code: CurrencyInfo(code, places, name) for code, places, name in _ISO_4217
    }

    # Precision assumed for codes the registry does not know
    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check if a currency code is a known ISO 4217 code."""
        if not code or not isinstance(code, str):
            return False
        return code.upper().strip() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information by code."""
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Decimal places for a currency, the default for unknown codes."""
        info = cls.get_info(code)
        return info.decimal_places if info else cls.DEFAULT_DECIMAL_PLACES

    @classmethod
    def quantum(cls, code: str) -> Decimal:
        """Smallest currency unit (0.01 for USD, 1 for JPY)."""
        return Decimal(1).scaleb(-cls.get_decimal_places(code))

    @classmethod
    def validate(cls, code: str) -> str:
        """Validate and normalize a currency code."""
        if not code or not isinstance(code, str):
            raise ValueError(f"Invalid currency code: {code!r}")

        normalized = code.upper().strip()

        if len(normalized) != 3:
            raise ValueError(f"Currency code must be 3 characters: {code!r}")

        if normalized not in cls._CURRENCIES:
            raise ValueError(f"Invalid ISO 4217 currency code: {code!r}")

        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        """Get all valid currency codes."""
        return frozenset(cls._CURRENCIES)
