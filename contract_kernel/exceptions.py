"""
Typed Exception Hierarchy for the Contract Kernel.

Every error has a typed class (catch by type, not message), a ``code``
class attribute (machine-readable, API-safe), and carries its context as
attributes rather than inside the message string.

The scheduling engines themselves do not raise for well-formed input:
anomalies such as a non-positive duration or a corrupt override date
degrade to a safe default and are logged. These exceptions are raised at
the boundaries, when configuration is loaded and parsed.

    ContractKernelError (base)
    |
    +-- ConfigurationError
    |   +-- MissingConfigurationFieldError
    |   +-- InvalidConfigurationValueError
    |
    +-- CurrencyError
        +-- InvalidCurrencyError

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | MISSING_CONFIG_FIELD        | Required key absent from a config mapping
                | INVALID_CONFIG_VALUE        | Key present but its value can't be parsed
----------------|-----------------------------|-----------------------------------------
Currency        | INVALID_CURRENCY            | Not a valid ISO 4217 code

Handling pattern:

    try:
        document = load_contract_document(path)
    except MissingConfigurationFieldError as e:
        report(code=e.code, field=e.field, section=e.section)
    except ConfigurationError as e:
        log.error("contract_load_failed", extra={"code": e.code})
"""

from typing import Any


class ContractKernelError(Exception):
    """
    Base exception for all contract kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CONTRACT_KERNEL_ERROR"


# Configuration exceptions


class ConfigurationError(ContractKernelError):
    """Base exception for configuration loading and parsing errors."""

    code: str = "CONFIGURATION_ERROR"


class MissingConfigurationFieldError(ConfigurationError):
    """A required field is missing from a configuration mapping."""

    code: str = "MISSING_CONFIG_FIELD"

    def __init__(self, field: str, section: str):
        self.field = field
        self.section = section
        super().__init__(f"Missing required field '{field}' in {section}")


class InvalidConfigurationValueError(ConfigurationError):
    """A configuration field holds a value that cannot be parsed."""

    code: str = "INVALID_CONFIG_VALUE"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {value!r} ({reason})")


# Currency exceptions


class CurrencyError(ContractKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Invalid ISO 4217 currency code provided."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: '{currency}'")
