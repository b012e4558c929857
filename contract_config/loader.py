"""
Configuration Loader (``contract_config.loader``).

Responsibility
--------------
Loads YAML contract documents and parses them into the frozen value types
the engines consume: ``ContractConfiguration``, ``Block``,
``EngineSettings`` and override maps.  Keys are snake_case; the camelCase
names the contract wizard emits (``startDate``, ``selectedBlocks``,
``perBlockPaymentType``, ...) are accepted as aliases.

Architecture position
---------------------
**Config layer** -- boundary tooling.  Depends on contract_engines for
the target types; engines never import this package.

Invariants enforced
-------------------
* Parse errors raise typed ``ConfigurationError`` subclasses carrying the
  offending field; no silent defaults for required fields.
* Every parsed object is a frozen dataclass.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  document identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``MissingConfigurationFieldError``.
* Unparsable values (dates, enums, amounts)  -> ``InvalidConfigurationValueError``.
* Unknown ISO 4217 codes  -> ``InvalidCurrencyError``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from contract_config.schema import ContractDocument
from contract_engines.blocks import Block, BlockCycle
from contract_engines.events import (
    BillingCycleType,
    BlockPaymentType,
    ContractConfiguration,
    PaymentMode,
)
from contract_engines.settings import DEFAULT_SETTINGS, EngineSettings
from contract_kernel.domain.currency import CurrencyRegistry
from contract_kernel.domain.dates import DurationUnit, coerce_date
from contract_kernel.exceptions import (
    InvalidConfigurationValueError,
    InvalidCurrencyError,
    MissingConfigurationFieldError,
)
from contract_kernel.logging_config import get_logger

logger = get_logger("config.loader")

_MISSING = object()


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidConfigurationValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise InvalidConfigurationValueError(str(path), type(data).__name__, "expected a mapping")
    return data


def _lookup(data: dict[str, Any], *names: str, default: Any = _MISSING) -> Any:
    """First present key among ``names`` (snake_case first, then aliases)."""
    for name in names:
        if name in data:
            return data[name]
    return default


def _require(data: dict[str, Any], section: str, *names: str) -> Any:
    value = _lookup(data, *names)
    if value is _MISSING:
        raise MissingConfigurationFieldError(names[0], section)
    return value


def parse_date(value: Any, field_name: str = "date") -> date:
    """
    Parse a date from YAML (date object or ISO string).

    Raises:
        InvalidConfigurationValueError: if ``value`` is not a valid date.
    """
    parsed = coerce_date(value)
    if parsed is None:
        raise InvalidConfigurationValueError(field_name, value, "expected an ISO date")
    return parsed


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """Parse an amount, going through ``str`` so YAML floats stay exact."""
    if isinstance(value, bool):
        raise InvalidConfigurationValueError(field_name, value, "expected a number")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidConfigurationValueError(field_name, value, "expected a number") from e


def parse_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise InvalidConfigurationValueError(field_name, value, "expected an integer")
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidConfigurationValueError(field_name, value, "expected an integer") from e
    if parsed != parsed.to_integral_value():
        raise InvalidConfigurationValueError(field_name, value, "expected an integer")
    return int(parsed)


def parse_currency(value: Any) -> str:
    """
    Normalise and check an ISO 4217 code.

    Raises:
        InvalidCurrencyError: if the code is not in the registry.
    """
    code = str(value).strip().upper()
    if not CurrencyRegistry.is_valid(code):
        raise InvalidCurrencyError(code)
    return code


def parse_bool(value: Any, field_name: str) -> bool:
    """Accept only real YAML booleans; quoted "false" is an error, not True."""
    if not isinstance(value, bool):
        raise InvalidConfigurationValueError(field_name, value, "expected true or false")
    return value


def _parse_enum(enum_cls: type, value: Any, field_name: str) -> Any:
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidConfigurationValueError(field_name, value, f"expected one of: {allowed}") from e


def parse_block(data: dict[str, Any]) -> Block:
    """Parse a block from a YAML mapping."""
    if not isinstance(data, dict):
        raise InvalidConfigurationValueError("block", data, "expected a mapping")
    block_id = str(_require(data, "block", "id"))
    section = f"block '{block_id}'"

    billing_only = _lookup(data, "billing_only", "billingOnly", default=None)
    currency = _lookup(data, "currency", default=None)
    try:
        return Block(
            id=block_id,
            name=str(_lookup(data, "name", default=block_id)),
            price=parse_decimal(_require(data, section, "price", "unitPrice"), "price"),
            quantity=parse_int(_lookup(data, "quantity", default=1), "quantity"),
            unlimited=parse_bool(_lookup(data, "unlimited", default=False), "unlimited"),
            cycle=BlockCycle.parse(_lookup(data, "cycle", default=BlockCycle.ONE_TIME.value)),
            category_id=str(_lookup(data, "category_id", "categoryId", default="") or ""),
            currency=None if currency is None else parse_currency(currency),
            billing_only=None if billing_only is None else parse_bool(billing_only, "billing_only"),
        )
    except ValueError as e:
        raise InvalidConfigurationValueError(section, data, str(e)) from e


def _parse_duration(data: dict[str, Any]) -> tuple[int, DurationUnit]:
    duration = _lookup(data, "duration", default=None)
    if isinstance(duration, dict):
        value = _require(duration, "duration", "value")
        unit = _lookup(duration, "unit", default="months")
    else:
        value = _require(data, "contract", "duration_value", "durationValue")
        unit = _lookup(data, "duration_unit", "durationUnit", default="months")

    parsed_unit = DurationUnit.parse(unit)
    if parsed_unit is None:
        allowed = ", ".join(u.value for u in DurationUnit)
        raise InvalidConfigurationValueError("duration_unit", unit, f"expected one of: {allowed}")
    return parse_int(value, "duration_value"), parsed_unit


def parse_contract_configuration(data: dict[str, Any]) -> ContractConfiguration:
    """
    Parse a contract configuration mapping.

    Blocks may be listed under ``blocks`` (or ``selectedBlocks``) either
    inside the mapping or passed alongside it by parse_contract_document.
    """
    start_date = parse_date(_require(data, "contract", "start_date", "startDate"), "start_date")
    duration_value, duration_unit = _parse_duration(data)

    blocks_data = _lookup(data, "blocks", "selected_blocks", "selectedBlocks", default=[]) or []
    if not isinstance(blocks_data, list):
        raise InvalidConfigurationValueError("blocks", blocks_data, "expected a list")
    blocks = tuple(parse_block(b) for b in blocks_data)

    ids = [b.id for b in blocks]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise InvalidConfigurationValueError("blocks", duplicates, "block ids must be unique")

    raw_billing = _lookup(data, "billing_cycle_type", "billingCycleType", default=None)
    billing_cycle_type = (
        None if raw_billing is None or str(raw_billing).strip().lower() in ("", "none")
        else _parse_enum(BillingCycleType, raw_billing, "billing_cycle_type")
    )

    per_block = _lookup(data, "per_block_payment_type", "perBlockPaymentType", default={}) or {}
    if not isinstance(per_block, dict):
        raise InvalidConfigurationValueError("per_block_payment_type", per_block, "expected a mapping")
    for block_id, payment_type in per_block.items():
        # Unknown values stay as-is; the engine defaults them to prepaid
        if str(payment_type).strip().lower() not in {t.value for t in BlockPaymentType}:
            logger.warning("config_block_payment_type_unrecognized", extra={
                "block_id": str(block_id),
                "payment_type": str(payment_type),
            })

    contract_id = _lookup(data, "id", "contract_id", "contractId", default=None)

    return ContractConfiguration(
        start_date=start_date,
        duration_value=duration_value,
        duration_unit=duration_unit,
        selected_blocks=blocks,
        payment_mode=_parse_enum(
            PaymentMode,
            _lookup(data, "payment_mode", "paymentMode", default=PaymentMode.PREPAID.value),
            "payment_mode",
        ),
        emi_months=parse_int(_lookup(data, "emi_months", "emiMonths", default=1), "emi_months"),
        per_block_payment_type={str(k): str(v) for k, v in per_block.items()},
        billing_cycle_type=billing_cycle_type,
        grand_total=parse_decimal(_lookup(data, "grand_total", "grandTotal", default="0"), "grand_total"),
        currency=parse_currency(_lookup(data, "currency", default="INR")),
        contract_id=None if contract_id is None else str(contract_id),
    )


def parse_overrides(data: dict[str, Any] | None) -> dict[str, date]:
    """
    Parse an event id -> date mapping.

    Unlike the engine (which ignores bad override dates), the loader
    rejects them so a typo in a reviewed document is caught early.
    """
    if not data:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigurationValueError("overrides", data, "expected a mapping")
    return {str(event_id): parse_date(value, f"overrides.{event_id}") for event_id, value in data.items()}


def parse_engine_settings(data: dict[str, Any] | None) -> EngineSettings:
    """Parse engine settings; absent keys keep their defaults."""
    if not data:
        return DEFAULT_SETTINGS
    if not isinstance(data, dict):
        raise InvalidConfigurationValueError("settings", data, "expected a mapping")

    kwargs: dict[str, Any] = {}
    categories = data.get("billing_only_categories")
    if categories is not None:
        if not isinstance(categories, (list, tuple, set)):
            raise InvalidConfigurationValueError("billing_only_categories", categories, "expected a list")
        kwargs["billing_only_categories"] = frozenset(str(c) for c in categories)
    for key in (
        "emi_block_id",
        "emi_block_name",
        "emi_label",
        "prepaid_label",
        "default_block_payment_type",
    ):
        if key in data:
            kwargs[key] = str(data[key])

    try:
        return EngineSettings(**kwargs)
    except ValueError as e:
        raise InvalidConfigurationValueError("settings", data, str(e)) from e


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed document (key order independent)."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_contract_document(data: dict[str, Any], source: Path | None = None) -> ContractDocument:
    """
    Parse a full contract document.

    Layout::

        contract:            # ContractConfiguration fields
          start_date: 2025-01-01
          duration: {value: 12, unit: months}
          ...
        blocks: [...]        # optional here instead of under contract
        overrides: {...}     # optional, event id -> date
        settings: {...}      # optional EngineSettings fields
    """
    contract_data = _require(data, "document", "contract")
    if not isinstance(contract_data, dict):
        raise InvalidConfigurationValueError("contract", contract_data, "expected a mapping")
    if "blocks" in data and "blocks" not in contract_data:
        contract_data = {**contract_data, "blocks": data["blocks"]}

    document = ContractDocument(
        configuration=parse_contract_configuration(contract_data),
        overrides=parse_overrides(data.get("overrides")),
        settings=parse_engine_settings(data.get("settings")),
        checksum=compute_checksum(data),
        source=source,
    )
    logger.info("contract_document_parsed", extra={
        "source": str(source) if source else None,
        "contract_id": document.configuration.contract_id,
        "block_count": len(document.configuration.selected_blocks),
        "override_count": len(document.overrides),
        "checksum": document.checksum[:16],
    })
    return document


def load_contract_document(path: Path | str) -> ContractDocument:
    """Load and parse a contract document from a YAML file."""
    path = Path(path)
    return parse_contract_document(load_yaml_file(path), source=path)


def load_contract_configuration(path: Path | str) -> ContractConfiguration:
    """Load only the contract configuration from a YAML document."""
    return load_contract_document(path).configuration


def load_engine_settings(path: Path | str) -> EngineSettings:
    """Load engine settings from a YAML file holding the settings mapping."""
    return parse_engine_settings(load_yaml_file(Path(path)))
