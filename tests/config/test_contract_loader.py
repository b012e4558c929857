"""
Tests for YAML contract document loading (contract_config.loader).

Documents are written to tmp_path and parsed into the frozen engine types.
"""

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal
from textwrap import dedent

import pytest
import yaml

from contract_config.loader import (
    compute_checksum,
    load_contract_configuration,
    load_contract_document,
    load_engine_settings,
    load_yaml_file,
    parse_block,
    parse_contract_configuration,
    parse_contract_document,
    parse_date,
    parse_engine_settings,
    parse_overrides,
)
from contract_engines.blocks import BlockCycle
from contract_engines.events import (
    BillingCycleType,
    PaymentMode,
    compute_contract_events,
)
from contract_engines.overrides import apply_overrides
from contract_engines.settings import DEFAULT_SETTINGS
from contract_kernel.domain.dates import DurationUnit
from contract_kernel.exceptions import (
    ConfigurationError,
    InvalidConfigurationValueError,
    InvalidCurrencyError,
    MissingConfigurationFieldError,
)

CONTRACT_YAML = dedent("""\
    contract:
      id: CN-2025-001
      start_date: 2025-01-01
      duration:
        value: 1
        unit: year
      payment_mode: prepaid
      billing_cycle_type: mixed
      currency: inr
      per_block_payment_type:
        audit: postpaid
    blocks:
      - id: audit
        name: Quarterly Audit
        price: 900
        cycle: quarterly
        category_id: compliance
      - id: setup
        name: Setup Fee
        price: "1500.50"
    overrides:
      evt_service_audit_2: 2025-04-15
    settings:
      prepaid_label: Paid in advance
""")


@pytest.fixture
def contract_file(tmp_path):
    path = tmp_path / "contract.yaml"
    path.write_text(CONTRACT_YAML)
    return path


# =============================================================================
# Documents
# =============================================================================


class TestLoadContractDocument:

    def test_configuration_parsed(self, contract_file):
        doc = load_contract_document(contract_file)
        config = doc.configuration

        assert config.contract_id == "CN-2025-001"
        assert config.start_date == date(2025, 1, 1)
        assert config.duration_value == 1
        assert config.duration_unit is DurationUnit.YEARS
        assert config.payment_mode is PaymentMode.PREPAID
        assert config.billing_cycle_type is BillingCycleType.MIXED
        assert config.currency == "INR"
        assert dict(config.per_block_payment_type) == {"audit": "postpaid"}

    def test_blocks_parsed(self, contract_file):
        blocks = load_contract_document(contract_file).configuration.selected_blocks

        assert [b.id for b in blocks] == ["audit", "setup"]
        assert blocks[0].cycle is BlockCycle.QUARTERLY
        assert blocks[0].price == Decimal("900")
        assert blocks[1].price == Decimal("1500.50")
        assert blocks[1].cycle is BlockCycle.ONE_TIME

    def test_overrides_and_settings(self, contract_file):
        doc = load_contract_document(contract_file)

        assert doc.overrides == {"evt_service_audit_2": date(2025, 4, 15)}
        assert doc.settings.prepaid_label == "Paid in advance"
        assert doc.source == contract_file
        assert len(doc.checksum) == 64

    def test_document_drives_engine(self, contract_file):
        doc = load_contract_document(contract_file)

        events = compute_contract_events(doc.configuration, doc.settings)
        timeline = apply_overrides(events, doc.overrides)

        audit_billing = [e for e in timeline if e.block_id == "audit" and e.is_billing]
        assert len(audit_billing) == 4
        moved = next(e for e in timeline if e.id == "evt_service_audit_2")
        assert moved.scheduled_date == date(2025, 4, 15)

    def test_document_frozen(self, contract_file):
        doc = load_contract_document(contract_file)
        with pytest.raises(FrozenInstanceError):
            doc.checksum = "x"

    def test_load_configuration_only(self, contract_file):
        config = load_contract_configuration(contract_file)
        assert len(config.selected_blocks) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_contract_document(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("contract: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_contract_document(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(InvalidConfigurationValueError):
            load_yaml_file(path)

    def test_missing_contract_section(self):
        with pytest.raises(MissingConfigurationFieldError) as exc_info:
            parse_contract_document({"blocks": []})
        assert exc_info.value.field == "contract"
        assert exc_info.value.code == "MISSING_CONFIG_FIELD"

    def test_defaults_without_optional_sections(self):
        doc = parse_contract_document({
            "contract": {"start_date": "2025-01-01", "duration_value": 3},
        })
        assert doc.overrides == {}
        assert doc.settings is DEFAULT_SETTINGS
        assert doc.source is None


class TestChecksum:

    def test_key_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_content_sensitive(self):
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})

    def test_dates_supported(self):
        assert len(compute_checksum({"start": date(2025, 1, 1)})) == 64


# =============================================================================
# Configuration fields
# =============================================================================


class TestParseContractConfiguration:

    def test_numeric_contract_id_stringified(self):
        config = parse_contract_configuration({
            "id": 1042, "start_date": "2025-01-01", "duration_value": 1,
        })
        assert config.contract_id == "1042"

    def test_camel_case_aliases(self):
        config = parse_contract_configuration({
            "startDate": "2025-02-01",
            "durationValue": 6,
            "durationUnit": "months",
            "paymentMode": "emi",
            "emiMonths": 3,
            "grandTotal": 3000,
            "billingCycleType": "unified",
            "selectedBlocks": [{"id": "a", "unitPrice": 100, "categoryId": "hosting"}],
        })
        assert config.start_date == date(2025, 2, 1)
        assert config.payment_mode is PaymentMode.EMI
        assert config.emi_months == 3
        assert config.grand_total == Decimal("3000")
        assert config.selected_blocks[0].category_id == "hosting"

    def test_float_amount_exact(self):
        config = parse_contract_configuration({
            "start_date": "2025-01-01", "duration_value": 1, "grand_total": 0.1,
        })
        assert config.grand_total == Decimal("0.1")

    def test_null_billing_cycle_type(self):
        config = parse_contract_configuration({
            "start_date": "2025-01-01", "duration_value": 1, "billing_cycle_type": None,
        })
        assert config.billing_cycle_type is None

    @pytest.mark.parametrize("raw", ["none", "None", "NONE", " none ", ""])
    def test_none_billing_cycle_type_any_case(self, raw):
        config = parse_contract_configuration({
            "start_date": "2025-01-01", "duration_value": 1, "billing_cycle_type": raw,
        })
        assert config.billing_cycle_type is None

    def test_missing_start_date(self):
        with pytest.raises(MissingConfigurationFieldError) as exc_info:
            parse_contract_configuration({"duration_value": 1})
        assert exc_info.value.field == "start_date"

    def test_missing_duration(self):
        with pytest.raises(MissingConfigurationFieldError):
            parse_contract_configuration({"start_date": "2025-01-01"})

    def test_invalid_start_date(self):
        with pytest.raises(InvalidConfigurationValueError) as exc_info:
            parse_contract_configuration({"start_date": "soon", "duration_value": 1})
        assert exc_info.value.field == "start_date"

    def test_invalid_unit(self):
        with pytest.raises(InvalidConfigurationValueError, match="duration_unit"):
            parse_contract_configuration({
                "start_date": "2025-01-01", "duration_value": 1, "duration_unit": "weeks",
            })

    def test_fractional_duration_rejected(self):
        with pytest.raises(InvalidConfigurationValueError, match="duration_value"):
            parse_contract_configuration({"start_date": "2025-01-01", "duration_value": 1.5})

    def test_invalid_payment_mode(self):
        with pytest.raises(InvalidConfigurationValueError, match="payment_mode"):
            parse_contract_configuration({
                "start_date": "2025-01-01", "duration_value": 1, "payment_mode": "barter",
            })

    def test_unknown_currency(self):
        with pytest.raises(InvalidCurrencyError) as exc_info:
            parse_contract_configuration({
                "start_date": "2025-01-01", "duration_value": 1, "currency": "XYZ",
            })
        assert exc_info.value.code == "INVALID_CURRENCY"

    def test_duplicate_block_ids(self):
        with pytest.raises(InvalidConfigurationValueError, match="unique"):
            parse_contract_configuration({
                "start_date": "2025-01-01",
                "duration_value": 1,
                "blocks": [{"id": "a", "price": 1}, {"id": "a", "price": 2}],
            })

    def test_unrecognised_block_payment_type_logged(self, captured_logs):
        config = parse_contract_configuration({
            "start_date": "2025-01-01",
            "duration_value": 1,
            "per_block_payment_type": {"a": "later"},
        })
        assert config.per_block_payment_type["a"] == "later"
        assert any(
            r["message"] == "config_block_payment_type_unrecognized" for r in captured_logs()
        )


class TestParseBlock:

    def test_defaults(self):
        block = parse_block({"id": "a", "price": 10})
        assert block.name == "a"
        assert block.quantity == 1
        assert not block.unlimited
        assert block.cycle is BlockCycle.ONE_TIME
        assert block.billing_only is None
        assert block.currency is None

    def test_missing_price(self):
        with pytest.raises(MissingConfigurationFieldError) as exc_info:
            parse_block({"id": "a"})
        assert exc_info.value.field == "price"

    def test_missing_id(self):
        with pytest.raises(MissingConfigurationFieldError):
            parse_block({"price": 1})

    def test_negative_price(self):
        with pytest.raises(InvalidConfigurationValueError, match="non-negative"):
            parse_block({"id": "a", "price": -5})

    def test_non_numeric_price(self):
        with pytest.raises(InvalidConfigurationValueError, match="price"):
            parse_block({"id": "a", "price": "ten"})

    def test_block_currency_normalised(self):
        assert parse_block({"id": "a", "price": 1, "currency": "usd"}).currency == "USD"

    def test_billing_only_flag(self):
        assert parse_block({"id": "a", "price": 1, "billing_only": True}).billing_only is True

    @pytest.mark.parametrize("key", ["unlimited", "billing_only"])
    def test_quoted_boolean_rejected(self, key):
        """A quoted "false" would otherwise be truthy."""
        with pytest.raises(InvalidConfigurationValueError) as exc_info:
            parse_block({"id": "a", "price": 1, key: "false"})
        assert exc_info.value.field == key
        assert exc_info.value.value == "false"

    def test_yaml_booleans_accepted(self):
        block = parse_block(yaml.safe_load("{id: a, price: 1, unlimited: false, billingOnly: yes}"))
        assert block.unlimited is False
        assert block.billing_only is True

    def test_numeric_flag_rejected(self):
        with pytest.raises(InvalidConfigurationValueError, match="true or false"):
            parse_block({"id": "a", "price": 1, "unlimited": 1})

    def test_not_a_mapping(self):
        with pytest.raises(InvalidConfigurationValueError):
            parse_block(["a"])


# =============================================================================
# Overrides and settings
# =============================================================================


class TestParseOverrides:

    def test_empty(self):
        assert parse_overrides(None) == {}

    def test_strings_and_dates(self):
        assert parse_overrides({"a": "2025-01-02", "b": date(2025, 1, 3)}) == {
            "a": date(2025, 1, 2),
            "b": date(2025, 1, 3),
        }

    def test_invalid_date_rejected(self):
        with pytest.raises(InvalidConfigurationValueError) as exc_info:
            parse_overrides({"a": "tomorrow"})
        assert exc_info.value.field == "overrides.a"


class TestEngineSettingsLoading:

    def test_defaults_when_absent(self):
        assert parse_engine_settings(None) is DEFAULT_SETTINGS

    def test_partial_settings(self):
        settings = parse_engine_settings({
            "billing_only_categories": ["billing", "tax"],
            "emi_label": "Instalment",
        })
        assert settings.billing_only_categories == frozenset({"billing", "tax"})
        assert settings.emi_label == "Instalment"
        assert settings.emi_block_id == "_emi"

    def test_invalid_default_payment_type(self):
        with pytest.raises(InvalidConfigurationValueError):
            parse_engine_settings({"default_block_payment_type": "later"})

    def test_categories_must_be_list(self):
        with pytest.raises(InvalidConfigurationValueError):
            parse_engine_settings({"billing_only_categories": "billing"})

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("prepaid_label: Upfront\nemi_block_id: plan\n")
        settings = load_engine_settings(path)
        assert settings.prepaid_label == "Upfront"
        assert settings.emi_block_id == "plan"


def test_parse_date():
    assert parse_date("2025-03-01") == date(2025, 3, 1)
    with pytest.raises(ConfigurationError):
        parse_date("03/01/2025")
