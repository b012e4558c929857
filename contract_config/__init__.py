"""
Contract configuration loading.

YAML contract documents are the reviewable input to a scheduling run.
This package parses them into the frozen engine types; the engines never
read files themselves.

Usage:
    from contract_config import load_contract_document
    from contract_engines import compute_contract_events, apply_overrides

    doc = load_contract_document("contract.yaml")
    events = compute_contract_events(doc.configuration, doc.settings)
    timeline = apply_overrides(events, doc.overrides)
"""

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
from contract_config.schema import ContractDocument

__all__ = [
    "ContractDocument",
    "compute_checksum",
    "load_contract_configuration",
    "load_contract_document",
    "load_engine_settings",
    "load_yaml_file",
    "parse_block",
    "parse_contract_configuration",
    "parse_contract_document",
    "parse_date",
    "parse_engine_settings",
    "parse_overrides",
]
