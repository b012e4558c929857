"""
Contract document schema.

A contract document is the human-authored, reviewable source artifact for
one scheduling run: the contract configuration, the user's date overrides
and the engine settings.  YAML files are parsed into these types by the
loader; the engine itself only ever sees the parsed values.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from contract_engines.events import ContractConfiguration
from contract_engines.settings import DEFAULT_SETTINGS, EngineSettings


@dataclass(frozen=True)
class ContractDocument:
    """
    Parsed contract document.

    Attributes:
        configuration: Engine input.
        overrides: Event id -> user-chosen date.
        settings: Engine settings (defaults when the document has none).
        checksum: SHA-256 of the raw document, for change detection.
        source: File the document was loaded from, None for in-memory data.
    """

    configuration: ContractConfiguration
    overrides: Mapping[str, date] = field(default_factory=dict)
    settings: EngineSettings = DEFAULT_SETTINGS
    checksum: str = ""
    source: Path | None = None
