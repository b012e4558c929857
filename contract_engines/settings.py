"""
Engine settings for contract event scheduling.

Labels and classification rules the event engine consults.  Settings are
plain frozen values passed to the engine by the caller; the engine never
reads configuration on its own.  ``contract_config`` parses them from YAML.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EngineSettings:
    """
    Tunable knobs for compute_contract_events().

    Attributes:
        billing_only_categories: Block category ids that carry no service
            delivery (billing events only).
        emi_block_id: Reserved block id attributed to EMI installments.
        emi_block_name: Contract-level block name shown on EMI events.
        emi_label: billing_cycle_label of EMI installments.
        prepaid_label: billing_cycle_label of a recurring block billed
            upfront for its whole term.
        default_block_payment_type: Payment type assumed under mixed billing
            when a block has no valid per-block entry.
    """

    billing_only_categories: frozenset[str] = field(
        default_factory=lambda: frozenset({"billing"})
    )
    emi_block_id: str = "_emi"
    emi_block_name: str = "EMI Installment"
    emi_label: str = "EMI Installment"
    prepaid_label: str = "Prepaid"
    default_block_payment_type: str = "prepaid"

    def __post_init__(self) -> None:
        if not isinstance(self.billing_only_categories, frozenset):
            object.__setattr__(
                self, "billing_only_categories", frozenset(self.billing_only_categories)
            )
        if self.default_block_payment_type not in ("prepaid", "postpaid"):
            raise ValueError(
                "default_block_payment_type must be 'prepaid' or 'postpaid', "
                f"got {self.default_block_payment_type!r}"
            )
        if not self.emi_block_id:
            raise ValueError("emi_block_id is required")


DEFAULT_SETTINGS = EngineSettings()
