"""
Shared types for the revenue-splitting calculation engine.

Everything here is an immutable snapshot: reference data is converted from
storage rows into these classes before it reaches the engine, and the engine
returns CalculationResult values that are never mutated afterwards.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple


class BonusBaseValue(str, Enum):
    """Which amount a bonus rule's percentage is applied to."""
    GROSS_VALUE = "gross_value"
    NET_VALUE = "net_value"
    FINAL_AFTER_COSTS = "final_after_costs"  # Rendered like net value by consumers


class SplitPath(str, Enum):
    """How the owner/professional split of a result was decided."""
    CONFIGURED = "configured"  # A split rule matched and was valid
    LEGACY = "legacy"  # No split rules supplied, name-keyed fallback applied
    DEFAULT = "default"  # 100% owner (no match, invalid rule, or no owner id)


@dataclass(frozen=True)
class Professional:
    """A person who performs procedures or receives a split/bonus share."""
    id: str
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class Procedure:
    """A billable service type with a fixed cost deducted on every use."""
    id: str
    name: str
    fixed_cost: Decimal = Decimal("0")
    has_vanessa_bonus: bool = False
    vanessa_bonus_percentage: Optional[Decimal] = None  # Legacy fallback only
    is_active: bool = True


@dataclass(frozen=True)
class PaymentMethod:
    id: str
    name: str
    display_order: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class CardFeeRule:
    """Fee percentage for a payment method within [min_value, max_value]."""
    payment_method_id: str
    fee_percentage: Decimal
    min_value: Decimal = Decimal("0")
    max_value: Optional[Decimal] = None  # None = unbounded upper edge
    id: Optional[str] = None


@dataclass(frozen=True)
class BonusRule:
    """
    Third-party revenue-share rule.

    A None filter matches anything. Every matching active rule fires and the
    amounts add up.
    """
    id: str
    percentage: Decimal
    base_value: BonusBaseValue = BonusBaseValue.NET_VALUE
    procedure_id: Optional[str] = None
    professional_id: Optional[str] = None
    is_active: bool = True
    name: str = ""
    beneficiary_name: str = ""


@dataclass(frozen=True)
class SplitDistribution:
    professional_id: str
    percentage: Decimal


@dataclass(frozen=True)
class SplitRule:
    """
    Distribution of the net value among professionals.

    Only the single best matching rule applies (specificity, then priority,
    then id).
    """
    id: str
    distributions: Tuple[SplitDistribution, ...]
    procedure_id: Optional[str] = None
    professional_id: Optional[str] = None
    priority: int = 0
    is_active: bool = True
    name: str = ""


@dataclass(frozen=True)
class Source:
    """Where the payment came from; hospitals carry their own tax rate (default 0)."""
    is_hospital: bool = False
    custom_tax_percentage: Optional[Decimal] = None
    name: str = ""

    @classmethod
    def for_appointment(cls, is_hospital: bool) -> "Source":
        """Build the source used for stored appointments (hospital = 0% tax)."""
        if is_hospital:
            return cls(is_hospital=True, custom_tax_percentage=Decimal("0"), name="Hospital")
        return cls(is_hospital=False, custom_tax_percentage=None, name="Clinica")


@dataclass(frozen=True)
class MultiProcedureCalculationInput:
    """Everything the forward calculator needs for one appointment."""
    gross_value: Decimal
    payment_method_id: str
    source: Source
    procedures: Tuple[Procedure, ...]
    professional: Professional
    card_fee_rules: Tuple[CardFeeRule, ...]
    default_tax_percentage: Decimal
    default_bonus_percentage: Decimal
    bonus_rules: Tuple[BonusRule, ...] = ()
    split_rules: Tuple[SplitRule, ...] = ()
    owner_professional_id: Optional[str] = None
    net_value_input: Optional[Decimal] = None  # Externally asserted net (manual override)

    @property
    def primary_procedure(self) -> Optional[Procedure]:
        return self.procedures[0] if self.procedures else None


@dataclass(frozen=True)
class CalculationInput:
    """Single-procedure variant of MultiProcedureCalculationInput."""
    gross_value: Decimal
    payment_method_id: str
    source: Source
    procedure: Procedure
    professional: Professional
    card_fee_rules: Tuple[CardFeeRule, ...]
    default_tax_percentage: Decimal
    default_bonus_percentage: Decimal
    bonus_rules: Tuple[BonusRule, ...] = ()
    split_rules: Tuple[SplitRule, ...] = ()
    owner_professional_id: Optional[str] = None
    net_value_input: Optional[Decimal] = None

    def to_multi_procedure(self) -> MultiProcedureCalculationInput:
        return MultiProcedureCalculationInput(
            gross_value=self.gross_value,
            payment_method_id=self.payment_method_id,
            source=self.source,
            procedures=(self.procedure,),
            professional=self.professional,
            card_fee_rules=self.card_fee_rules,
            default_tax_percentage=self.default_tax_percentage,
            default_bonus_percentage=self.default_bonus_percentage,
            bonus_rules=self.bonus_rules,
            split_rules=self.split_rules,
            owner_professional_id=self.owner_professional_id,
            net_value_input=self.net_value_input,
        )


@dataclass(frozen=True)
class SplitAllocation:
    """One professional's slice of the net value."""
    professional_id: Optional[str]  # None only for the owner bucket when no owner id is known
    percentage: Decimal
    amount: Decimal
    is_owner: bool


@dataclass(frozen=True)
class SplitOutcome:
    """
    Result of distributing a net value.

    allocations is the canonical per-professional view; owner_share and
    professional_share are the two-bucket projection stored on appointments.
    """
    owner_share: Decimal
    professional_share: Decimal
    professional_percentage: Decimal
    allocations: Tuple[SplitAllocation, ...]
    path: SplitPath
    rule_id: Optional[str] = None


@dataclass(frozen=True)
class CalculationResult:
    """Fully itemized financial breakdown of one appointment."""
    gross_value: Decimal
    card_fee_percentage: Decimal
    card_fee_value: Decimal
    value_after_card_fee: Decimal
    tax_percentage: Decimal
    tax_value: Decimal
    value_after_tax: Decimal
    procedure_cost: Decimal  # Primary procedure only
    total_procedure_cost: Decimal
    net_value: Decimal
    bonus_value: Decimal
    professional_share: Decimal  # Percentage reported for the non-owner bucket
    owner_final_value: Decimal
    professional_final_value: Decimal
    allocations: Tuple[SplitAllocation, ...] = ()
    split_path: SplitPath = SplitPath.DEFAULT
    applied_split_rule_id: Optional[str] = None
    applied_bonus_rule_ids: Tuple[str, ...] = ()
    used_manual_net: bool = False

    def to_appointment_fields(self) -> Dict[str, Decimal]:
        """Project onto the calculated columns stored on an appointment."""
        return {
            "card_fee_percentage": self.card_fee_percentage,
            "card_fee_value": self.card_fee_value,
            "tax_percentage": self.tax_percentage,
            "tax_value": self.tax_value,
            "procedure_cost": self.procedure_cost,
            "total_procedure_cost": self.total_procedure_cost,
            "net_value": self.net_value,
            "bonus_value": self.bonus_value,
            "professional_share": self.professional_share,
            "final_value_owner": self.owner_final_value,
            "final_value_professional": self.professional_final_value,
        }


@dataclass(frozen=True)
class BonusComputation:
    total_bonus: Decimal
    applied_rules: Tuple[BonusRule, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CardFeeTier:
    """Revenue band selecting which card fee rates apply this month."""
    id: str
    min_revenue: Decimal
    max_revenue: Optional[Decimal] = None
    priority: int = 0
    is_active: bool = True
    name: str = ""

    def contains(self, revenue: Decimal) -> bool:
        if revenue < self.min_revenue:
            return False
        return self.max_revenue is None or revenue <= self.max_revenue


@dataclass(frozen=True)
class CardFeeTierRate:
    """A tier's fee percentage for one payment method."""
    id: str
    tier_id: str
    payment_method_id: str
    fee_percentage: Decimal
