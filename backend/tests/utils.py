"""
Test utilities for clinic finance tests.

Builders for engine snapshots, so unit tests can describe an appointment
in one call and override only what they care about.
"""

from decimal import Decimal
from typing import Optional, Sequence

from shared_types import (
    BonusBaseValue,
    BonusRule,
    CardFeeRule,
    MultiProcedureCalculationInput,
    Procedure,
    Professional,
    Source,
    SplitDistribution,
    SplitRule,
)

OWNER = Professional(id="prof-owner", name="Bruno")
PARTNER = Professional(id="prof-partner", name="Valquíria")
ASSOCIATE = Professional(id="prof-associate", name="Carla")

CONSULTATION = Procedure(id="proc-consult", name="Consulta", fixed_cost=Decimal("50"))
ENDOLASER = Procedure(
    id="proc-endolaser",
    name="Endolaser Facial",
    fixed_cost=Decimal("50"),
    has_vanessa_bonus=True,
    vanessa_bonus_percentage=Decimal("1.5"),
)

CREDIT = "pm-credit"
PIX = "pm-pix"

CREDIT_3_PERCENT = CardFeeRule(payment_method_id=CREDIT, fee_percentage=Decimal("3"))


def make_input(
    gross_value: str = "1000",
    procedures: Sequence[Procedure] = (CONSULTATION,),
    professional: Professional = OWNER,
    payment_method_id: str = CREDIT,
    card_fee_rules: Sequence[CardFeeRule] = (CREDIT_3_PERCENT,),
    default_tax_percentage: str = "3",
    default_bonus_percentage: str = "1.5",
    source: Optional[Source] = None,
    bonus_rules: Sequence[BonusRule] = (),
    split_rules: Sequence[SplitRule] = (),
    owner_professional_id: Optional[str] = OWNER.id,
    net_value_input: Optional[str] = None,
) -> MultiProcedureCalculationInput:
    """Build a calculation input; defaults describe scenario 1 (gross 1000, fee 3%, tax 3%, cost 50)."""
    return MultiProcedureCalculationInput(
        gross_value=Decimal(gross_value),
        payment_method_id=payment_method_id,
        source=source or Source.for_appointment(False),
        procedures=tuple(procedures),
        professional=professional,
        card_fee_rules=tuple(card_fee_rules),
        default_tax_percentage=Decimal(default_tax_percentage),
        default_bonus_percentage=Decimal(default_bonus_percentage),
        bonus_rules=tuple(bonus_rules),
        split_rules=tuple(split_rules),
        owner_professional_id=owner_professional_id,
        net_value_input=Decimal(net_value_input) if net_value_input is not None else None,
    )


def split_rule(
    rule_id: str,
    *distributions: tuple,
    procedure_id: Optional[str] = None,
    professional_id: Optional[str] = None,
    priority: int = 0,
    is_active: bool = True,
) -> SplitRule:
    """split_rule("r1", (OWNER.id, "60"), (PARTNER.id, "40"), procedure_id=...)"""
    return SplitRule(
        id=rule_id,
        distributions=tuple(SplitDistribution(pid, Decimal(pct)) for pid, pct in distributions),
        procedure_id=procedure_id,
        professional_id=professional_id,
        priority=priority,
        is_active=is_active,
    )


def bonus_rule(
    rule_id: str,
    percentage: str,
    base_value: BonusBaseValue = BonusBaseValue.NET_VALUE,
    procedure_id: Optional[str] = None,
    professional_id: Optional[str] = None,
    is_active: bool = True,
) -> BonusRule:
    return BonusRule(
        id=rule_id,
        percentage=Decimal(percentage),
        base_value=base_value,
        procedure_id=procedure_id,
        professional_id=professional_id,
        is_active=is_active,
    )
