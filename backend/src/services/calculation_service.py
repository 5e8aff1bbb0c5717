"""
Forward calculation: from the gross value of an appointment to its full
financial breakdown.

Pipeline (order matters):
1. Card fee   - resolved from the card fee rules, taken off the gross value
2. Tax        - default rate, or the source's own rate for hospitals;
                computed on the GROSS value, not on the post-fee remainder
3. Procedures - fixed costs of every procedure are deducted -> net value
4. Bonus      - third-party bonus from bonus rules (or the legacy fallback)
5. Split      - net value divided between owner and professional

The bonus is paid on top of the split: owner share + professional share is
always the whole net value.
"""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from shared_types import (
    BonusRule,
    CalculationInput,
    CalculationResult,
    MultiProcedureCalculationInput,
    Procedure,
    Professional,
    Source,
    SplitOutcome,
    SplitRule,
)
from services.bonus_rule_service import BonusRuleEngine
from services.card_fee_service import find_card_fee_percentage
from services.legacy_fallback_rules import LegacyFallbackRules
from services.split_rule_service import SplitRuleEngine
from utils.money import ZERO, percentage_of

logger = logging.getLogger(__name__)


def resolve_tax_percentage(source: Source, default_tax_percentage: Decimal) -> Decimal:
    """Hospitals use their own tax rate (0 when unset); everyone else the default."""
    if source.is_hospital:
        return source.custom_tax_percentage if source.custom_tax_percentage is not None else ZERO
    return default_tax_percentage


def tax_on_gross(gross_value: Decimal, tax_percentage: Decimal) -> Decimal:
    """Forward tax: a percentage of the gross value, independent of the card fee."""
    return percentage_of(gross_value, tax_percentage)


def total_procedure_cost(procedures: Sequence[Procedure]) -> Decimal:
    return sum((p.fixed_cost for p in procedures), ZERO)


def compute_bonus(
    gross_value: Decimal,
    net_value: Decimal,
    procedures: Sequence[Procedure],
    professional: Professional,
    bonus_rules: Sequence[BonusRule],
    default_bonus_percentage: Decimal,
) -> tuple[Decimal, tuple[str, ...]]:
    """
    Third-party bonus for an appointment.

    With bonus rules, every procedure is evaluated and the contributions are
    summed (net value doubles as the after-costs base). Without any rules,
    the legacy fallback applies.
    """
    if not bonus_rules:
        return LegacyFallbackRules.bonus(procedures, professional, net_value, default_bonus_percentage), ()

    total_bonus = ZERO
    applied_ids: list[str] = []
    for procedure in procedures:
        computation = BonusRuleEngine.calculate_bonus(
            gross_value,
            net_value,
            net_value,
            procedure.id,
            professional.id,
            bonus_rules,
        )
        total_bonus += computation.total_bonus
        applied_ids.extend(rule.id for rule in computation.applied_rules)
    return total_bonus, tuple(applied_ids)


def compute_split(
    net_value: Decimal,
    procedures: Sequence[Procedure],
    professional: Professional,
    split_rules: Sequence[SplitRule],
    owner_professional_id: Optional[str],
) -> SplitOutcome:
    """
    Divide the net value between the owner and the professional.

    - rules and owner id: best rule across all procedures, or 100% owner if none match
    - no rules at all: legacy fallback
    - rules but no owner id: 100% owner
    """
    if not split_rules:
        return LegacyFallbackRules.split(procedures, professional, net_value, owner_professional_id)

    if not owner_professional_id:
        logger.warning("Split rules are configured but no owner professional id was given; using 100% owner")
        return SplitRuleEngine.default_outcome(net_value, owner_professional_id)

    rule = SplitRuleEngine.find_best_rule_for_procedures(
        (p.id for p in procedures), professional.id, split_rules
    )
    if rule is None:
        return SplitRuleEngine.default_outcome(net_value, owner_professional_id)
    return SplitRuleEngine.apply_distribution(net_value, rule, owner_professional_id)


def calculate_appointment_multi_procedure(calculation_input: MultiProcedureCalculationInput) -> CalculationResult:
    """
    Calculate the breakdown of an appointment with one or more procedures.

    The first procedure is the primary one; its cost is reported separately
    as procedure_cost for single-procedure displays.
    """
    gross_value = calculation_input.gross_value
    procedures = calculation_input.procedures
    professional = calculation_input.professional

    # Step 1: Card fee
    card_fee_percentage = find_card_fee_percentage(
        calculation_input.payment_method_id,
        gross_value,
        calculation_input.card_fee_rules,
    )
    card_fee_value = percentage_of(gross_value, card_fee_percentage)
    value_after_card_fee = gross_value - card_fee_value

    # Step 2: Tax on the gross value
    tax_percentage = resolve_tax_percentage(calculation_input.source, calculation_input.default_tax_percentage)
    tax_value = tax_on_gross(gross_value, tax_percentage)
    value_after_tax = value_after_card_fee - tax_value

    # Step 3: Procedure costs
    primary = calculation_input.primary_procedure
    procedure_cost = primary.fixed_cost if primary is not None else ZERO
    procedures_cost = total_procedure_cost(procedures)
    net_value = value_after_tax - procedures_cost

    # Step 4: Bonus
    bonus_value, applied_bonus_rule_ids = compute_bonus(
        gross_value,
        net_value,
        procedures,
        professional,
        calculation_input.bonus_rules,
        calculation_input.default_bonus_percentage,
    )

    # Step 5: Split
    split = compute_split(
        net_value,
        procedures,
        professional,
        calculation_input.split_rules,
        calculation_input.owner_professional_id,
    )

    return CalculationResult(
        gross_value=gross_value,
        card_fee_percentage=card_fee_percentage,
        card_fee_value=card_fee_value,
        value_after_card_fee=value_after_card_fee,
        tax_percentage=tax_percentage,
        tax_value=tax_value,
        value_after_tax=value_after_tax,
        procedure_cost=procedure_cost,
        total_procedure_cost=procedures_cost,
        net_value=net_value,
        bonus_value=bonus_value,
        professional_share=split.professional_percentage,
        owner_final_value=split.owner_share,
        professional_final_value=split.professional_share,
        allocations=split.allocations,
        split_path=split.path,
        applied_split_rule_id=split.rule_id,
        applied_bonus_rule_ids=applied_bonus_rule_ids,
    )


def calculate_appointment(calculation_input: CalculationInput) -> CalculationResult:
    """Calculate the breakdown of a single-procedure appointment."""
    return calculate_appointment_multi_procedure(calculation_input.to_multi_procedure())
