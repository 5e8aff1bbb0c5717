"""
Third-party bonus rules.

Bonus rules are additive: every active rule whose filters match the
procedure/professional pair fires, and the amounts are summed. The bonus is
paid on top of the owner/professional split and never reduces it.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Sequence

from shared_types import BonusBaseValue, BonusComputation, BonusRule
from services.rule_matching import rule_matches, rule_specificity
from utils.money import ZERO, percentage_of

logger = logging.getLogger(__name__)


class BonusRuleEngine:
    """Matches bonus rules and computes the total third-party bonus."""

    @staticmethod
    def find_applicable_rules(
        procedure_id: Optional[str],
        professional_id: Optional[str],
        bonus_rules: Sequence[BonusRule],
    ) -> List[BonusRule]:
        """
        Return the active rules matching the pair, most specific first.

        Ordering is informational only; every returned rule applies.
        """
        if not bonus_rules:
            return []
        matching = [rule for rule in bonus_rules if rule_matches(rule, procedure_id, professional_id)]
        # sort() is stable, so equally specific rules keep their input order
        matching.sort(key=rule_specificity, reverse=True)
        return matching

    @staticmethod
    def base_amount(
        rule: BonusRule,
        gross_value: Decimal,
        net_value: Decimal,
        value_after_costs: Decimal,
    ) -> Decimal:
        """Select the amount the rule's percentage applies to."""
        if rule.base_value == BonusBaseValue.GROSS_VALUE:
            return gross_value
        if rule.base_value == BonusBaseValue.FINAL_AFTER_COSTS:
            return value_after_costs
        return net_value

    @staticmethod
    def calculate_bonus(
        gross_value: Decimal,
        net_value: Decimal,
        value_after_costs: Decimal,
        procedure_id: Optional[str],
        professional_id: Optional[str],
        bonus_rules: Sequence[BonusRule],
    ) -> BonusComputation:
        """
        Sum the bonus of every matching rule.

        Args:
            gross_value: Amount charged to the payer
            net_value: Value after card fee, tax and procedure costs
            value_after_costs: Value after costs (same as net_value in the forward pipeline)
            procedure_id: Procedure being billed
            professional_id: Professional who performed it
            bonus_rules: Active bonus rules

        Returns:
            BonusComputation with the total and the rules that fired
        """
        applicable = BonusRuleEngine.find_applicable_rules(procedure_id, professional_id, bonus_rules)

        total_bonus = ZERO
        for rule in applicable:
            base = BonusRuleEngine.base_amount(rule, gross_value, net_value, value_after_costs)
            total_bonus += percentage_of(base, rule.percentage)

        if applicable:
            logger.debug(
                f"Bonus rules {[rule.id for rule in applicable]} fired for "
                f"procedure={procedure_id} professional={professional_id}: {total_bonus}"
            )
        return BonusComputation(total_bonus=total_bonus, applied_rules=tuple(applicable))
