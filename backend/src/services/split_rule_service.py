"""
Split rules: how the net value is divided between the owner and the
professionals who performed the work.

Unlike bonus rules, only one split rule applies per calculation. Selection
order is a total order: higher specificity, then higher priority, then the
lexicographically smaller rule id.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from core.constants import HUNDRED, PERCENTAGE_SUM_TOLERANCE
from shared_types import SplitAllocation, SplitOutcome, SplitPath, SplitRule
from services.rule_matching import rule_matches, rule_specificity
from utils.money import ZERO, percentage_of

logger = logging.getLogger(__name__)


def _selection_key(rule: SplitRule) -> Tuple[int, int, str]:
    # Lower sorts first
    return (-rule_specificity(rule), -int(rule.priority or 0), rule.id)


class SplitRuleEngine:
    """Selects the applicable split rule and distributes a net value with it."""

    @staticmethod
    def find_applicable_rule(
        procedure_id: Optional[str],
        professional_id: Optional[str],
        split_rules: Sequence[SplitRule],
    ) -> Optional[SplitRule]:
        """Return the best active rule matching the pair, or None."""
        matching = [rule for rule in split_rules if rule_matches(rule, procedure_id, professional_id)]
        if not matching:
            return None
        return min(matching, key=_selection_key)

    @staticmethod
    def find_best_rule_for_procedures(
        procedure_ids: Iterable[Optional[str]],
        professional_id: Optional[str],
        split_rules: Sequence[SplitRule],
    ) -> Optional[SplitRule]:
        """
        Evaluate every procedure of an appointment and keep the single best rule.

        A multi-procedure appointment still gets exactly one split rule: the
        most specific (then highest priority) rule found for any of its
        procedures.
        """
        ids: List[Optional[str]] = list(procedure_ids) or [None]
        best: Optional[SplitRule] = None
        for procedure_id in ids:
            rule = SplitRuleEngine.find_applicable_rule(procedure_id, professional_id, split_rules)
            if rule is None:
                continue
            if best is None or _selection_key(rule) < _selection_key(best):
                best = rule
        return best

    @staticmethod
    def validate_distributions(rule: SplitRule) -> Optional[str]:
        """
        Return a description of what is wrong with the rule, or None if it is valid.

        Valid means a non-empty distribution list, every percentage within
        [0, 100], and a total within 0.01 of 100.
        """
        if not rule.distributions:
            return "empty distribution list"
        total = ZERO
        for distribution in rule.distributions:
            if distribution.percentage < ZERO or distribution.percentage > HUNDRED:
                return f"percentage {distribution.percentage} outside 0-100"
            total += distribution.percentage
        if abs(total - HUNDRED) > PERCENTAGE_SUM_TOLERANCE:
            return f"percentages sum to {total}"
        return None

    @staticmethod
    def default_outcome(net_value: Decimal, owner_professional_id: Optional[str]) -> SplitOutcome:
        """100% of the net value to the owner."""
        return SplitOutcome(
            owner_share=net_value,
            professional_share=ZERO,
            professional_percentage=ZERO,
            allocations=(
                SplitAllocation(
                    professional_id=owner_professional_id,
                    percentage=HUNDRED,
                    amount=net_value,
                    is_owner=True,
                ),
            ),
            path=SplitPath.DEFAULT,
        )

    @staticmethod
    def apply_distribution(
        net_value: Decimal,
        rule: SplitRule,
        owner_professional_id: str,
    ) -> SplitOutcome:
        """
        Distribute net_value according to the rule.

        Entries for the owner accumulate into the owner share; every other
        entry accumulates into the single professional bucket, and its
        percentage into the reported professional percentage. The last entry
        receives the remainder so that the shares always add up to net_value.

        An invalid rule never raises: it is logged and the 100% owner default
        is returned.
        """
        problem = SplitRuleEngine.validate_distributions(rule)
        if problem is not None:
            logger.warning(
                f"Split rule {rule.id} ({rule.name or 'unnamed'}) is invalid ({problem}); "
                f"falling back to 100% owner"
            )
            return SplitRuleEngine.default_outcome(net_value, owner_professional_id)

        allocations: List[SplitAllocation] = []
        allocated = ZERO
        last_index = len(rule.distributions) - 1
        for idx, distribution in enumerate(rule.distributions):
            if idx == last_index:
                amount = net_value - allocated
            else:
                amount = percentage_of(net_value, distribution.percentage)
                allocated += amount
            allocations.append(
                SplitAllocation(
                    professional_id=distribution.professional_id,
                    percentage=distribution.percentage,
                    amount=amount,
                    is_owner=distribution.professional_id == owner_professional_id,
                )
            )

        owner_share = sum((a.amount for a in allocations if a.is_owner), ZERO)
        professional_share = sum((a.amount for a in allocations if not a.is_owner), ZERO)
        professional_percentage = sum((a.percentage for a in allocations if not a.is_owner), ZERO)

        non_owner_ids = {a.professional_id for a in allocations if not a.is_owner}
        if len(non_owner_ids) > 1:
            logger.info(
                f"Split rule {rule.id} pays {len(non_owner_ids)} non-owner professionals; "
                f"their shares are reported as one professional bucket"
            )

        return SplitOutcome(
            owner_share=owner_share,
            professional_share=professional_share,
            professional_percentage=professional_percentage,
            allocations=tuple(allocations),
            path=SplitPath.CONFIGURED,
            rule_id=rule.id,
        )
