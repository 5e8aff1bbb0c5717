"""
Matching helpers shared by bonus and split rules.

Both rule kinds filter on an optional procedure id and an optional
professional id. A missing filter matches anything; the more filters a rule
sets, the more specific it is.
"""

from typing import Optional, Protocol


class FilteredRule(Protocol):
    procedure_id: Optional[str]
    professional_id: Optional[str]
    is_active: bool


PROCEDURE_FILTER_WEIGHT = 2
PROFESSIONAL_FILTER_WEIGHT = 1


def rule_specificity(rule: FilteredRule) -> int:
    """Score = 2 if procedure-filtered + 1 if professional-filtered (0..3)."""
    score = 0
    if rule.procedure_id:
        score += PROCEDURE_FILTER_WEIGHT
    if rule.professional_id:
        score += PROFESSIONAL_FILTER_WEIGHT
    return score


def rule_matches(rule: FilteredRule, procedure_id: Optional[str], professional_id: Optional[str]) -> bool:
    """True when the rule is active and both of its filters accept the pair."""
    if not rule.is_active:
        return False
    procedure_matches = not rule.procedure_id or rule.procedure_id == procedure_id
    professional_matches = not rule.professional_id or rule.professional_id == professional_id
    return procedure_matches and professional_matches
