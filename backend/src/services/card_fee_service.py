"""
Card fee resolution.

The engine only ever sees a flat list of card fee rules. The tiered-revenue
indirection (the clinic's fee tier depends on last month's revenue) is
resolved here, before the rules reach the calculator.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from shared_types import CardFeeRule, CardFeeTier, CardFeeTierRate
from utils.money import ZERO

logger = logging.getLogger(__name__)


def find_card_fee_percentage(
    payment_method_id: str,
    value: Decimal,
    card_fee_rules: Sequence[CardFeeRule],
) -> Decimal:
    """
    Find the fee percentage for a payment method and transaction value.

    The first rule for the payment method whose [min_value, max_value] range
    contains the value wins (both bounds inclusive, max_value None means
    unbounded). No match returns 0; an unmatched payment method is not an error.

    Args:
        payment_method_id: Payment method used for the transaction
        value: Gross transaction value
        card_fee_rules: Flat rules applicable now

    Returns:
        Fee percentage (e.g. Decimal("3.5") for 3.5%)
    """
    for rule in card_fee_rules:
        if rule.payment_method_id != payment_method_id:
            continue
        min_ok = value >= rule.min_value
        max_ok = rule.max_value is None or value <= rule.max_value
        if min_ok and max_ok:
            return rule.fee_percentage
    return ZERO


def select_current_fee_tier(
    tiers: Iterable[CardFeeTier],
    previous_month_revenue: Decimal,
) -> Optional[CardFeeTier]:
    """
    Pick the active tier whose revenue range contains last month's revenue.

    Overlapping tiers are resolved by higher priority, then higher
    min_revenue, then id, so the choice never depends on row order.
    """
    candidates = [tier for tier in tiers if tier.is_active and tier.contains(previous_month_revenue)]
    if not candidates:
        return None
    candidates.sort(key=lambda t: (-t.priority, -t.min_revenue, t.id))
    return candidates[0]


def card_fee_rules_from_tier_rates(
    tier: CardFeeTier,
    tier_rates: Iterable[CardFeeTierRate],
) -> List[CardFeeRule]:
    """Flatten a tier's rates into card fee rules covering every value."""
    return [
        CardFeeRule(
            id=rate.id,
            payment_method_id=rate.payment_method_id,
            min_value=ZERO,
            max_value=None,
            fee_percentage=rate.fee_percentage,
        )
        for rate in tier_rates
        if rate.tier_id == tier.id
    ]


def resolve_card_fee_rules(
    current_tier: Optional[CardFeeTier],
    tier_rates: Sequence[CardFeeTierRate],
    legacy_rules: Sequence[CardFeeRule],
) -> List[CardFeeRule]:
    """
    Return the card fee rules applicable now.

    Tier rates win when a current tier exists and has rates; otherwise the
    legacy per-value rules are used.
    """
    if current_tier is not None:
        rules = card_fee_rules_from_tier_rates(current_tier, tier_rates)
        if rules:
            logger.debug(f"Using {len(rules)} card fee rates from tier {current_tier.name or current_tier.id}")
            return rules
        logger.info(f"Fee tier {current_tier.name or current_tier.id} has no rates, using legacy card fee rules")
    return list(legacy_rules)
