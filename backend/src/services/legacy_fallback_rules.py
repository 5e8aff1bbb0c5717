"""
Legacy name-keyed business rules.

Before bonus and split rules were stored as rows, the clinic's arrangements
were keyed off names: Endolaser procedures paid a third-party bonus, and one
partner professional either split Endolaser 50/50 with the owner or kept 100%
of everything else. These rules are selected ONLY when the caller supplies an
empty rule list for the concern in question. Do not extend them; migrate the
data to bonus_rules / split_rules instead.
"""

import logging
import unicodedata
from decimal import Decimal
from typing import Optional, Sequence

from core.constants import (
    HUNDRED,
    LEGACY_ENDOLASER_KEYWORD,
    LEGACY_PARTNER_ENDOLASER_SHARE,
    LEGACY_PARTNER_KEYWORD,
)
from shared_types import Procedure, Professional, SplitAllocation, SplitOutcome, SplitPath
from utils.money import ZERO, percentage_of

logger = logging.getLogger(__name__)


def normalize_name(name: Optional[str]) -> str:
    """Lowercase and strip diacritics ("Valquíria" -> "valquiria")."""
    decomposed = unicodedata.normalize("NFD", name or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


class LegacyFallbackRules:
    """Name-keyed fallback used when no bonus or split rule rows are supplied."""

    @staticmethod
    def is_endolaser(procedure: Procedure) -> bool:
        return LEGACY_ENDOLASER_KEYWORD in normalize_name(procedure.name)

    @staticmethod
    def is_partner(professional: Professional) -> bool:
        return LEGACY_PARTNER_KEYWORD in normalize_name(professional.name)

    @staticmethod
    def bonus(
        procedures: Sequence[Procedure],
        professional: Professional,
        net_value: Decimal,
        default_bonus_percentage: Decimal,
    ) -> Decimal:
        """
        Legacy third-party bonus.

        Paid when any procedure is Endolaser, the professional is not the
        partner, and at least one procedure is flagged for the bonus. The
        percentage is the sum over flagged procedures of their own percentage
        (or the default when unset or zero).
        """
        if not any(LegacyFallbackRules.is_endolaser(p) for p in procedures):
            return ZERO
        if LegacyFallbackRules.is_partner(professional):
            return ZERO

        flagged = [p for p in procedures if p.has_vanessa_bonus]
        if not flagged:
            return ZERO

        percentage = sum(
            (p.vanessa_bonus_percentage or default_bonus_percentage for p in flagged),
            ZERO,
        )
        return percentage_of(net_value, percentage)

    @staticmethod
    def split(
        procedures: Sequence[Procedure],
        professional: Professional,
        net_value: Decimal,
        owner_professional_id: Optional[str],
    ) -> SplitOutcome:
        """
        Legacy owner/professional split.

        - Endolaser + partner: 50/50
        - partner on anything else: 100% professional
        - everyone else: 100% owner
        """
        if not LegacyFallbackRules.is_partner(professional):
            return SplitOutcome(
                owner_share=net_value,
                professional_share=ZERO,
                professional_percentage=ZERO,
                allocations=(
                    SplitAllocation(owner_professional_id, HUNDRED, net_value, is_owner=True),
                ),
                path=SplitPath.LEGACY,
            )

        if any(LegacyFallbackRules.is_endolaser(p) for p in procedures):
            professional_percentage = LEGACY_PARTNER_ENDOLASER_SHARE
        else:
            professional_percentage = HUNDRED

        professional_share = percentage_of(net_value, professional_percentage)
        owner_share = net_value - professional_share
        return SplitOutcome(
            owner_share=owner_share,
            professional_share=professional_share,
            professional_percentage=professional_percentage,
            allocations=(
                SplitAllocation(owner_professional_id, HUNDRED - professional_percentage, owner_share, is_owner=True),
                SplitAllocation(professional.id, professional_percentage, professional_share, is_owner=False),
            ),
            path=SplitPath.LEGACY,
        )
