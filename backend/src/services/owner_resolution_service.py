"""
Owner resolution.

The owner is the professional who receives the net value by default and who
anchors split-rule attribution. It must come from the
`owner_professional_id` system setting. The old name heuristic (the owner is
whoever is not the partner) survives only as an opt-in migration helper.
"""

import logging
from typing import Mapping, Optional, Sequence

from core.constants import SETTING_OWNER_PROFESSIONAL_ID
from shared_types import Professional
from services.legacy_fallback_rules import LegacyFallbackRules

logger = logging.getLogger(__name__)


def configured_owner_professional_id(settings: Mapping[str, str]) -> Optional[str]:
    """Return the owner id from system settings, or None if missing/empty."""
    value = (settings.get(SETTING_OWNER_PROFESSIONAL_ID) or "").strip()
    return value or None


def infer_owner_professional_id(professionals: Sequence[Professional]) -> Optional[str]:
    """
    Migration helper: guess the owner as the first professional who is not the partner.

    Assumes exactly two professionals. Only use this to populate the
    owner_professional_id setting once.
    """
    for professional in professionals:
        if not LegacyFallbackRules.is_partner(professional):
            return professional.id
    return None


def determine_owner_professional_id(
    professionals: Sequence[Professional],
    settings: Mapping[str, str],
    allow_name_heuristic: bool = False,
) -> Optional[str]:
    """
    Determine the owner professional id.

    Args:
        professionals: All known professionals
        settings: System settings (key -> value)
        allow_name_heuristic: Fall back to infer_owner_professional_id when the
            setting is missing. Off by default; meant for migrations.

    Returns:
        The owner id, or None when it cannot be determined
    """
    owner_id = configured_owner_professional_id(settings)
    if owner_id:
        return owner_id

    if not allow_name_heuristic:
        return None

    owner_id = infer_owner_professional_id(professionals)
    if owner_id:
        logger.warning(
            f"{SETTING_OWNER_PROFESSIONAL_ID} is not set; inferred owner {owner_id} from professional names. "
            f"Store the setting explicitly."
        )
    return owner_id
