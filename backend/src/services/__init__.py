"""
Services package for shared business logic.

This package contains the calculation engine (card fees, bonus and split
rules, forward calculation, manual net reconciliation) and the services that
feed it from the database.
"""

from .appointment_recalculation_service import AppointmentRecalculationService
from .bonus_rule_service import BonusRuleEngine
from .legacy_fallback_rules import LegacyFallbackRules
from .payout_service import PayoutService
from .reference_data_service import ReferenceDataService
from .settings_service import SettingsService
from .split_rule_service import SplitRuleEngine

__all__ = [
    "AppointmentRecalculationService",
    "BonusRuleEngine",
    "LegacyFallbackRules",
    "PayoutService",
    "ReferenceDataService",
    "SettingsService",
    "SplitRuleEngine",
]
