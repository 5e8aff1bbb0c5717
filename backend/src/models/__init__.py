# Package initialization
# Import all models to ensure relationships are properly established
from .professional import Professional
from .procedure import Procedure
from .payment_method import PaymentMethod
from .card_fee import CardFeeRule, CardFeeTier, CardFeeTierRate
from .bonus_rule import BonusRule
from .split_rule import SplitRule
from .system_setting import SystemSetting
from .appointment import Appointment, AppointmentProcedure
from .expense import Expense

__all__ = [
    "Professional",
    "Procedure",
    "PaymentMethod",
    "CardFeeRule",
    "CardFeeTier",
    "CardFeeTierRate",
    "BonusRule",
    "SplitRule",
    "SystemSetting",
    "Appointment",
    "AppointmentProcedure",
    "Expense",
]
