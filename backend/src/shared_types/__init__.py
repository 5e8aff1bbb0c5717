"""
Shared type definitions for the clinic finance backend.

This module contains dataclasses and types that are used across multiple services.
"""

from shared_types.calculation import (
    BonusBaseValue,
    BonusComputation,
    BonusRule,
    CalculationInput,
    CalculationResult,
    CardFeeRule,
    CardFeeTier,
    CardFeeTierRate,
    MultiProcedureCalculationInput,
    PaymentMethod,
    Procedure,
    Professional,
    Source,
    SplitAllocation,
    SplitDistribution,
    SplitOutcome,
    SplitPath,
    SplitRule,
)
from shared_types.expenses import (
    AppointmentFinancials,
    Expense,
    ExpenseDetail,
    ExpenseResponsibility,
    PayoutSummary,
    ProfessionalExpenses,
    ProfessionalPayout,
    RecurrenceType,
    RecurrenceUnit,
)

__all__ = [
    "AppointmentFinancials",
    "BonusBaseValue",
    "BonusComputation",
    "BonusRule",
    "CalculationInput",
    "CalculationResult",
    "CardFeeRule",
    "CardFeeTier",
    "CardFeeTierRate",
    "MultiProcedureCalculationInput",
    "PaymentMethod",
    "Procedure",
    "Professional",
    "Source",
    "SplitAllocation",
    "SplitDistribution",
    "SplitOutcome",
    "SplitPath",
    "SplitRule",
    "Expense",
    "ExpenseDetail",
    "ExpenseResponsibility",
    "PayoutSummary",
    "ProfessionalExpenses",
    "ProfessionalPayout",
    "RecurrenceType",
    "RecurrenceUnit",
]
