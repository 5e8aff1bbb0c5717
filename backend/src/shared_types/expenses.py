"""
Shared types for expense allocation and payout summaries.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple


class RecurrenceType(str, Enum):
    ONCE = "once"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class RecurrenceUnit(str, Enum):
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


@dataclass(frozen=True)
class ExpenseResponsibility:
    professional_id: str
    percentage: Decimal


@dataclass(frozen=True)
class Expense:
    """A cost shared among the professionals responsible for it."""
    id: str
    name: str
    amount: Decimal
    recurrence_type: RecurrenceType
    start_date: date
    end_date: Optional[date] = None
    recurrence_interval: Optional[int] = None  # custom only
    recurrence_unit: Optional[RecurrenceUnit] = None  # custom only
    responsibility: Tuple[ExpenseResponsibility, ...] = ()
    is_active: bool = True
    category: Optional[str] = None


@dataclass(frozen=True)
class ExpenseDetail:
    name: str
    amount: Decimal
    expense_id: str


@dataclass
class ProfessionalExpenses:
    total: Decimal = Decimal("0")
    details: List[ExpenseDetail] = field(default_factory=list)


@dataclass(frozen=True)
class AppointmentFinancials:
    """The stored columns of an appointment that payouts are built from."""
    id: str
    professional_id: Optional[str]
    final_value_owner: Decimal
    final_value_professional: Decimal
    bonus_value: Decimal
    date: Optional[date] = None


@dataclass
class ProfessionalPayout:
    """What one professional is owed for a period."""
    professional_id: str
    name: str
    is_owner: bool
    earnings: Decimal
    appointment_ids: List[str]
    expenses: ProfessionalExpenses

    @property
    def net_after_expenses(self) -> Decimal:
        return self.earnings - self.expenses.total


@dataclass
class PayoutSummary:
    payouts: List[ProfessionalPayout]
    total_bonus: Decimal
    bonus_appointment_ids: List[str]
