"""
Expense allocation.

Expenses (rent, equipment, software, ...) are shared among professionals by
responsibility percentages and deducted from their payouts. Recurring
expenses are expanded into dated occurrences within the payout period.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from models import Expense as ExpenseRow
from shared_types import (
    Expense,
    ExpenseDetail,
    ExpenseResponsibility,
    ProfessionalExpenses,
    RecurrenceType,
    RecurrenceUnit,
)
from utils.datetime_utils import add_months, start_of_month
from utils.money import ZERO, percentage_of, to_decimal

logger = logging.getLogger(__name__)


def expense_from_row(row: ExpenseRow) -> Expense:
    """Convert a stored expense into its snapshot. Unknown recurrence values fall back to 'once'."""
    try:
        recurrence_type = RecurrenceType(row.recurrence_type or RecurrenceType.ONCE.value)
    except ValueError:
        logger.warning(f"Expense {row.id} has unknown recurrence type {row.recurrence_type!r}; treating as once")
        recurrence_type = RecurrenceType.ONCE

    recurrence_unit: Optional[RecurrenceUnit] = None
    if row.recurrence_unit:
        try:
            recurrence_unit = RecurrenceUnit(row.recurrence_unit)
        except ValueError:
            logger.warning(f"Expense {row.id} has unknown recurrence unit {row.recurrence_unit!r}; using months")
            recurrence_unit = RecurrenceUnit.MONTHS

    responsibility = tuple(
        ExpenseResponsibility(
            professional_id=str(entry.get("professional_id") or ""),
            percentage=to_decimal(entry.get("percentage")),
        )
        for entry in (row.responsibility or [])
    )
    return Expense(
        id=row.id,
        name=row.name,
        amount=to_decimal(row.amount),
        recurrence_type=recurrence_type,
        start_date=row.start_date,
        end_date=row.end_date,
        recurrence_interval=row.recurrence_interval,
        recurrence_unit=recurrence_unit,
        responsibility=responsibility,
        is_active=bool(row.is_active),
        category=row.category,
    )


def _advance(current: date, interval: int, unit: Optional[RecurrenceUnit]) -> date:
    if unit == RecurrenceUnit.DAYS:
        return current + timedelta(days=interval)
    if unit == RecurrenceUnit.WEEKS:
        return current + timedelta(weeks=interval)
    return add_months(current, interval)


def generate_expense_occurrences(expense: Expense, period_start: date, period_end: date) -> List[date]:
    """
    List the dates an expense falls due within [period_start, period_end].

    - once: the start date, if it lies in the period
    - monthly: the first of every month from the start month on
    - custom: every recurrence_interval days/weeks/months from the start date
      (months when the unit is missing); no occurrences without an interval

    Occurrences after the expense's end date are excluded.
    """
    occurrences: List[date] = []
    expense_start = expense.start_date
    expense_end = expense.end_date

    if expense_end is not None and expense_end < period_start:
        return occurrences
    if expense_start > period_end:
        return occurrences

    if expense.recurrence_type == RecurrenceType.ONCE:
        if period_start <= expense_start <= period_end:
            occurrences.append(expense_start)

    elif expense.recurrence_type == RecurrenceType.MONTHLY:
        current = start_of_month(expense_start)
        while current <= period_end:
            if current >= period_start and (expense_end is None or current <= expense_end):
                occurrences.append(current)
            current = add_months(current, 1)

    elif expense.recurrence_type == RecurrenceType.CUSTOM and expense.recurrence_interval:
        current = expense_start
        while current <= period_end:
            if current >= period_start and (expense_end is None or current <= expense_end):
                occurrences.append(current)
            current = _advance(current, expense.recurrence_interval, expense.recurrence_unit)

    return occurrences


def _format_percentage(percentage: Decimal) -> str:
    # 50.00 -> "50", 33.5 -> "33.5"
    return format(percentage.normalize(), "f")


def calculate_professional_expenses(
    professional_id: str,
    expenses: Iterable[Expense],
    start_date: date,
    end_date: date,
) -> ProfessionalExpenses:
    """
    Total of a professional's share of every active expense in the period.

    Each detail line is amount x share x number of occurrences; the name
    carries the share when it is below 100%.
    """
    result = ProfessionalExpenses(total=ZERO, details=[])

    for expense in expenses:
        if not expense.is_active:
            continue

        responsibility = next(
            (r for r in expense.responsibility if r.professional_id == professional_id),
            None,
        )
        if responsibility is None:
            continue

        occurrences = generate_expense_occurrences(expense, start_date, end_date)
        if not occurrences:
            continue

        per_occurrence = percentage_of(expense.amount, responsibility.percentage)
        expense_total = per_occurrence * len(occurrences)

        name = expense.name
        if responsibility.percentage < Decimal("100"):
            name = f"{expense.name} ({_format_percentage(responsibility.percentage)}%)"

        result.total += expense_total
        result.details.append(ExpenseDetail(name=name, amount=expense_total, expense_id=expense.id))

    return result


def calculate_all_professionals_expenses(
    professional_ids: Sequence[str],
    expenses: Sequence[Expense],
    start_date: date,
    end_date: date,
) -> Dict[str, ProfessionalExpenses]:
    return {
        professional_id: calculate_professional_expenses(professional_id, expenses, start_date, end_date)
        for professional_id in professional_ids
    }
