"""
Payout summary for a period.

The owner is paid the owner share of every appointment, whoever performed it.
Every other professional is paid the professional share of the appointments
they performed. Each total is then reduced by that professional's expenses.
The third-party bonus is paid separately and reported on its own.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import Appointment, Expense as ExpenseRow
from shared_types import (
    AppointmentFinancials,
    Expense,
    PayoutSummary,
    Professional,
    ProfessionalPayout,
)
from services.expense_service import calculate_professional_expenses, expense_from_row
from services.reference_data_service import ReferenceDataService
from utils.money import ZERO, to_decimal

logger = logging.getLogger(__name__)


def appointment_financials_from_row(row: Appointment) -> AppointmentFinancials:
    return AppointmentFinancials(
        id=row.id,
        professional_id=row.professional_id,
        final_value_owner=to_decimal(row.final_value_owner),
        final_value_professional=to_decimal(row.final_value_professional),
        bonus_value=to_decimal(row.bonus_value),
        date=row.date,
    )


def summarize_payouts(
    appointments: Sequence[AppointmentFinancials],
    professionals: Sequence[Professional],
    owner_professional_id: Optional[str],
    expenses: Sequence[Expense],
    start_date: date,
    end_date: date,
) -> PayoutSummary:
    """
    Build the payout of every professional for [start_date, end_date].

    Args:
        appointments: Appointments already filtered to the period
        professionals: Professionals to report on
        owner_professional_id: The owner; None means nobody receives owner shares
        expenses: Expenses to allocate
        start_date: First day of the period
        end_date: Last day of the period
    """
    payouts: List[ProfessionalPayout] = []

    for professional in professionals:
        is_owner = professional.id == owner_professional_id
        if is_owner:
            paid = [a for a in appointments if a.final_value_owner > ZERO]
            earnings = sum((a.final_value_owner for a in paid), ZERO)
        else:
            paid = [
                a for a in appointments
                if a.professional_id == professional.id and a.final_value_professional > ZERO
            ]
            earnings = sum((a.final_value_professional for a in paid), ZERO)

        payouts.append(
            ProfessionalPayout(
                professional_id=professional.id,
                name=professional.name,
                is_owner=is_owner,
                earnings=earnings,
                appointment_ids=[a.id for a in paid],
                expenses=calculate_professional_expenses(professional.id, expenses, start_date, end_date),
            )
        )

    bonus_appointments = [a for a in appointments if a.bonus_value > ZERO]
    return PayoutSummary(
        payouts=payouts,
        total_bonus=sum((a.bonus_value for a in appointments), ZERO),
        bonus_appointment_ids=[a.id for a in bonus_appointments],
    )


class PayoutService:
    """Loads a period's appointments and summarizes payouts."""

    @staticmethod
    def get_period_appointments(db: Session, start_date: date, end_date: date) -> List[AppointmentFinancials]:
        rows = db.scalars(
            select(Appointment)
            .where(Appointment.date >= start_date, Appointment.date <= end_date)
            .order_by(Appointment.date, Appointment.id)
        ).all()
        return [appointment_financials_from_row(row) for row in rows]

    @staticmethod
    def summarize(db: Session, start_date: date, end_date: date) -> PayoutSummary:
        """
        Summarize payouts for a period straight from the database.

        Raises:
            ReferenceDataError: If reference data cannot be loaded
            OwnerNotConfiguredError: If owner_professional_id is not set
        """
        reference = ReferenceDataService.load(db, end_date)
        owner_professional_id = reference.require_owner_professional_id()
        expenses = [expense_from_row(row) for row in db.scalars(select(ExpenseRow)).all()]
        return summarize_payouts(
            PayoutService.get_period_appointments(db, start_date, end_date),
            list(reference.professionals.values()),
            owner_professional_id,
            expenses,
            start_date,
            end_date,
        )
