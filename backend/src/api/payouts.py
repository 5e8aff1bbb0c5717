# pyright: reportMissingTypeStubs=false
"""
Payout summary API endpoints.
"""

import logging
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.database import get_db
from services.errors import OwnerNotConfiguredError, ReferenceDataError
from services.payout_service import PayoutService
from utils.datetime_utils import parse_date_string

logger = logging.getLogger(__name__)

router = APIRouter()


class ExpenseDetailResponse(BaseModel):
    name: str
    amount: Decimal
    expense_id: str


class ProfessionalPayoutResponse(BaseModel):
    """What one professional is owed for the period."""
    professional_id: str
    name: str
    is_owner: bool
    earnings: Decimal
    appointment_count: int
    expenses_total: Decimal
    expense_details: List[ExpenseDetailResponse]
    net_after_expenses: Decimal


class PayoutSummaryResponse(BaseModel):
    start_date: str
    end_date: str
    payouts: List[ProfessionalPayoutResponse]
    total_bonus: Decimal
    bonus_appointment_count: int


@router.get("", summary="Summarize payouts for a period")
async def get_payout_summary(
    start_date: str = Query(..., description="First day, YYYY-MM-DD"),
    end_date: str = Query(..., description="Last day, YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> PayoutSummaryResponse:
    """Owner and professional payouts, net of expenses, plus the bonus total."""
    try:
        start = parse_date_string(start_date)
        end = parse_date_string(end_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date is before start_date")

    try:
        summary = PayoutService.summarize(db, start, end)
    except OwnerNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ReferenceDataError as e:
        logger.exception(f"Failed to load reference data for payouts: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load reference data",
        )

    return PayoutSummaryResponse(
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        payouts=[
            ProfessionalPayoutResponse(
                professional_id=payout.professional_id,
                name=payout.name,
                is_owner=payout.is_owner,
                earnings=payout.earnings,
                appointment_count=len(payout.appointment_ids),
                expenses_total=payout.expenses.total,
                expense_details=[
                    ExpenseDetailResponse(name=d.name, amount=d.amount, expense_id=d.expense_id)
                    for d in payout.expenses.details
                ],
                net_after_expenses=payout.net_after_expenses,
            )
            for payout in summary.payouts
        ],
        total_bonus=summary.total_bonus,
        bonus_appointment_count=len(summary.bonus_appointment_ids),
    )
