# pyright: reportMissingTypeStubs=false
"""
Calculation preview API endpoints.

Lets the appointment form show the full financial breakdown before saving,
using the same engine and reference data as the batch recalculation job.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from core.database import get_db
from shared_types import CalculationResult
from services.errors import MissingReferenceError, OwnerNotConfiguredError, ReferenceDataError
from services.manual_net_service import calculate_with_manual_net
from services.reference_data_service import ReferenceDataService

logger = logging.getLogger(__name__)

router = APIRouter()


class CalculationPreviewRequest(BaseModel):
    """Request model for previewing an appointment's breakdown."""
    gross_value: Decimal = Field(..., ge=0, description="Amount charged to the patient")
    payment_method_id: str
    professional_id: str
    procedure_ids: List[str] = Field(..., min_length=1, description="Procedures in order; the first is the primary one")
    is_hospital: bool = False
    net_value_input: Optional[Decimal] = Field(None, description="Manually asserted net value (hospital invoice)")


class SplitAllocationResponse(BaseModel):
    professional_id: Optional[str]
    percentage: Decimal
    amount: Decimal
    is_owner: bool


class CalculationPreviewResponse(BaseModel):
    """Response model with every step of the calculation."""
    gross_value: Decimal
    card_fee_percentage: Decimal
    card_fee_value: Decimal
    value_after_card_fee: Decimal
    tax_percentage: Decimal
    tax_value: Decimal
    value_after_tax: Decimal
    procedure_cost: Decimal
    total_procedure_cost: Decimal
    net_value: Decimal
    bonus_value: Decimal
    professional_share: Decimal
    final_value_owner: Decimal
    final_value_professional: Decimal
    allocations: List[SplitAllocationResponse]
    allocations_by_professional: Dict[str, Decimal]
    split_path: str
    applied_split_rule_id: Optional[str] = None
    applied_bonus_rule_ids: List[str] = []
    used_manual_net: bool = False

    @classmethod
    def from_result(cls, result: CalculationResult) -> "CalculationPreviewResponse":
        by_professional: Dict[str, Decimal] = {}
        for allocation in result.allocations:
            if allocation.professional_id is None:
                continue
            by_professional[allocation.professional_id] = (
                by_professional.get(allocation.professional_id, Decimal("0")) + allocation.amount
            )

        return cls(
            gross_value=result.gross_value,
            card_fee_percentage=result.card_fee_percentage,
            card_fee_value=result.card_fee_value,
            value_after_card_fee=result.value_after_card_fee,
            tax_percentage=result.tax_percentage,
            tax_value=result.tax_value,
            value_after_tax=result.value_after_tax,
            procedure_cost=result.procedure_cost,
            total_procedure_cost=result.total_procedure_cost,
            net_value=result.net_value,
            bonus_value=result.bonus_value,
            professional_share=result.professional_share,
            final_value_owner=result.owner_final_value,
            final_value_professional=result.professional_final_value,
            allocations=[
                SplitAllocationResponse(
                    professional_id=a.professional_id,
                    percentage=a.percentage,
                    amount=a.amount,
                    is_owner=a.is_owner,
                )
                for a in result.allocations
            ],
            allocations_by_professional=by_professional,
            split_path=result.split_path.value,
            applied_split_rule_id=result.applied_split_rule_id,
            applied_bonus_rule_ids=list(result.applied_bonus_rule_ids),
            used_manual_net=result.used_manual_net,
        )


@router.post("/preview", summary="Preview an appointment's financial breakdown")
async def preview_calculation(
    request: CalculationPreviewRequest,
    db: Session = Depends(get_db),
) -> CalculationPreviewResponse:
    """
    Calculate card fee, tax, costs, net value, bonus and split for an
    appointment that has not been saved yet.

    When net_value_input differs from the computed net by more than 0.01 the
    card fee is solved backward from it instead.
    """
    try:
        reference = ReferenceDataService.load(db)
        owner_professional_id = reference.require_owner_professional_id()
        calculation_input = reference.build_input(
            gross_value=request.gross_value,
            payment_method_id=request.payment_method_id,
            professional_id=request.professional_id,
            procedure_ids=request.procedure_ids,
            is_hospital=request.is_hospital,
            owner_professional_id=owner_professional_id,
            net_value_input=request.net_value_input,
        )
    except MissingReferenceError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except OwnerNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ReferenceDataError as e:
        logger.exception(f"Failed to load reference data for preview: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load reference data",
        )

    result = calculate_with_manual_net(calculation_input)
    return CalculationPreviewResponse.from_result(result)
