"""
Manual net reconciliation.

When a human asserts the real net value of an appointment (hospital invoice,
manual override, or a legacy record stored that way), the card fee is no
longer what the rule table says. This module solves backward for the card
fee that produces the asserted net, holding tax rate and procedure costs
fixed, then re-runs bonus and split on the asserted net.

The inverse treats tax as a percentage of the post-card-fee remainder,
while the forward pipeline taxes the gross value. The two only agree when
the tax rate is zero; with a tax rate T the implied fee is the real fee
divided by (1 - T). Both formulas are kept as named functions
(calculation_service.tax_on_gross and gross_up_for_tax_on_remainder) so that
changing either is a one-line swap.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from core.constants import HUNDRED, MANUAL_NET_TOLERANCE
from shared_types import CalculationInput, CalculationResult, MultiProcedureCalculationInput
from services.calculation_service import (
    calculate_appointment_multi_procedure,
    compute_bonus,
    compute_split,
    resolve_tax_percentage,
    total_procedure_cost,
)
from utils.money import ZERO, is_significantly_different

logger = logging.getLogger(__name__)

AnyCalculationInput = Union[CalculationInput, MultiProcedureCalculationInput]


@dataclass(frozen=True)
class ManualNetInversion:
    """Card fee and tax implied by an asserted net value."""
    value_after_procedure: Decimal
    value_after_card_fee: Decimal
    implied_card_fee_value: Decimal  # Clamped to >= 0
    implied_card_fee_percentage: Decimal  # Clamped to >= 0
    tax_value: Decimal


@dataclass(frozen=True)
class ManualNetReconciliation:
    inversion: ManualNetInversion
    result: CalculationResult

    @property
    def implied_card_fee_percentage(self) -> Decimal:
        return self.inversion.implied_card_fee_percentage

    @property
    def implied_card_fee_value(self) -> Decimal:
        return self.inversion.implied_card_fee_value

    @property
    def tax_value(self) -> Decimal:
        return self.inversion.tax_value


def _as_multi(calculation_input: AnyCalculationInput) -> MultiProcedureCalculationInput:
    if isinstance(calculation_input, CalculationInput):
        return calculation_input.to_multi_procedure()
    return calculation_input


def gross_up_for_tax_on_remainder(value_after_procedure: Decimal, tax_rate: Decimal) -> Decimal:
    """
    Inverse tax step: solve value_after_card_fee * (1 - tax_rate) = value_after_procedure.

    A rate of 100% or more has no solution; the value is returned unchanged.
    """
    if tax_rate <= ZERO:
        return value_after_procedure
    if tax_rate >= Decimal("1"):
        logger.warning(f"Cannot invert a tax rate of {tax_rate * HUNDRED}%; ignoring tax in manual net reconciliation")
        return value_after_procedure
    return value_after_procedure / (Decimal("1") - tax_rate)


def invert_manual_net(
    asserted_net_value: Decimal,
    gross_value: Decimal,
    procedure_cost: Decimal,
    tax_percentage: Decimal,
) -> ManualNetInversion:
    """
    Solve for the card fee that turns gross_value into asserted_net_value.

    Args:
        asserted_net_value: Net value asserted by a human or invoice
        gross_value: Amount charged
        procedure_cost: Total fixed cost of the appointment's procedures
        tax_percentage: Tax rate already resolved for the source (0 for hospitals)
    """
    tax_rate = tax_percentage / HUNDRED
    value_after_procedure = asserted_net_value + procedure_cost
    value_after_card_fee = gross_up_for_tax_on_remainder(value_after_procedure, tax_rate)

    card_fee_value = gross_value - value_after_card_fee
    card_fee_percentage = card_fee_value / gross_value * HUNDRED if gross_value > ZERO else ZERO
    tax_value = value_after_card_fee * tax_rate if tax_rate > ZERO else ZERO

    return ManualNetInversion(
        value_after_procedure=value_after_procedure,
        value_after_card_fee=value_after_card_fee,
        implied_card_fee_value=max(ZERO, card_fee_value),
        implied_card_fee_percentage=max(ZERO, card_fee_percentage),
        tax_value=tax_value,
    )


def reconcile_manual_net(
    asserted_net_value: Decimal,
    calculation_input: AnyCalculationInput,
) -> ManualNetReconciliation:
    """
    Build a complete result around an asserted net value.

    Card fee and tax come from invert_manual_net; bonus and split are
    re-driven from the asserted net with the same rule selection as the
    forward pipeline.
    """
    multi_input = _as_multi(calculation_input)
    procedures = multi_input.procedures
    professional = multi_input.professional

    tax_percentage = resolve_tax_percentage(multi_input.source, multi_input.default_tax_percentage)
    procedures_cost = total_procedure_cost(procedures)
    inversion = invert_manual_net(
        asserted_net_value,
        multi_input.gross_value,
        procedures_cost,
        tax_percentage,
    )

    bonus_value, applied_bonus_rule_ids = compute_bonus(
        multi_input.gross_value,
        asserted_net_value,
        procedures,
        professional,
        multi_input.bonus_rules,
        multi_input.default_bonus_percentage,
    )
    split = compute_split(
        asserted_net_value,
        procedures,
        professional,
        multi_input.split_rules,
        multi_input.owner_professional_id,
    )

    primary = multi_input.primary_procedure
    result = CalculationResult(
        gross_value=multi_input.gross_value,
        card_fee_percentage=inversion.implied_card_fee_percentage,
        card_fee_value=inversion.implied_card_fee_value,
        value_after_card_fee=inversion.value_after_card_fee,
        tax_percentage=tax_percentage,
        tax_value=inversion.tax_value,
        value_after_tax=inversion.value_after_procedure,
        procedure_cost=primary.fixed_cost if primary is not None else ZERO,
        total_procedure_cost=procedures_cost,
        net_value=asserted_net_value,
        bonus_value=bonus_value,
        professional_share=split.professional_percentage,
        owner_final_value=split.owner_share,
        professional_final_value=split.professional_share,
        allocations=split.allocations,
        split_path=split.path,
        applied_split_rule_id=split.rule_id,
        applied_bonus_rule_ids=applied_bonus_rule_ids,
        used_manual_net=True,
    )
    return ManualNetReconciliation(inversion=inversion, result=result)


def calculate_with_manual_net(
    calculation_input: AnyCalculationInput,
    tolerance: Decimal = MANUAL_NET_TOLERANCE,
) -> CalculationResult:
    """
    Forward-calculate, then honour calculation_input.net_value_input if it
    differs from the computed net by more than tolerance.

    This is the trigger used by interactive callers (hospital invoice net,
    manual net toggle). The batch job reconciles every stored manual net
    unconditionally instead.
    """
    multi_input = _as_multi(calculation_input)
    result = calculate_appointment_multi_procedure(multi_input)

    asserted: Optional[Decimal] = multi_input.net_value_input
    if asserted is None or asserted <= ZERO:
        return result
    if not is_significantly_different(asserted, result.net_value, tolerance):
        return result

    logger.debug(f"Manual net {asserted} differs from computed {result.net_value}; reconciling card fee")
    return reconcile_manual_net(asserted, multi_input).result
