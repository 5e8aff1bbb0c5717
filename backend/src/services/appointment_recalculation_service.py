"""
Batch recalculation of stored appointments.

Appointments store a snapshot of the engine's result at save time. When
rules or settings change (or a calculation bug is fixed) the snapshots go
stale; this service recomputes every appointment, reports the differences,
and writes the new values unless running as a dry run.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from core.constants import RECALCULATION_TOLERANCE
from models import Appointment
from shared_types import CalculationResult
from services.calculation_service import calculate_appointment_multi_procedure
from services.errors import MissingReferenceError
from services.manual_net_service import reconcile_manual_net
from services.reference_data_service import ReferenceData, ReferenceDataService
from utils.money import ZERO, is_significantly_different, to_decimal

logger = logging.getLogger(__name__)

# Stored columns compared against a fresh calculation, in report order
COMPARED_FIELDS = (
    "card_fee_percentage",
    "card_fee_value",
    "tax_percentage",
    "tax_value",
    "procedure_cost",
    "total_procedure_cost",
    "net_value",
    "bonus_value",
    "professional_share",
    "final_value_owner",
    "final_value_professional",
)


@dataclass(frozen=True)
class FieldDiff:
    field: str
    stored: Decimal
    recalculated: Decimal

    @property
    def delta(self) -> Decimal:
        return self.recalculated - self.stored


@dataclass
class AppointmentDiff:
    """All fields of one appointment whose stored value is stale."""
    appointment_id: str
    date: Optional[date]
    patient_name: str
    field_diffs: List[FieldDiff]
    used_manual_net: bool = False

    def _delta(self, field_name: str) -> Decimal:
        for diff in self.field_diffs:
            if diff.field == field_name:
                return diff.delta
        return ZERO

    @property
    def owner_delta(self) -> Decimal:
        return self._delta("final_value_owner")

    @property
    def professional_delta(self) -> Decimal:
        return self._delta("final_value_professional")


@dataclass
class RecalculationReport:
    """Summary of a recalculation run."""
    dry_run: bool
    total: int = 0
    unchanged: int = 0
    updated: int = 0
    errors: int = 0
    diffs: List[AppointmentDiff] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)

    @property
    def total_owner_delta(self) -> Decimal:
        return sum((diff.owner_delta for diff in self.diffs), ZERO)

    @property
    def total_professional_delta(self) -> Decimal:
        return sum((diff.professional_delta for diff in self.diffs), ZERO)


class AppointmentRecalculationService:
    """Recomputes stored appointment snapshots against current reference data."""

    @staticmethod
    def procedure_ids_for(appointment: Appointment) -> List[Optional[str]]:
        """All procedures in sequence order, or the primary procedure for single-procedure records."""
        if appointment.appointment_procedures:
            ordered = sorted(appointment.appointment_procedures, key=lambda ap: ap.sequence_order)
            return [ap.procedure_id for ap in ordered]
        return [appointment.procedure_id]

    @staticmethod
    def recalculate_appointment(
        appointment: Appointment,
        reference: ReferenceData,
        owner_professional_id: str,
    ) -> CalculationResult:
        """
        Compute the current result for a stored appointment.

        Records with a manual net (> 0) are always reconciled against it.

        Raises:
            MissingReferenceError: If the professional or a procedure no longer exists
        """
        net_value_input = appointment.net_value_input
        asserted = to_decimal(net_value_input) if net_value_input is not None else None

        calculation_input = reference.build_input(
            gross_value=to_decimal(appointment.gross_value),
            payment_method_id=appointment.payment_method_id,
            professional_id=appointment.professional_id,
            procedure_ids=AppointmentRecalculationService.procedure_ids_for(appointment),
            is_hospital=bool(appointment.is_hospital),
            owner_professional_id=owner_professional_id,
            net_value_input=asserted,
        )

        if asserted is not None and asserted > ZERO:
            return reconcile_manual_net(asserted, calculation_input).result
        return calculate_appointment_multi_procedure(calculation_input)

    @staticmethod
    def compare(
        appointment: Appointment,
        result: CalculationResult,
        tolerance: Decimal = RECALCULATION_TOLERANCE,
    ) -> List[FieldDiff]:
        """Return the stored fields that differ from result by more than tolerance."""
        recalculated = result.to_appointment_fields()
        diffs: List[FieldDiff] = []
        for field_name in COMPARED_FIELDS:
            stored = to_decimal(getattr(appointment, field_name))
            new_value = recalculated[field_name]
            if is_significantly_different(stored, new_value, tolerance):
                diffs.append(FieldDiff(field=field_name, stored=stored, recalculated=new_value))
        return diffs

    @staticmethod
    def apply(appointment: Appointment, result: CalculationResult) -> None:
        """Overwrite every calculated column of the appointment."""
        for field_name, value in result.to_appointment_fields().items():
            setattr(appointment, field_name, value)

    @staticmethod
    def recalculate_all(
        db: Session,
        dry_run: bool = False,
        verbose: bool = False,
        allow_name_heuristic: bool = False,
        reference_date: Optional[date] = None,
    ) -> RecalculationReport:
        """
        Recalculate every appointment, oldest first.

        Args:
            db: Database session
            dry_run: Report differences without writing them
            verbose: Log unchanged and skipped records at INFO instead of DEBUG
            allow_name_heuristic: Infer the owner from professional names when
                owner_professional_id is not set (migration shim)
            reference_date: Date used to select the card fee tier (default: today)

        Returns:
            RecalculationReport with counts and per-field diffs

        Raises:
            ReferenceDataError: If reference data cannot be loaded
            OwnerNotConfiguredError: If no owner id can be determined
        """
        reference = ReferenceDataService.load(db, reference_date)
        owner_professional_id = reference.require_owner_professional_id(allow_name_heuristic=allow_name_heuristic)
        detail_level = logging.INFO if verbose else logging.DEBUG

        appointments = db.scalars(
            select(Appointment)
            .options(selectinload(Appointment.appointment_procedures))
            .order_by(Appointment.date, Appointment.id)
        ).all()

        report = RecalculationReport(dry_run=dry_run, total=len(appointments))
        logger.info(f"Recalculating {len(appointments)} appointments [Dry Run: {dry_run}]")

        for appointment in appointments:
            label = f"{appointment.date} {appointment.patient_name or '-'} ({appointment.id})"
            try:
                result = AppointmentRecalculationService.recalculate_appointment(
                    appointment, reference, owner_professional_id
                )
            except MissingReferenceError as e:
                report.errors += 1
                report.error_messages.append(f"{label}: {e}")
                logger.log(detail_level, f"SKIP {label}: {e}")
                continue
            except (ArithmeticError, ValueError) as e:
                report.errors += 1
                report.error_messages.append(f"{label}: {e}")
                logger.error(f"ERROR {label}: {e}")
                continue

            field_diffs = AppointmentRecalculationService.compare(appointment, result)
            if not field_diffs:
                report.unchanged += 1
                logger.log(detail_level, f"OK {label} - unchanged")
                continue

            diff = AppointmentDiff(
                appointment_id=appointment.id,
                date=appointment.date,
                patient_name=appointment.patient_name or "",
                field_diffs=field_diffs,
                used_manual_net=result.used_manual_net,
            )
            report.diffs.append(diff)
            logger.info(f"DIFF {label}")
            for field_diff in field_diffs:
                logger.info(f"    {field_diff.field}: {field_diff.stored} -> {field_diff.recalculated}")

            if not dry_run:
                AppointmentRecalculationService.apply(appointment, result)
            report.updated += 1

        if not dry_run and report.updated:
            db.commit()
            logger.info(f"Updated {report.updated} appointments")

        logger.info(
            f"Recalculation finished: total={report.total} unchanged={report.unchanged} "
            f"{'would update' if dry_run else 'updated'}={report.updated} errors={report.errors} "
            f"owner delta={report.total_owner_delta} professional delta={report.total_professional_delta}"
        )
        return report
