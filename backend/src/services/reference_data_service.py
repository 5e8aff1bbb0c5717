"""
Reference data loading.

The calculation engine only works on immutable snapshots (shared_types).
This service reads professionals, procedures, rules and settings from the
database once, converts the ORM rows, and resolves the tiered card fee
indirection so that callers get a single ReferenceData object per run.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import DEFAULT_BONUS_PERCENTAGE, DEFAULT_TAX_PERCENTAGE
from core.constants import SETTING_BONUS_PERCENTAGE, SETTING_DEFAULT_TAX_PERCENTAGE
from models import (
    Appointment as AppointmentRow,
    BonusRule as BonusRuleRow,
    CardFeeRule as CardFeeRuleRow,
    CardFeeTier as CardFeeTierRow,
    CardFeeTierRate as CardFeeTierRateRow,
    PaymentMethod as PaymentMethodRow,
    Procedure as ProcedureRow,
    Professional as ProfessionalRow,
    SplitRule as SplitRuleRow,
    SystemSetting as SystemSettingRow,
)
from shared_types import (
    BonusBaseValue,
    BonusRule,
    CardFeeRule,
    CardFeeTier,
    CardFeeTierRate,
    MultiProcedureCalculationInput,
    PaymentMethod,
    Procedure,
    Professional,
    Source,
    SplitDistribution,
    SplitRule,
)
from services.card_fee_service import resolve_card_fee_rules, select_current_fee_tier
from services.errors import MissingReferenceError, OwnerNotConfiguredError, ReferenceDataError
from services.owner_resolution_service import determine_owner_professional_id
from utils.datetime_utils import clinic_today, previous_month_range
from utils.money import ZERO, to_decimal

logger = logging.getLogger(__name__)


# ===== Row converters =====

def professional_from_row(row: ProfessionalRow) -> Professional:
    return Professional(id=row.id, name=row.name or "", is_active=bool(row.is_active))


def procedure_from_row(row: ProcedureRow) -> Procedure:
    bonus_percentage = row.vanessa_bonus_percentage
    return Procedure(
        id=row.id,
        name=row.name or "",
        fixed_cost=to_decimal(row.fixed_cost),
        has_vanessa_bonus=bool(row.has_vanessa_bonus),
        vanessa_bonus_percentage=to_decimal(bonus_percentage) if bonus_percentage is not None else None,
        is_active=bool(row.is_active),
    )


def payment_method_from_row(row: PaymentMethodRow) -> PaymentMethod:
    return PaymentMethod(
        id=row.id,
        name=row.name or "",
        display_order=row.display_order or 0,
        is_active=bool(row.is_active),
    )


def card_fee_rule_from_row(row: CardFeeRuleRow) -> CardFeeRule:
    return CardFeeRule(
        id=row.id,
        payment_method_id=row.payment_method_id,
        fee_percentage=to_decimal(row.fee_percentage),
        min_value=to_decimal(row.min_value),
        max_value=to_decimal(row.max_value) if row.max_value is not None else None,
    )


def card_fee_tier_from_row(row: CardFeeTierRow) -> CardFeeTier:
    return CardFeeTier(
        id=row.id,
        min_revenue=to_decimal(row.min_revenue),
        max_revenue=to_decimal(row.max_revenue) if row.max_revenue is not None else None,
        priority=row.priority or 0,
        is_active=bool(row.is_active),
        name=row.name or "",
    )


def card_fee_tier_rate_from_row(row: CardFeeTierRateRow) -> CardFeeTierRate:
    return CardFeeTierRate(
        id=row.id,
        tier_id=row.tier_id,
        payment_method_id=row.payment_method_id,
        fee_percentage=to_decimal(row.fee_percentage),
    )


def parse_bonus_base_value(value: Optional[str]) -> BonusBaseValue:
    """Unknown or empty base values are treated as net value."""
    try:
        return BonusBaseValue(value or BonusBaseValue.NET_VALUE.value)
    except ValueError:
        logger.warning(f"Unknown bonus base value {value!r}; using net_value")
        return BonusBaseValue.NET_VALUE


def bonus_rule_from_row(row: BonusRuleRow) -> BonusRule:
    return BonusRule(
        id=row.id,
        percentage=to_decimal(row.percentage),
        base_value=parse_bonus_base_value(row.base_value),
        procedure_id=row.procedure_id,
        professional_id=row.professional_id,
        is_active=bool(row.is_active),
        name=row.name or "",
        beneficiary_name=row.beneficiary_name or "",
    )


def split_distributions_from_json(raw: object, rule_id: str = "") -> Tuple[SplitDistribution, ...]:
    """
    Convert stored distribution JSON into SplitDistribution values.

    A missing percentage counts as 0. If any entry is unusable (not an
    object, no professional_id, or a percentage that is not a finite number)
    the whole list is dropped with a warning; the split engine then treats
    the rule as invalid and falls back to 100% owner.
    """
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        logger.warning(f"Split rule {rule_id}: distributions is not a list ({raw!r}); ignoring them")
        return ()

    distributions: List[SplitDistribution] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            logger.warning(f"Split rule {rule_id}: distribution entry {entry!r} is not an object; ignoring them")
            return ()
        professional_id = str(entry.get("professional_id") or "").strip()
        if not professional_id:
            logger.warning(f"Split rule {rule_id}: distribution entry {entry!r} has no professional_id; ignoring them")
            return ()
        try:
            percentage = to_decimal(entry.get("percentage"))
        except ValueError:
            percentage = None
        if percentage is None or not percentage.is_finite():
            logger.warning(f"Split rule {rule_id}: distribution entry {entry!r} has an invalid percentage; ignoring them")
            return ()
        distributions.append(SplitDistribution(professional_id=professional_id, percentage=percentage))
    return tuple(distributions)


def split_rule_from_row(row: SplitRuleRow) -> SplitRule:
    return SplitRule(
        id=row.id,
        distributions=split_distributions_from_json(row.distributions, row.id),
        procedure_id=row.procedure_id,
        professional_id=row.professional_id,
        priority=row.priority or 0,
        is_active=bool(row.is_active),
        name=row.name or "",
    )


def percentage_setting(settings: Mapping[str, str], key: str, fallback: str) -> Decimal:
    """Read a percentage from system settings, falling back to the environment default."""
    raw = (settings.get(key) or "").strip() or fallback
    try:
        return to_decimal(raw)
    except ValueError as e:
        raise ReferenceDataError(f"System setting {key} is not a number: {raw!r}") from e


# ===== Snapshot =====

@dataclass(frozen=True)
class ReferenceData:
    """Everything the engine needs besides the appointment itself."""
    professionals: Dict[str, Professional]
    procedures: Dict[str, Procedure]
    payment_methods: Dict[str, PaymentMethod]
    card_fee_rules: Tuple[CardFeeRule, ...]
    bonus_rules: Tuple[BonusRule, ...]
    split_rules: Tuple[SplitRule, ...]
    settings: Dict[str, str]
    default_tax_percentage: Decimal
    default_bonus_percentage: Decimal
    current_fee_tier: Optional[CardFeeTier] = None
    previous_month_revenue: Decimal = field(default=ZERO)

    def owner_professional_id(self, allow_name_heuristic: bool = False) -> Optional[str]:
        return determine_owner_professional_id(
            list(self.professionals.values()),
            self.settings,
            allow_name_heuristic=allow_name_heuristic,
        )

    def require_owner_professional_id(self, allow_name_heuristic: bool = False) -> str:
        """
        Return the owner id or raise.

        Raises:
            OwnerNotConfiguredError: If the owner_professional_id setting is
                missing and the name heuristic is not allowed (or finds nobody)
        """
        owner_id = self.owner_professional_id(allow_name_heuristic=allow_name_heuristic)
        if not owner_id:
            raise OwnerNotConfiguredError(
                "owner_professional_id is not configured. Run "
                "scripts/migrate_owner_professional_setting.py or set it in system_settings."
            )
        return owner_id

    def get_professional(self, professional_id: Optional[str]) -> Professional:
        professional = self.professionals.get(professional_id or "")
        if professional is None:
            raise MissingReferenceError(f"Professional {professional_id} not found")
        return professional

    def get_procedures(self, procedure_ids: Sequence[Optional[str]]) -> Tuple[Procedure, ...]:
        """Resolve procedure ids in order. Raises MissingReferenceError on the first unknown id."""
        if not procedure_ids:
            raise MissingReferenceError("Appointment has no procedure")
        procedures: List[Procedure] = []
        for procedure_id in procedure_ids:
            procedure = self.procedures.get(procedure_id or "")
            if procedure is None:
                raise MissingReferenceError(f"Procedure {procedure_id} not found")
            procedures.append(procedure)
        return tuple(procedures)

    def build_input(
        self,
        gross_value: Decimal,
        payment_method_id: Optional[str],
        professional_id: Optional[str],
        procedure_ids: Sequence[Optional[str]],
        is_hospital: bool,
        owner_professional_id: Optional[str],
        net_value_input: Optional[Decimal] = None,
    ) -> MultiProcedureCalculationInput:
        """Assemble a calculation input for one appointment from this snapshot."""
        return MultiProcedureCalculationInput(
            gross_value=gross_value,
            payment_method_id=payment_method_id or "",
            source=Source.for_appointment(is_hospital),
            procedures=self.get_procedures(procedure_ids),
            professional=self.get_professional(professional_id),
            card_fee_rules=self.card_fee_rules,
            default_tax_percentage=self.default_tax_percentage,
            default_bonus_percentage=self.default_bonus_percentage,
            bonus_rules=self.bonus_rules,
            split_rules=self.split_rules,
            owner_professional_id=owner_professional_id,
            net_value_input=net_value_input,
        )


class ReferenceDataService:
    """Loads ReferenceData snapshots from the database."""

    @staticmethod
    def get_previous_month_revenue(db: Session, reference_date: date) -> Decimal:
        """Sum of gross values of appointments dated in the month before reference_date."""
        start, end = previous_month_range(reference_date)
        total = db.execute(
            select(func.coalesce(func.sum(AppointmentRow.gross_value), 0)).where(
                AppointmentRow.date >= start,
                AppointmentRow.date <= end,
            )
        ).scalar_one()
        return to_decimal(total)

    @staticmethod
    def load_card_fee_rules(db: Session, reference_date: date) -> Tuple[Tuple[CardFeeRule, ...], Optional[CardFeeTier], Decimal]:
        """
        Resolve the card fee rules applicable on reference_date.

        Returns:
            (rules, current tier or None, previous-month revenue)
        """
        revenue = ReferenceDataService.get_previous_month_revenue(db, reference_date)
        tiers = [card_fee_tier_from_row(row) for row in db.scalars(select(CardFeeTierRow)).all()]
        current_tier = select_current_fee_tier(tiers, revenue)

        tier_rates: List[CardFeeTierRate] = []
        if current_tier is not None:
            tier_rates = [
                card_fee_tier_rate_from_row(row)
                for row in db.scalars(
                    select(CardFeeTierRateRow).where(CardFeeTierRateRow.tier_id == current_tier.id)
                ).all()
            ]

        legacy_rules = [
            card_fee_rule_from_row(row)
            for row in db.scalars(
                select(CardFeeRuleRow).order_by(CardFeeRuleRow.min_value, CardFeeRuleRow.id)
            ).all()
        ]
        rules = resolve_card_fee_rules(current_tier, tier_rates, legacy_rules)
        return tuple(rules), current_tier, revenue

    @staticmethod
    def load(db: Session, reference_date: Optional[date] = None) -> ReferenceData:
        """
        Load a complete snapshot.

        Only active bonus and split rules are loaded. Professionals and
        procedures are loaded regardless of is_active so historical
        appointments can still be recalculated.

        Args:
            db: Database session
            reference_date: Date whose previous month selects the card fee
                tier. Defaults to today in the clinic timezone.

        Raises:
            ReferenceDataError: If anything cannot be read or parsed
        """
        reference_date = reference_date or clinic_today()
        try:
            professionals = {
                row.id: professional_from_row(row)
                for row in db.scalars(select(ProfessionalRow).order_by(ProfessionalRow.name, ProfessionalRow.id)).all()
            }
            procedures = {row.id: procedure_from_row(row) for row in db.scalars(select(ProcedureRow)).all()}
            payment_methods = {
                row.id: payment_method_from_row(row)
                for row in db.scalars(select(PaymentMethodRow).order_by(PaymentMethodRow.display_order)).all()
            }
            settings = {row.key: row.value or "" for row in db.scalars(select(SystemSettingRow)).all()}
            bonus_rules = tuple(
                bonus_rule_from_row(row)
                for row in db.scalars(
                    select(BonusRuleRow).where(BonusRuleRow.is_active.is_(True)).order_by(BonusRuleRow.id)
                ).all()
            )
            split_rules = tuple(
                split_rule_from_row(row)
                for row in db.scalars(
                    select(SplitRuleRow).where(SplitRuleRow.is_active.is_(True)).order_by(SplitRuleRow.id)
                ).all()
            )
            card_fee_rules, current_tier, revenue = ReferenceDataService.load_card_fee_rules(db, reference_date)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to load reference data: {e}")
            raise ReferenceDataError(f"Failed to load reference data: {e}") from e
        except ValueError as e:
            raise ReferenceDataError(f"Invalid reference data: {e}") from e

        reference = ReferenceData(
            professionals=professionals,
            procedures=procedures,
            payment_methods=payment_methods,
            card_fee_rules=card_fee_rules,
            bonus_rules=bonus_rules,
            split_rules=split_rules,
            settings=settings,
            default_tax_percentage=percentage_setting(settings, SETTING_DEFAULT_TAX_PERCENTAGE, DEFAULT_TAX_PERCENTAGE),
            default_bonus_percentage=percentage_setting(settings, SETTING_BONUS_PERCENTAGE, DEFAULT_BONUS_PERCENTAGE),
            current_fee_tier=current_tier,
            previous_month_revenue=revenue,
        )
        logger.info(
            f"Loaded reference data: {len(professionals)} professionals, {len(procedures)} procedures, "
            f"{len(bonus_rules)} bonus rules, {len(split_rules)} split rules, {len(card_fee_rules)} card fee rules"
        )
        return reference
