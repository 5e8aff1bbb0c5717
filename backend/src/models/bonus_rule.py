"""
Bonus rule model: third-party revenue shares.

Every active rule whose filters match an appointment fires, and the amounts
add up. A NULL filter matches any procedure or professional.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, Numeric, ForeignKey, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import ID_LENGTH, MAX_STRING_LENGTH, PERCENTAGE_PRECISION, PERCENTAGE_SCALE
from core.database import Base
from utils.id_utils import new_id


class BonusRule(Base):
    """A percentage paid to a beneficiary outside the owner/professional split."""

    __tablename__ = "bonus_rules"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), default="")
    """Display name of the rule."""

    beneficiary_name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), default="")
    """Who receives the bonus."""

    procedure_id: Mapped[Optional[str]] = mapped_column(ForeignKey("procedures.id"), nullable=True)
    """Procedure filter. NULL matches every procedure."""

    professional_id: Mapped[Optional[str]] = mapped_column(ForeignKey("professionals.id"), nullable=True)
    """Professional filter. NULL matches every professional."""

    percentage: Mapped[Decimal] = mapped_column(Numeric(PERCENTAGE_PRECISION, PERCENTAGE_SCALE))
    """Bonus percentage applied to the base value."""

    base_value: Mapped[str] = mapped_column(String(50), default="net_value")
    """Base amount: 'gross_value', 'net_value' or 'final_after_costs'."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    """Inactive rules never fire."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the rule was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp of the last update."""
