"""
Card fee models.

Two configurations coexist:
- CardFeeRule: legacy flat table of fee percentages per payment method and
  gross-value range.
- CardFeeTier / CardFeeTierRate: fee percentages that depend on the clinic's
  previous-month revenue. When a tier is current and has rates, its rates
  replace the legacy table.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, Integer, Numeric, ForeignKey, TIMESTAMP, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import (
    ID_LENGTH,
    MAX_STRING_LENGTH,
    MONEY_PRECISION,
    MONEY_SCALE,
    PERCENTAGE_PRECISION,
    PERCENTAGE_SCALE,
)
from core.database import Base
from utils.id_utils import new_id


class CardFeeRule(Base):
    """Fee percentage for a payment method within an inclusive gross-value range."""

    __tablename__ = "card_fee_rules"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    payment_method_id: Mapped[str] = mapped_column(ForeignKey("payment_methods.id"))
    """Payment method this rule applies to."""

    min_value: Mapped[Decimal] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), default=Decimal("0"))
    """Lower bound of the gross value (inclusive)."""

    max_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=True)
    """Upper bound of the gross value (inclusive). NULL means unbounded."""

    fee_percentage: Mapped[Decimal] = mapped_column(Numeric(PERCENTAGE_PRECISION, PERCENTAGE_SCALE))
    """Fee charged on the gross value, in percent."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the rule was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp of the last update."""

    __table_args__ = (
        Index('idx_card_fee_rules_payment_method', 'payment_method_id'),
    )


class CardFeeTier(Base):
    """Revenue band: which fee rates apply given last month's gross revenue."""

    __tablename__ = "card_fee_tiers"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), default="")
    """Display name (e.g., "Faixa 1")."""

    min_revenue: Mapped[Decimal] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), default=Decimal("0"))
    """Lower bound of previous-month revenue (inclusive)."""

    max_revenue: Mapped[Optional[Decimal]] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=True)
    """Upper bound of previous-month revenue (inclusive). NULL means unbounded."""

    priority: Mapped[int] = mapped_column(Integer, default=0)
    """Higher priority wins when several tiers contain the revenue."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    """Inactive tiers are never selected."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the tier was created."""

    rates = relationship("CardFeeTierRate", back_populates="tier", cascade="all, delete-orphan")
    """Fee rates of this tier, one per payment method."""


class CardFeeTierRate(Base):
    """Fee percentage of a tier for one payment method."""

    __tablename__ = "card_fee_tier_rates"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    tier_id: Mapped[str] = mapped_column(ForeignKey("card_fee_tiers.id", ondelete="CASCADE"))
    """Tier this rate belongs to."""

    payment_method_id: Mapped[str] = mapped_column(ForeignKey("payment_methods.id"))
    """Payment method this rate applies to."""

    fee_percentage: Mapped[Decimal] = mapped_column(Numeric(PERCENTAGE_PRECISION, PERCENTAGE_SCALE))
    """Fee charged on the gross value, in percent."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the rate was created."""

    tier = relationship("CardFeeTier", back_populates="rates")
    """Relationship to the owning tier."""

    __table_args__ = (
        Index('idx_card_fee_tier_rates_tier', 'tier_id'),
    )
