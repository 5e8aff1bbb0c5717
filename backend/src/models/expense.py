"""
Expense model: recurring or one-off costs shared among professionals.

Each expense lists which professionals are responsible for it and for which
share, e.g. rent split 50/50 between the owner and a partner.
"""

from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import String, Text, Boolean, Integer, Numeric, Date, TIMESTAMP, JSON
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import ID_LENGTH, MAX_STRING_LENGTH, MONEY_PRECISION, MONEY_SCALE
from core.database import Base
from utils.id_utils import new_id


class Expense(Base):
    """A cost deducted from the payouts of the professionals responsible for it."""

    __tablename__ = "expenses"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Display name (e.g., "Aluguel")."""

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Optional description."""

    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    """Optional category key."""

    amount: Mapped[Decimal] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE))
    """Amount of each occurrence."""

    recurrence_type: Mapped[str] = mapped_column(String(20), default="once")
    """Valid values: 'once', 'monthly', 'custom'."""

    recurrence_interval: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """For 'custom': repeat every N units."""

    recurrence_unit: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    """For 'custom': 'days', 'weeks' or 'months'."""

    start_date: Mapped[date_type] = mapped_column(Date)
    """First day the expense is due."""

    end_date: Mapped[Optional[date_type]] = mapped_column(Date, nullable=True)
    """Last day the expense is due. NULL means open-ended."""

    # Store responsibility as JSON: [{"professional_id": "...", "percentage": 50}, ...]
    responsibility: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)
    """Professionals responsible for the expense and their shares."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    """Inactive expenses are never deducted."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the expense was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp of the last update."""
