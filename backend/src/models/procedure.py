"""
Procedure model representing billable service types.

Each procedure carries a fixed cost that is deducted from every appointment
that includes it, plus the legacy bonus flag used only when no bonus rules
exist.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, Numeric, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

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


class Procedure(Base):
    """A service type with a fixed cost."""

    __tablename__ = "procedures"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Procedure name. The legacy fallback matches "endolaser" in it."""

    fixed_cost: Mapped[Decimal] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), default=Decimal("0"))
    """Cost deducted from the appointment value every time the procedure is performed."""

    has_vanessa_bonus: Mapped[bool] = mapped_column(Boolean, default=False)
    """Legacy flag: the procedure pays the third-party bonus when no bonus rules exist."""

    vanessa_bonus_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(PERCENTAGE_PRECISION, PERCENTAGE_SCALE), nullable=True
    )
    """Legacy bonus percentage for this procedure. NULL or 0 means the system default."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    """Inactive procedures are kept for historical appointments."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the procedure was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp of the last update."""
