"""
Split rule model: how the net value is divided among professionals.

Only one split rule applies to an appointment: the most specific match
(procedure filter weighs more than professional filter), then the highest
priority, then the smallest id.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import String, Boolean, Integer, ForeignKey, TIMESTAMP, JSON
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import ID_LENGTH, MAX_STRING_LENGTH
from core.database import Base
from utils.id_utils import new_id


class SplitRule(Base):
    """Distribution of the net value for matching appointments."""

    __tablename__ = "split_rules"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string). Also the final tie-breaker in rule selection."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), default="")
    """Display name of the rule."""

    procedure_id: Mapped[Optional[str]] = mapped_column(ForeignKey("procedures.id"), nullable=True)
    """Procedure filter. NULL matches every procedure."""

    professional_id: Mapped[Optional[str]] = mapped_column(ForeignKey("professionals.id"), nullable=True)
    """Professional filter. NULL matches every professional."""

    # Store distributions as JSON: [{"professional_id": "...", "percentage": 50}, ...]
    distributions: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)
    """Ordered list of professional shares. Percentages must add up to 100."""

    deduct_procedure_cost: Mapped[bool] = mapped_column(Boolean, default=True)
    """Stored for the settings screen; the engine always works on the net value."""

    deduct_card_fee: Mapped[bool] = mapped_column(Boolean, default=True)
    """Stored for the settings screen; the engine always works on the net value."""

    deduct_tax: Mapped[bool] = mapped_column(Boolean, default=True)
    """Stored for the settings screen; the engine always works on the net value."""

    priority: Mapped[int] = mapped_column(Integer, default=0)
    """Higher priority wins among equally specific rules."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    """Inactive rules are never selected."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the rule was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp of the last update."""
