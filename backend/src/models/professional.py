"""
Professional model representing the people who perform procedures.

One professional is the clinic owner (identified by the owner_professional_id
system setting); every other professional is paid through split rules.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, Boolean, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import ID_LENGTH, MAX_STRING_LENGTH
from core.database import Base
from utils.id_utils import new_id


class Professional(Base):
    """A professional who performs procedures or receives a share of the net value."""

    __tablename__ = "professionals"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Display name of the professional."""

    bank_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Optional free-text bank details used for payouts."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    """Inactive professionals are kept for historical appointments."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the professional was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp of the last update."""
