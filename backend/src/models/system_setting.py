"""
System setting model: global key/value configuration.

Known keys: default_tax_percentage, vanessa_bonus_percentage and
owner_professional_id. Values are stored as strings.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import ID_LENGTH, MAX_STRING_LENGTH
from core.database import Base
from utils.id_utils import new_id


class SystemSetting(Base):
    """A single global setting."""

    __tablename__ = "system_settings"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    key: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), unique=True, index=True)
    """Setting name."""

    value: Mapped[str] = mapped_column(Text, default="")
    """Setting value as a string."""

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Optional human-readable description."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the setting was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp of the last update."""
