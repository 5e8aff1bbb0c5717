"""Payment method model (cash, debit, credit installments, ...)."""

from datetime import datetime

from sqlalchemy import String, Boolean, Integer, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import ID_LENGTH, MAX_STRING_LENGTH
from core.database import Base
from utils.id_utils import new_id


class PaymentMethod(Base):
    """A way a patient can pay. Card fees are configured per payment method."""

    __tablename__ = "payment_methods"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Display name (e.g., "Crédito 3x")."""

    display_order: Mapped[int] = mapped_column(Integer, default=0)
    """Sort order in selection lists."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    """Whether the payment method can be selected for new appointments."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the payment method was created."""
