"""
Appointment model: one billed visit and its stored financial breakdown.

The input columns (gross value, payment method, professional, procedures,
hospital flag, optional manual net) are entered by staff. Every other
monetary column is a snapshot of the calculation engine's result at save
time, and is rewritten by the batch recalculation job when rules change.
"""

from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import String, Text, Boolean, Integer, Numeric, Date, ForeignKey, TIMESTAMP, Index
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


def _money_column(nullable: bool = False) -> Any:
    return mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=nullable, default=Decimal("0"))


def _percentage_column() -> Any:
    return mapped_column(Numeric(PERCENTAGE_PRECISION, PERCENTAGE_SCALE), default=Decimal("0"))


class Appointment(Base):
    """
    A billed visit.

    procedure_id is the primary procedure; all procedures (including the
    primary one) are listed in appointment_procedures in sequence order when
    the appointment has more than one.
    """

    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    date: Mapped[date_type] = mapped_column(Date)
    """Date of the visit (clinic local date)."""

    patient_name: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)
    """Patient name as entered by staff."""

    professional_id: Mapped[Optional[str]] = mapped_column(ForeignKey("professionals.id"), nullable=True)
    """Professional who performed the visit."""

    procedure_id: Mapped[Optional[str]] = mapped_column(ForeignKey("procedures.id"), nullable=True)
    """Primary procedure, kept for single-procedure records."""

    payment_method_id: Mapped[Optional[str]] = mapped_column(ForeignKey("payment_methods.id"), nullable=True)
    """Payment method used by the patient."""

    is_hospital: Mapped[bool] = mapped_column(Boolean, default=False)
    """Hospital visits use the hospital tax rate (0%)."""

    # Inputs
    gross_value: Mapped[Decimal] = _money_column()
    """Amount charged to the patient."""

    net_value_input: Mapped[Optional[Decimal]] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=True)
    """Manually asserted net value. When set (> 0) the card fee is solved backward from it."""

    # Calculated fields
    card_fee_percentage: Mapped[Decimal] = _percentage_column()
    """Card fee percentage applied (or implied by the manual net)."""

    card_fee_value: Mapped[Decimal] = _money_column()
    """Card fee amount."""

    tax_percentage: Mapped[Decimal] = _percentage_column()
    """Tax percentage applied."""

    tax_value: Mapped[Decimal] = _money_column()
    """Tax amount."""

    procedure_cost: Mapped[Decimal] = _money_column()
    """Fixed cost of the primary procedure."""

    total_procedure_cost: Mapped[Decimal] = _money_column()
    """Sum of the fixed costs of every procedure."""

    net_value: Mapped[Decimal] = _money_column()
    """Value left after card fee, tax and procedure costs."""

    bonus_value: Mapped[Decimal] = _money_column()
    """Third-party bonus paid on top of the split."""

    professional_share: Mapped[Decimal] = _percentage_column()
    """Percentage of the net value paid to the non-owner professionals."""

    final_value_owner: Mapped[Decimal] = _money_column()
    """Owner's share of the net value."""

    final_value_professional: Mapped[Decimal] = _money_column()
    """Non-owner professionals' share of the net value."""

    # Metadata
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Optional staff notes."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the appointment was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp of the last update (including batch recalculation)."""

    # Relationships
    professional = relationship("Professional")
    """Professional who performed the visit."""

    procedure = relationship("Procedure")
    """Primary procedure."""

    appointment_procedures = relationship(
        "AppointmentProcedure",
        back_populates="appointment",
        order_by="AppointmentProcedure.sequence_order",
        cascade="all, delete-orphan",
    )
    """All procedures of the visit, ordered by sequence_order."""

    __table_args__ = (
        Index('idx_appointments_date', 'date'),
        Index('idx_appointments_professional', 'professional_id'),
    )


class AppointmentProcedure(Base):
    """Junction row linking an appointment to one of its procedures."""

    __tablename__ = "appointment_procedures"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    """Unique identifier (UUID string)."""

    appointment_id: Mapped[str] = mapped_column(ForeignKey("appointments.id", ondelete="CASCADE"))
    """Appointment this row belongs to."""

    procedure_id: Mapped[str] = mapped_column(ForeignKey("procedures.id"))
    """Procedure performed."""

    sequence_order: Mapped[int] = mapped_column(Integer, default=0)
    """Position of the procedure; the lowest one is the primary procedure."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Timestamp when the row was created."""

    appointment = relationship("Appointment", back_populates="appointment_procedures")
    """Owning appointment."""

    procedure = relationship("Procedure")
    """Procedure performed."""
