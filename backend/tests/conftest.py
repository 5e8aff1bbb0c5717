"""
Test configuration and shared fixtures for the clinic finance test suite.

Database tests run against an in-memory SQLite database created from the
SQLAlchemy metadata. Each test gets its own engine, so state never leaks
between tests.
"""

from datetime import date
from decimal import Decimal
from typing import Generator, Iterable, List, Optional, Sequence, Tuple

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.constants import SETTING_OWNER_PROFESSIONAL_ID
from core.database import Base

# Import all models to ensure they're registered with SQLAlchemy before any relationships are resolved
from models import (
    Appointment,
    AppointmentProcedure,
    BonusRule,
    CardFeeRule,
    CardFeeTier,
    CardFeeTierRate,
    Expense,
    PaymentMethod,
    Procedure,
    Professional,
    SplitRule,
    SystemSetting,
)


@pytest.fixture(scope="function")
def db_engine() -> Generator[Engine, None, None]:
    """
    Create an in-memory SQLite engine with the full schema.

    StaticPool keeps the single in-memory connection alive and shares it
    with the FastAPI TestClient thread.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session bound to the test engine."""
    TestingSession = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()

    yield session

    session.close()


# Helper functions for creating reference data

def create_professional(db_session: Session, name: str, is_active: bool = True) -> Professional:
    professional = Professional(name=name, is_active=is_active)
    db_session.add(professional)
    db_session.flush()
    return professional


def create_procedure(
    db_session: Session,
    name: str,
    fixed_cost: str = "0",
    has_vanessa_bonus: bool = False,
    vanessa_bonus_percentage: Optional[str] = None,
) -> Procedure:
    procedure = Procedure(
        name=name,
        fixed_cost=Decimal(fixed_cost),
        has_vanessa_bonus=has_vanessa_bonus,
        vanessa_bonus_percentage=Decimal(vanessa_bonus_percentage) if vanessa_bonus_percentage is not None else None,
    )
    db_session.add(procedure)
    db_session.flush()
    return procedure


def create_payment_method(db_session: Session, name: str, display_order: int = 0) -> PaymentMethod:
    payment_method = PaymentMethod(name=name, display_order=display_order)
    db_session.add(payment_method)
    db_session.flush()
    return payment_method


def create_card_fee_rule(
    db_session: Session,
    payment_method: PaymentMethod,
    fee_percentage: str,
    min_value: str = "0",
    max_value: Optional[str] = None,
) -> CardFeeRule:
    rule = CardFeeRule(
        payment_method_id=payment_method.id,
        fee_percentage=Decimal(fee_percentage),
        min_value=Decimal(min_value),
        max_value=Decimal(max_value) if max_value is not None else None,
    )
    db_session.add(rule)
    db_session.flush()
    return rule


def create_fee_tier(
    db_session: Session,
    name: str,
    min_revenue: str,
    max_revenue: Optional[str] = None,
    priority: int = 0,
    rates: Iterable[Tuple[PaymentMethod, str]] = (),
) -> CardFeeTier:
    tier = CardFeeTier(
        name=name,
        min_revenue=Decimal(min_revenue),
        max_revenue=Decimal(max_revenue) if max_revenue is not None else None,
        priority=priority,
    )
    db_session.add(tier)
    db_session.flush()
    for payment_method, fee_percentage in rates:
        db_session.add(
            CardFeeTierRate(
                tier_id=tier.id,
                payment_method_id=payment_method.id,
                fee_percentage=Decimal(fee_percentage),
            )
        )
    db_session.flush()
    return tier


def create_setting(db_session: Session, key: str, value: str) -> SystemSetting:
    setting = SystemSetting(key=key, value=value)
    db_session.add(setting)
    db_session.flush()
    return setting


def set_owner(db_session: Session, owner: Professional) -> SystemSetting:
    return create_setting(db_session, SETTING_OWNER_PROFESSIONAL_ID, owner.id)


def create_split_rule(
    db_session: Session,
    distributions: Sequence[Tuple[Professional, str]],
    procedure: Optional[Procedure] = None,
    professional: Optional[Professional] = None,
    priority: int = 0,
    name: str = "",
) -> SplitRule:
    rule = SplitRule(
        name=name,
        procedure_id=procedure.id if procedure else None,
        professional_id=professional.id if professional else None,
        distributions=[
            {"professional_id": p.id, "percentage": float(percentage)} for p, percentage in distributions
        ],
        priority=priority,
    )
    db_session.add(rule)
    db_session.flush()
    return rule


def create_bonus_rule(
    db_session: Session,
    percentage: str,
    base_value: str = "net_value",
    procedure: Optional[Procedure] = None,
    professional: Optional[Professional] = None,
    name: str = "",
) -> BonusRule:
    rule = BonusRule(
        name=name,
        beneficiary_name="Vanessa",
        percentage=Decimal(percentage),
        base_value=base_value,
        procedure_id=procedure.id if procedure else None,
        professional_id=professional.id if professional else None,
    )
    db_session.add(rule)
    db_session.flush()
    return rule


def create_appointment(
    db_session: Session,
    professional: Professional,
    procedures: List[Procedure],
    payment_method: Optional[PaymentMethod],
    gross_value: str,
    appointment_date: date = date(2024, 3, 15),
    is_hospital: bool = False,
    net_value_input: Optional[str] = None,
    patient_name: str = "Test Patient",
) -> Appointment:
    """Create an appointment; more than one procedure also creates junction rows."""
    appointment = Appointment(
        date=appointment_date,
        patient_name=patient_name,
        professional_id=professional.id,
        procedure_id=procedures[0].id if procedures else None,
        payment_method_id=payment_method.id if payment_method else None,
        is_hospital=is_hospital,
        gross_value=Decimal(gross_value),
        net_value_input=Decimal(net_value_input) if net_value_input is not None else None,
    )
    db_session.add(appointment)
    db_session.flush()
    if len(procedures) > 1:
        for order, procedure in enumerate(procedures):
            db_session.add(
                AppointmentProcedure(
                    appointment_id=appointment.id,
                    procedure_id=procedure.id,
                    sequence_order=order,
                )
            )
        db_session.flush()
    return appointment


def create_expense(
    db_session: Session,
    name: str,
    amount: str,
    start_date: date,
    responsibility: Sequence[Tuple[Professional, str]],
    recurrence_type: str = "monthly",
    end_date: Optional[date] = None,
) -> Expense:
    expense = Expense(
        name=name,
        amount=Decimal(amount),
        recurrence_type=recurrence_type,
        start_date=start_date,
        end_date=end_date,
        responsibility=[{"professional_id": p.id, "percentage": float(pct)} for p, pct in responsibility],
    )
    db_session.add(expense)
    db_session.flush()
    return expense
