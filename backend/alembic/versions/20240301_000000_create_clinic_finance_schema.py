"""create clinic finance schema

Revision ID: 20240301000000
Revises:
Create Date: 2024-03-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20240301000000'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _money(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=nullable)


def _percentage(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Numeric(7, 4), nullable=nullable)


def _timestamps(updated: bool = True) -> list:
    columns = [sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False)]
    if updated:
        columns.append(sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False))
    return columns


def upgrade() -> None:
    op.create_table(
        'professionals',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('bank_info', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'procedures',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        _money('fixed_cost'),
        sa.Column('has_vanessa_bonus', sa.Boolean(), nullable=False),
        _percentage('vanessa_bonus_percentage', nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'payment_methods',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_table(
        'card_fee_rules',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('payment_method_id', sa.String(36), sa.ForeignKey('payment_methods.id'), nullable=False),
        _money('min_value'),
        _money('max_value', nullable=True),
        _percentage('fee_percentage'),
        *_timestamps(),
    )
    op.create_index('idx_card_fee_rules_payment_method', 'card_fee_rules', ['payment_method_id'])

    op.create_table(
        'card_fee_tiers',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        _money('min_revenue'),
        _money('max_revenue', nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_table(
        'card_fee_tier_rates',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('tier_id', sa.String(36), sa.ForeignKey('card_fee_tiers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('payment_method_id', sa.String(36), sa.ForeignKey('payment_methods.id'), nullable=False),
        _percentage('fee_percentage'),
        *_timestamps(updated=False),
    )
    op.create_index('idx_card_fee_tier_rates_tier', 'card_fee_tier_rates', ['tier_id'])

    op.create_table(
        'bonus_rules',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('beneficiary_name', sa.String(255), nullable=False),
        sa.Column('procedure_id', sa.String(36), sa.ForeignKey('procedures.id'), nullable=True),
        sa.Column('professional_id', sa.String(36), sa.ForeignKey('professionals.id'), nullable=True),
        _percentage('percentage'),
        sa.Column('base_value', sa.String(50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'split_rules',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('procedure_id', sa.String(36), sa.ForeignKey('procedures.id'), nullable=True),
        sa.Column('professional_id', sa.String(36), sa.ForeignKey('professionals.id'), nullable=True),
        sa.Column('distributions', sa.JSON(), nullable=False),
        sa.Column('deduct_procedure_cost', sa.Boolean(), nullable=False),
        sa.Column('deduct_card_fee', sa.Boolean(), nullable=False),
        sa.Column('deduct_tax', sa.Boolean(), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'system_settings',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('key', sa.String(255), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_system_settings_key', 'system_settings', ['key'], unique=True)

    op.create_table(
        'appointments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('patient_name', sa.String(255), nullable=True),
        sa.Column('professional_id', sa.String(36), sa.ForeignKey('professionals.id'), nullable=True),
        sa.Column('procedure_id', sa.String(36), sa.ForeignKey('procedures.id'), nullable=True),
        sa.Column('payment_method_id', sa.String(36), sa.ForeignKey('payment_methods.id'), nullable=True),
        sa.Column('is_hospital', sa.Boolean(), nullable=False),
        _money('gross_value'),
        _money('net_value_input', nullable=True),
        _percentage('card_fee_percentage'),
        _money('card_fee_value'),
        _percentage('tax_percentage'),
        _money('tax_value'),
        _money('procedure_cost'),
        _money('total_procedure_cost'),
        _money('net_value'),
        _money('bonus_value'),
        _percentage('professional_share'),
        _money('final_value_owner'),
        _money('final_value_professional'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_appointments_date', 'appointments', ['date'])
    op.create_index('idx_appointments_professional', 'appointments', ['professional_id'])

    op.create_table(
        'appointment_procedures',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('appointment_id', sa.String(36), sa.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('procedure_id', sa.String(36), sa.ForeignKey('procedures.id'), nullable=False),
        sa.Column('sequence_order', sa.Integer(), nullable=False),
        *_timestamps(updated=False),
    )

    op.create_table(
        'expenses',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(50), nullable=True),
        _money('amount'),
        sa.Column('recurrence_type', sa.String(20), nullable=False),
        sa.Column('recurrence_interval', sa.Integer(), nullable=True),
        sa.Column('recurrence_unit', sa.String(20), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('responsibility', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('expenses')
    op.drop_table('appointment_procedures')
    op.drop_index('idx_appointments_professional', table_name='appointments')
    op.drop_index('idx_appointments_date', table_name='appointments')
    op.drop_table('appointments')
    op.drop_index('ix_system_settings_key', table_name='system_settings')
    op.drop_table('system_settings')
    op.drop_table('split_rules')
    op.drop_table('bonus_rules')
    op.drop_index('idx_card_fee_tier_rates_tier', table_name='card_fee_tier_rates')
    op.drop_table('card_fee_tier_rates')
    op.drop_table('card_fee_tiers')
    op.drop_index('idx_card_fee_rules_payment_method', table_name='card_fee_rules')
    op.drop_table('card_fee_rules')
    op.drop_table('payment_methods')
    op.drop_table('procedures')
    op.drop_table('professionals')
