"""create resources, appointment types, schedules, holds and bookings

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'resources',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('organiser_id', postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('capacity > 0', name='ck_resources_capacity_positive'),
    )

    op.create_table(
        'appointment_types',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('organiser_id', postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('booking_fee', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('duration_minutes > 0', name='ck_appointment_types_duration_positive'),
    )

    op.create_table(
        'schedules',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('appointment_type_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('appointment_types.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_schedules_day_of_week'),
    )

    op.create_table(
        'slot_reservations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('appointment_type_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('appointment_types.id', ondelete='CASCADE'), nullable=False),
        sa.Column('resource_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('resources.id', ondelete='CASCADE'), nullable=True),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('renewed_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_slot_reservations_resource_window', 'slot_reservations', ['resource_id', 'start_time', 'end_time'])
    op.create_index('ix_slot_reservations_type_window', 'slot_reservations', ['appointment_type_id', 'start_time', 'end_time'])
    op.create_index('ix_slot_reservations_customer_type', 'slot_reservations', ['customer_id', 'appointment_type_id'])

    op.create_table(
        'bookings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('appointment_type_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('appointment_types.id', ondelete='CASCADE'), nullable=False),
        sa.Column('resource_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('resources.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column('assigned_user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED', name='booking_status_enum'), nullable=False, index=True),
        sa.Column('payment_status', sa.Enum('UNPAID', 'PAID', name='payment_status_enum'), nullable=False),
        sa.Column('payment_reference', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_bookings_resource_window', 'bookings', ['resource_id', 'start_time', 'end_time'])
    op.create_index('ix_bookings_type_window', 'bookings', ['appointment_type_id', 'start_time', 'end_time'])

    op.create_table(
        'question_responses',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('question_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('answer_value', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('question_responses')
    op.drop_table('bookings')
    op.execute('DROP TYPE payment_status_enum')
    op.execute('DROP TYPE booking_status_enum')
    op.drop_table('slot_reservations')
    op.drop_table('schedules')
    op.drop_table('appointment_types')
    op.drop_table('resources')
