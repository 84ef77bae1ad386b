"""Create courier onboarding tables

Revision ID: 002
Revises: 001
Create Date: 2026-01-12

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None

COURIER_STATUSES = (
    'draft', 'submitted', 'under_review', 'info_requested', 'approved',
    'active', 'suspended', 'rejected', 'cancelled',
)
VEHICLE_TYPES = ('bicycle', 'motorcycle', 'car', 'van', 'on_foot')


def upgrade() -> None:
    """Create courier application and status history tables."""
    op.execute(
        "CREATE TYPE courier_application_status AS ENUM ({})".format(
            ", ".join(f"'{s}'" for s in COURIER_STATUSES)
        )
    )
    op.execute(
        "CREATE TYPE vehicle_type AS ENUM ({})".format(
            ", ".join(f"'{v}'" for v in VEHICLE_TYPES)
        )
    )

    status_type = postgresql.ENUM(
        *COURIER_STATUSES, name='courier_application_status', create_type=False
    )

    op.create_table(
        'courier_applications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('reference', sa.String(32), nullable=False),
        sa.Column('status', status_type, nullable=False, server_default='draft'),
        sa.Column('version_id', sa.Integer, nullable=False, server_default='1'),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('date_of_birth', sa.Date, nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column(
            'vehicle_type',
            postgresql.ENUM(*VEHICLE_TYPES, name='vehicle_type', create_type=False),
            nullable=True,
        ),
        sa.Column('license_number', sa.String(100), nullable=True),
        sa.Column('terms_accepted', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('background_check_consent', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('reviewer_id', sa.String(100), nullable=True),
        sa.Column('review_notes', sa.Text, nullable=True),
        sa.Column('info_request_details', sa.Text, nullable=True),
        sa.Column('rejection_reason', sa.Text, nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('activated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('suspended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(100), nullable=False),
        sa.Column('updated_by', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )

    op.create_index('ix_courier_applications_reference', 'courier_applications', ['reference'], unique=True)
    op.create_index('ix_courier_applications_status', 'courier_applications', ['status'])
    op.create_index('ix_courier_applications_email', 'courier_applications', ['email'])

    op.create_table(
        'courier_application_status_history',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('application_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('courier_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sequence', sa.Integer, nullable=False),
        sa.Column('from_status', status_type, nullable=True),
        sa.Column('to_status', status_type, nullable=False),
        sa.Column('reason', sa.Text, nullable=True),
        sa.Column('changed_by', sa.String(100), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )

    op.create_index(
        'ix_courier_application_status_history_application_id',
        'courier_application_status_history',
        ['application_id'],
    )
    op.create_index(
        'idx_courier_history_application_sequence',
        'courier_application_status_history',
        ['application_id', 'sequence'],
        unique=True,
    )


def downgrade() -> None:
    """Drop courier onboarding tables."""
    op.drop_table('courier_application_status_history')
    op.drop_table('courier_applications')
    op.execute('DROP TYPE IF EXISTS vehicle_type')
    op.execute('DROP TYPE IF EXISTS courier_application_status')
