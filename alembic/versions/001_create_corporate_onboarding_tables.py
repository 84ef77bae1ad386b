"""Create corporate onboarding tables

Revision ID: 001
Revises:
Create Date: 2026-01-12

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

CORPORATE_STATUSES = (
    'draft', 'submitted', 'documents_required', 'documents_uploaded',
    'kyb_in_progress', 'kyb_approved', 'kyb_failed', 'contract_negotiation',
    'under_review', 'approved', 'account_setup', 'active', 'rejected',
    'suspended', 'cancelled',
)


def upgrade() -> None:
    """Create corporate application and status history tables."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    values = ", ".join(f"'{s}'" for s in CORPORATE_STATUSES)
    op.execute(f"CREATE TYPE corporate_onboarding_status AS ENUM ({values})")

    status_type = postgresql.ENUM(
        *CORPORATE_STATUSES, name='corporate_onboarding_status', create_type=False
    )

    op.create_table(
        'corporate_applications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('reference', sa.String(32), nullable=False),
        sa.Column('status', status_type, nullable=False, server_default='draft'),
        sa.Column('version_id', sa.Integer, nullable=False, server_default='1'),
        sa.Column('business_name', sa.String(200), nullable=False),
        sa.Column('business_type', sa.String(50), nullable=True),
        sa.Column('industry_sector', sa.String(100), nullable=True),
        sa.Column('business_email', sa.String(255), nullable=False),
        sa.Column('business_phone', sa.String(50), nullable=True),
        sa.Column('registration_number', sa.String(100), nullable=True),
        sa.Column('tax_identification_number', sa.String(100), nullable=True),
        sa.Column('business_address', sa.Text, nullable=True),
        sa.Column('website_url', sa.String(255), nullable=True),
        sa.Column('business_description', sa.Text, nullable=True),
        sa.Column('contact_first_name', sa.String(100), nullable=True),
        sa.Column('contact_last_name', sa.String(100), nullable=True),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('contact_phone', sa.String(50), nullable=True),
        sa.Column('terms_accepted', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('privacy_policy_accepted', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('data_processing_consent', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('uploaded_document_types', sa.Text, nullable=True),
        sa.Column('kyb_verification_id', sa.String(64), nullable=True),
        sa.Column('expected_monthly_volume', sa.Integer, nullable=True),
        sa.Column('volume_discount', sa.Numeric(4, 2), nullable=True),
        sa.Column('special_requirements', sa.Text, nullable=True),
        sa.Column('contract_terms', sa.Text, nullable=True),
        sa.Column('rejection_reason', sa.Text, nullable=True),
        sa.Column('account_id', sa.String(64), nullable=True),
        sa.Column('billing_account_id', sa.String(64), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('kyb_started_at', sa.DateTime(timezone=True), nullable=True),
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

    op.create_index('ix_corporate_applications_reference', 'corporate_applications', ['reference'], unique=True)
    op.create_index('ix_corporate_applications_status', 'corporate_applications', ['status'])
    op.create_index('idx_corporate_applications_email', 'corporate_applications', ['business_email'])
    op.create_index('idx_corporate_applications_registration', 'corporate_applications', ['registration_number'])

    # Append-only status history
    op.create_table(
        'corporate_application_status_history',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('application_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('corporate_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sequence', sa.Integer, nullable=False),
        sa.Column('from_status', status_type, nullable=True),
        sa.Column('to_status', status_type, nullable=False),
        sa.Column('reason', sa.Text, nullable=True),
        sa.Column('changed_by', sa.String(100), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )

    op.create_index(
        'ix_corporate_application_status_history_application_id',
        'corporate_application_status_history',
        ['application_id'],
    )
    op.create_index(
        'idx_corporate_history_application_sequence',
        'corporate_application_status_history',
        ['application_id', 'sequence'],
        unique=True,
    )


def downgrade() -> None:
    """Drop corporate onboarding tables."""
    op.drop_table('corporate_application_status_history')
    op.drop_table('corporate_applications')
    op.execute('DROP TYPE IF EXISTS corporate_onboarding_status')
