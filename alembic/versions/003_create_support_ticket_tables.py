"""Create support ticket tables

Revision ID: 003
Revises: 002
Create Date: 2026-01-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '003'
down_revision = '002'
branch_labels = None
depends_on = None

TICKET_STATUSES = (
    'open', 'assigned', 'in_progress', 'pending_customer', 'pending_internal',
    'escalated', 'resolved', 'closed', 'reopened', 'cancelled',
)
TICKET_PRIORITIES = ('low', 'normal', 'high', 'critical')
TICKET_CATEGORIES = (
    'shipment_tracking', 'delivery_issues', 'billing_inquiry',
    'account_management', 'service_disruption', 'damage_claims',
    'refund_request', 'technical_support', 'general_inquiry', 'complaint',
)


def _create_enum(name: str, values: tuple[str, ...]) -> None:
    op.execute(f"CREATE TYPE {name} AS ENUM ({', '.join(repr(v) for v in values)})")


def upgrade() -> None:
    """Create support ticket and status history tables."""
    _create_enum('ticket_status', TICKET_STATUSES)
    _create_enum('ticket_priority', TICKET_PRIORITIES)
    _create_enum('ticket_category', TICKET_CATEGORIES)

    status_type = postgresql.ENUM(*TICKET_STATUSES, name='ticket_status', create_type=False)

    op.create_table(
        'support_tickets',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('reference', sa.String(32), nullable=False),
        sa.Column('status', status_type, nullable=False, server_default='open'),
        sa.Column('version_id', sa.Integer, nullable=False, server_default='1'),
        sa.Column('customer_id', sa.String(100), nullable=False),
        sa.Column('customer_email', sa.String(255), nullable=True),
        sa.Column('customer_name', sa.String(200), nullable=True),
        sa.Column('subject', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column(
            'category',
            postgresql.ENUM(*TICKET_CATEGORIES, name='ticket_category', create_type=False),
            nullable=False,
        ),
        sa.Column(
            'priority',
            postgresql.ENUM(*TICKET_PRIORITIES, name='ticket_priority', create_type=False),
            nullable=False,
            server_default='normal',
        ),
        sa.Column('shipment_reference', sa.String(64), nullable=True),
        sa.Column('is_urgent', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('due_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('assigned_agent_id', sa.String(100), nullable=True),
        sa.Column('escalated_to', sa.String(100), nullable=True),
        sa.Column('resolution_notes', sa.Text, nullable=True),
        sa.Column('reopen_count', sa.Integer, nullable=False, server_default='0'),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('first_response_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('escalated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(100), nullable=False),
        sa.Column('updated_by', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )

    op.create_index('ix_support_tickets_reference', 'support_tickets', ['reference'], unique=True)
    op.create_index('ix_support_tickets_status', 'support_tickets', ['status'])
    op.create_index('ix_support_tickets_customer_id', 'support_tickets', ['customer_id'])
    op.create_index('ix_support_tickets_assigned_agent_id', 'support_tickets', ['assigned_agent_id'])

    op.create_table(
        'ticket_status_history',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('ticket_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('support_tickets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sequence', sa.Integer, nullable=False),
        sa.Column('from_status', status_type, nullable=True),
        sa.Column('to_status', status_type, nullable=False),
        sa.Column('reason', sa.Text, nullable=True),
        sa.Column('changed_by', sa.String(100), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )

    op.create_index('ix_ticket_status_history_ticket_id', 'ticket_status_history', ['ticket_id'])
    op.create_index(
        'idx_ticket_history_ticket_sequence',
        'ticket_status_history',
        ['ticket_id', 'sequence'],
        unique=True,
    )


def downgrade() -> None:
    """Drop support ticket tables."""
    op.drop_table('ticket_status_history')
    op.drop_table('support_tickets')
    op.execute('DROP TYPE IF EXISTS ticket_category')
    op.execute('DROP TYPE IF EXISTS ticket_priority')
    op.execute('DROP TYPE IF EXISTS ticket_status')
