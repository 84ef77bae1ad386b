"""Customer support ticket models."""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from courierops.models.base import LifecycleEntity, StatusHistoryEntry
from courierops.models.enums import TicketCategory, TicketPriority, TicketStatus


def _status_enum() -> SQLEnum:
    return SQLEnum(
        TicketStatus,
        name="ticket_status",
        create_type=False,
        values_callable=lambda x: [e.value for e in x],
    )


class SupportTicket(LifecycleEntity):
    """Customer support ticket raised about a shipment, bill or account."""

    __tablename__ = "support_tickets"

    status = Column(
        _status_enum(),
        nullable=False,
        default=TicketStatus.OPEN,
        index=True,
    )
    version_id = Column(Integer, nullable=False)

    customer_id = Column(String(100), nullable=False, index=True)
    customer_email = Column(String(255), nullable=True)
    customer_name = Column(String(200), nullable=True)
    subject = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(
        SQLEnum(
            TicketCategory,
            name="ticket_category",
            create_type=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    priority = Column(
        SQLEnum(
            TicketPriority,
            name="ticket_priority",
            create_type=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=TicketPriority.NORMAL,
    )
    shipment_reference = Column(String(64), nullable=True)
    is_urgent = Column(Boolean, nullable=False, default=False)
    due_at = Column(DateTime(timezone=True), nullable=True)

    assigned_agent_id = Column(String(100), nullable=True, index=True)
    escalated_to = Column(String(100), nullable=True)
    resolution_notes = Column(Text, nullable=True)
    reopen_count = Column(Integer, nullable=False, default=0)

    assigned_at = Column(DateTime(timezone=True), nullable=True)
    first_response_at = Column(DateTime(timezone=True), nullable=True)
    escalated_at = Column(DateTime(timezone=True), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    history = relationship(
        "TicketStatusHistory",
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="TicketStatusHistory.sequence.desc()",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<SupportTicket(reference={self.reference}, status={self.status})>"


class TicketStatusHistory(StatusHistoryEntry):
    """One row per status change of a support ticket."""

    __tablename__ = "ticket_status_history"

    ticket_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("support_tickets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_status = Column(_status_enum(), nullable=True)
    to_status = Column(_status_enum(), nullable=False)

    ticket = relationship("SupportTicket", back_populates="history")

    __table_args__ = (
        Index("idx_ticket_history_ticket_sequence", "ticket_id", "sequence", unique=True),
    )
