"""Pydantic schemas for support ticket endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from courierops.models.enums import TicketCategory, TicketPriority, TicketStatus
from courierops.schemas.lifecycle import ActorRequest


class CreateTicketRequest(BaseModel):
    """Request schema for opening a support ticket.

    When ``category`` is omitted it is inferred from the subject and
    description.
    """

    model_config = ConfigDict(extra="forbid")

    actor_id: str = Field(..., min_length=1, max_length=100)
    customer_id: str = Field(..., min_length=1, max_length=100)
    customer_email: EmailStr | None = None
    customer_name: str | None = Field(None, max_length=200)
    subject: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=10000)
    category: TicketCategory | None = None
    priority: TicketPriority = TicketPriority.NORMAL
    shipment_reference: str | None = Field(None, max_length=64)
    is_urgent: bool = False

    @field_validator("subject", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty")
        return v


class UpdateTicketRequest(BaseModel):
    """Request schema for editing ticket details while the ticket is being worked."""

    model_config = ConfigDict(extra="forbid")

    actor_id: str = Field(..., min_length=1, max_length=100)
    customer_email: EmailStr | None = None
    customer_name: str | None = Field(None, max_length=200)
    subject: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=10000)
    category: TicketCategory | None = None
    priority: TicketPriority | None = None
    shipment_reference: str | None = Field(None, max_length=64)
    expected_version: int | None = Field(
        None,
        description="For optimistic locking - must match current version",
    )


class AssignTicketRequest(ActorRequest):
    """Request schema for assigning a ticket to an agent."""

    agent_id: str = Field(..., min_length=1, max_length=100)


class EscalateTicketRequest(ActorRequest):
    """Request schema for escalating a ticket."""

    escalated_to: str | None = Field(None, max_length=100)


class ResolveTicketRequest(ActorRequest):
    """Request schema for resolving a ticket."""

    resolution_notes: str = Field(..., max_length=10000)


class TicketResponse(BaseModel):
    """Response schema for a support ticket."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    reference: str
    status: TicketStatus
    version_id: int
    customer_id: str
    customer_email: str | None = None
    customer_name: str | None = None
    subject: str
    description: str
    category: TicketCategory
    priority: TicketPriority
    shipment_reference: str | None = None
    is_urgent: bool
    due_at: datetime | None = None
    assigned_agent_id: str | None = None
    escalated_to: str | None = None
    resolution_notes: str | None = None
    reopen_count: int
    assigned_at: datetime | None = None
    first_response_at: datetime | None = None
    escalated_at: datetime | None = None
    resolved_at: datetime | None = None
    closed_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_by: str
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime


class TicketListResponse(BaseModel):
    """Paginated list response for support tickets."""

    items: list[TicketResponse]
    total: int
    limit: int
    offset: int
