"""Support ticket service: use cases of a customer support ticket."""
from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from courierops.core.definitions import SUPPORT_TICKET_LIFECYCLE
from courierops.core.exceptions import ConcurrentModificationError, NotFoundError, ValidationError
from courierops.core.lifecycle import StatusLifecycleEngine
from courierops.core.preconditions import require_status_in, require_text
from courierops.core.reference import generate_reference
from courierops.models.base import utcnow
from courierops.models.enums import TicketCategory, TicketPriority, TicketStatus
from courierops.models.support_ticket import SupportTicket, TicketStatusHistory
from courierops.schemas.support_ticket import CreateTicketRequest, UpdateTicketRequest
from courierops.services.notification_service import NotificationService

_Status = TicketStatus

# First response SLA per priority
RESPONSE_SLA = {
    TicketPriority.CRITICAL: timedelta(hours=1),
    TicketPriority.HIGH: timedelta(hours=4),
    TicketPriority.NORMAL: timedelta(hours=8),
    TicketPriority.LOW: timedelta(hours=24),
}

# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS = (
    (TicketCategory.SERVICE_DISRUPTION, ("outage", "not working", "system error", "down")),
    (TicketCategory.SHIPMENT_TRACKING, ("tracking", "track", "where is", "status")),
    (TicketCategory.DELIVERY_ISSUES, ("delivery", "delivered", "not received")),
    (TicketCategory.BILLING_INQUIRY, ("invoice", "bill", "payment", "charge")),
    (TicketCategory.DAMAGE_CLAIMS, ("damage", "broken", "lost", "missing")),
    (TicketCategory.REFUND_REQUEST, ("refund", "money back", "return")),
    (TicketCategory.ACCOUNT_MANAGEMENT, ("account", "login", "password", "profile")),
    (TicketCategory.TECHNICAL_SUPPORT, ("website", "technical", "bug", "app")),
    (TicketCategory.COMPLAINT, ("complaint", "dissatisfied", "poor service", "terrible")),
)


def infer_category(*texts: str | None) -> TicketCategory:
    """Guess a ticket category from free text, defaulting to a general inquiry."""
    content = " ".join(t for t in texts if t).lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in content for keyword in keywords):
            return category
    return TicketCategory.GENERAL_INQUIRY


def calculate_due_at(priority: TicketPriority, start: datetime | None = None) -> datetime:
    """Return when a response is due for a ticket of ``priority``."""
    return (start or utcnow()) + RESPONSE_SLA[priority]


class SupportTicketService:
    """Service for the support ticket workflow."""

    REFERENCE_PREFIX = "TKT"
    ENTITY_TYPE = SUPPORT_TICKET_LIFECYCLE.entity_type

    EDITABLE_STATUSES = (
        _Status.OPEN,
        _Status.ASSIGNED,
        _Status.IN_PROGRESS,
        _Status.PENDING_CUSTOMER,
        _Status.PENDING_INTERNAL,
        _Status.ESCALATED,
        _Status.REOPENED,
    )

    # Targets whose action needs input a generic transition cannot carry
    DEDICATED_ACTIONS = {
        _Status.ASSIGNED: "assign",
        _Status.RESOLVED: "resolve",
    }

    def __init__(self, db: AsyncSession, notifier: NotificationService | None = None):
        """Initialize support ticket service.

        Args:
            db: Database session
            notifier: Notification service (defaults to the logging notifier)
        """
        self.db = db
        self.engine = StatusLifecycleEngine(db, SUPPORT_TICKET_LIFECYCLE)
        self.notifier = notifier or NotificationService()

    async def create(self, request: CreateTicketRequest) -> SupportTicket:
        """Open a new ticket.

        Urgent tickets of normal or low priority are raised to high priority.

        Args:
            request: Ticket creation request

        Returns:
            Created SupportTicket instance
        """
        priority = request.priority
        if request.is_urgent and TicketPriority.get_level(priority) < TicketPriority.get_level(
            TicketPriority.HIGH
        ):
            priority = TicketPriority.HIGH

        category = request.category or infer_category(request.subject, request.description)
        now = utcnow()

        ticket = SupportTicket(
            reference=generate_reference(self.REFERENCE_PREFIX, now),
            status=SUPPORT_TICKET_LIFECYCLE.initial_status,
            customer_id=request.customer_id,
            customer_email=request.customer_email,
            customer_name=request.customer_name,
            subject=request.subject,
            description=request.description,
            category=category,
            priority=priority,
            shipment_reference=request.shipment_reference,
            is_urgent=request.is_urgent,
            due_at=calculate_due_at(priority, now),
            reopen_count=0,
            created_at=now,
            updated_at=now,
            created_by=request.actor_id,
            updated_by=request.actor_id,
        )
        self.db.add(ticket)
        await self.engine.flush(ticket)
        await self.engine.record_creation(ticket, request.actor_id, "Ticket opened")

        self.notifier.status_changed(
            self.ENTITY_TYPE,
            ticket.reference,
            None,
            ticket.status,
            recipient=ticket.customer_email or ticket.customer_id,
        )
        return ticket

    async def get(self, reference: str) -> SupportTicket:
        """Get ticket by reference code.

        Raises:
            NotFoundError: If no ticket has this reference
        """
        query = select(SupportTicket).where(SupportTicket.reference == reference)
        result = await self.db.execute(query)
        ticket = result.scalar_one_or_none()

        if not ticket:
            raise NotFoundError(self.ENTITY_TYPE, reference)

        return ticket

    async def list(
        self,
        status_filter: TicketStatus | None = None,
        customer_id: str | None = None,
        assigned_agent_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[SupportTicket], int]:
        """List tickets, newest first.

        Returns:
            Tuple of (tickets list, total count)
        """
        filters = []
        if status_filter:
            filters.append(SupportTicket.status == status_filter)
        if customer_id:
            filters.append(SupportTicket.customer_id == customer_id)
        if assigned_agent_id:
            filters.append(SupportTicket.assigned_agent_id == assigned_agent_id)

        count_query = select(func.count()).select_from(SupportTicket).where(*filters)
        total = await self.db.scalar(count_query)

        query = (
            select(SupportTicket)
            .where(*filters)
            .order_by(SupportTicket.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0

    async def update(self, reference: str, request: UpdateTicketRequest) -> SupportTicket:
        """Edit ticket details while the ticket is still being worked.

        A priority change recomputes the response due date from the ticket's
        creation time.

        Raises:
            NotFoundError: If ticket not found
            ValidationError: If the ticket is resolved, closed or cancelled
            ConcurrentModificationError: If ``expected_version`` is stale
        """
        ticket = await self.get(reference)
        require_status_in(ticket, self.EDITABLE_STATUSES, "update ticket")

        if request.expected_version is not None and request.expected_version != ticket.version_id:
            raise ConcurrentModificationError(
                f"{self.ENTITY_TYPE} {reference} was modified by another request",
                {
                    "expected_version": request.expected_version,
                    "current_version": ticket.version_id,
                },
            )

        update_data = request.model_dump(
            exclude_unset=True,
            exclude={"actor_id", "expected_version"},
        )
        priority = update_data.get("priority")
        if priority is not None and priority != ticket.priority:
            update_data["due_at"] = calculate_due_at(priority, ticket.created_at)

        for field, value in update_data.items():
            if value is not None:
                setattr(ticket, field, value)
        ticket.updated_by = request.actor_id

        await self.engine.flush(ticket)
        return ticket

    async def _apply(
        self,
        ticket: SupportTicket,
        target: TicketStatus,
        reason: str | None,
        actor_id: str,
        *,
        expected_version: int | None = None,
        changes: dict | None = None,
    ) -> SupportTicket:
        from_status = ticket.status
        await self.engine.apply_transition(
            ticket,
            target,
            reason,
            actor_id,
            expected_version=expected_version,
            changes=changes,
        )
        self.notifier.status_changed(
            self.ENTITY_TYPE,
            ticket.reference,
            from_status,
            ticket.status,
            recipient=ticket.customer_email or ticket.customer_id,
            reason=reason,
        )
        return ticket

    @staticmethod
    def _escalation_changes(ticket: SupportTicket, escalated_to: str | None = None) -> dict:
        # One priority level up, due date restarts from now
        priority = ticket.priority.escalated()
        changes = {
            "priority": priority,
            "due_at": calculate_due_at(priority),
        }
        if escalated_to:
            changes["escalated_to"] = escalated_to
        return changes

    @staticmethod
    def _reopen_changes(ticket: SupportTicket) -> dict:
        return {"reopen_count": (ticket.reopen_count or 0) + 1}

    async def assign(
        self,
        reference: str,
        agent_id: str,
        actor_id: str,
        reason: str | None = None,
    ) -> SupportTicket:
        """Assign the ticket to a support agent."""
        ticket = await self.get(reference)
        agent_id = require_text(agent_id, "Agent")
        return await self._apply(
            ticket,
            _Status.ASSIGNED,
            reason or f"Assigned to {agent_id}",
            actor_id,
            changes={"assigned_agent_id": agent_id},
        )

    async def start_work(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> SupportTicket:
        ticket = await self.get(reference)
        return await self._apply(
            ticket,
            _Status.IN_PROGRESS,
            reason or "Work started",
            actor_id,
        )

    async def await_customer(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> SupportTicket:
        ticket = await self.get(reference)
        return await self._apply(
            ticket,
            _Status.PENDING_CUSTOMER,
            reason or "Waiting for customer response",
            actor_id,
        )

    async def await_internal(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> SupportTicket:
        ticket = await self.get(reference)
        return await self._apply(
            ticket,
            _Status.PENDING_INTERNAL,
            reason or "Waiting for internal team",
            actor_id,
        )

    async def escalate(
        self,
        reference: str,
        actor_id: str,
        escalated_to: str | None = None,
        reason: str | None = None,
    ) -> SupportTicket:
        """Escalate the ticket.

        Priority is raised one level and the response due date is recomputed
        from the escalation time.
        """
        ticket = await self.get(reference)
        return await self._apply(
            ticket,
            _Status.ESCALATED,
            reason or "Ticket escalated",
            actor_id,
            changes=self._escalation_changes(ticket, escalated_to),
        )

    async def resolve(
        self,
        reference: str,
        resolution_notes: str | None,
        actor_id: str,
        reason: str | None = None,
    ) -> SupportTicket:
        """Resolve the ticket.

        Raises:
            ValidationError: If resolution notes are missing
        """
        ticket = await self.get(reference)
        notes = require_text(resolution_notes, "Resolution notes")
        return await self._apply(
            ticket,
            _Status.RESOLVED,
            reason or "Ticket resolved",
            actor_id,
            changes={"resolution_notes": notes},
        )

    async def close(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> SupportTicket:
        ticket = await self.get(reference)
        return await self._apply(
            ticket,
            _Status.CLOSED,
            reason or "Ticket closed",
            actor_id,
        )

    async def reopen(
        self,
        reference: str,
        actor_id: str,
        reason: str | None,
    ) -> SupportTicket:
        """Reopen a resolved or closed ticket.

        Lifecycle timestamps of the earlier resolution are kept.

        Raises:
            ValidationError: If no reason is given
        """
        ticket = await self.get(reference)
        reason = require_text(reason, "Reopen reason")
        return await self._apply(
            ticket,
            _Status.REOPENED,
            reason,
            actor_id,
            changes=self._reopen_changes(ticket),
        )

    async def cancel(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> SupportTicket:
        ticket = await self.get(reference)
        return await self._apply(
            ticket,
            _Status.CANCELLED,
            reason or "Ticket cancelled",
            actor_id,
        )

    async def transition(
        self,
        reference: str,
        target_status: TicketStatus | str,
        reason: str | None,
        actor_id: str,
        expected_version: int | None = None,
    ) -> SupportTicket:
        """Apply a generic status transition.

        Escalation and reopening apply the same field changes as their
        dedicated actions. Assignment and resolution need an agent or
        resolution notes, so they are refused here.

        Raises:
            NotFoundError: If ticket not found
            ValidationError: If the status is unknown or a precondition is unmet
            InvalidTransitionError: If the transition is not in the table
            NoOpTransitionError: If the ticket already has this status
            ConcurrentModificationError: If ``expected_version`` is stale
        """
        ticket = await self.get(reference)
        target = self.engine.coerce_status(target_status)
        self.engine.check_transition(ticket, target, expected_version)

        action = self.DEDICATED_ACTIONS.get(target)
        if action:
            raise ValidationError(
                f"Transition to '{target.value}' must use the {action} action",
                {"target_status": target.value, "action": action},
            )

        changes = None
        if target == _Status.ESCALATED:
            changes = self._escalation_changes(ticket)
        elif target == _Status.REOPENED:
            reason = require_text(reason, "Reopen reason")
            changes = self._reopen_changes(ticket)
        return await self._apply(
            ticket,
            target,
            reason,
            actor_id,
            expected_version=expected_version,
            changes=changes,
        )

    async def history(self, reference: str) -> list[TicketStatusHistory]:
        """Get status history, newest first."""
        ticket = await self.get(reference)
        return await self.engine.get_history(ticket.id)

    async def allowed_transitions(
        self,
        reference: str,
    ) -> tuple[SupportTicket, list[Enum]]:
        ticket = await self.get(reference)
        return ticket, self.engine.allowed_transitions(ticket.status)
