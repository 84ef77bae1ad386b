"""API routes for customer support tickets."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from courierops.api.deps import Pagination, get_pagination
from courierops.core.database import get_db
from courierops.core.transitions import TERMINAL_STATUSES
from courierops.models.enums import TicketStatus
from courierops.schemas.errors import ErrorResponse
from courierops.schemas.lifecycle import (
    ActorRequest,
    AllowedTransitionsResponse,
    StatusHistoryResponse,
    TransitionRequest,
    history_to_response,
)
from courierops.schemas.support_ticket import (
    AssignTicketRequest,
    CreateTicketRequest,
    EscalateTicketRequest,
    ResolveTicketRequest,
    TicketListResponse,
    TicketResponse,
    UpdateTicketRequest,
)
from courierops.services.support_ticket_service import SupportTicketService

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


async def _commit(db: AsyncSession, ticket) -> TicketResponse:
    # Build response before commit to avoid lazy loading issues
    response = TicketResponse.model_validate(ticket)
    await db.commit()
    return response


@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open support ticket",
)
async def create_ticket(
    request: CreateTicketRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """Open a ticket in 'open' status.

    The category is inferred from subject and description when omitted. The
    response due date follows the priority SLA (critical 1h, high 4h,
    normal 8h, low 24h).
    """
    service = SupportTicketService(db)
    ticket = await service.create(request)
    return await _commit(db, ticket)


@router.get(
    "",
    response_model=TicketListResponse,
    summary="List support tickets",
)
async def list_tickets(
    status: TicketStatus | None = Query(None),
    customer_id: str | None = Query(None, max_length=100),
    assigned_agent_id: str | None = Query(None, max_length=100),
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
) -> TicketListResponse:
    service = SupportTicketService(db)
    tickets, total = await service.list(
        status_filter=status,
        customer_id=customer_id,
        assigned_agent_id=assigned_agent_id,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return TicketListResponse(
        items=[TicketResponse.model_validate(t) for t in tickets],
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.get(
    "/{reference}",
    response_model=TicketResponse,
    summary="Get support ticket",
)
async def get_ticket(
    reference: str,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = SupportTicketService(db)
    ticket = await service.get(reference)
    return TicketResponse.model_validate(ticket)


@router.patch(
    "/{reference}",
    response_model=TicketResponse,
    summary="Update support ticket",
)
async def update_ticket(
    reference: str,
    request: UpdateTicketRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """Edit ticket details. Not allowed once resolved, closed or cancelled."""
    service = SupportTicketService(db)
    ticket = await service.update(reference, request)
    return await _commit(db, ticket)


@router.post(
    "/{reference}/assign",
    response_model=TicketResponse,
    summary="Assign ticket to agent",
)
async def assign_ticket(
    reference: str,
    request: AssignTicketRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = SupportTicketService(db)
    ticket = await service.assign(reference, request.agent_id, request.actor_id, request.reason)
    return await _commit(db, ticket)


@router.post(
    "/{reference}/start",
    response_model=TicketResponse,
    summary="Start working on ticket",
)
async def start_work(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = SupportTicketService(db)
    ticket = await service.start_work(reference, request.actor_id, request.reason)
    return await _commit(db, ticket)


@router.post(
    "/{reference}/await-customer",
    response_model=TicketResponse,
    summary="Wait for customer response",
)
async def await_customer(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = SupportTicketService(db)
    ticket = await service.await_customer(reference, request.actor_id, request.reason)
    return await _commit(db, ticket)


@router.post(
    "/{reference}/await-internal",
    response_model=TicketResponse,
    summary="Wait for internal team",
)
async def await_internal(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = SupportTicketService(db)
    ticket = await service.await_internal(reference, request.actor_id, request.reason)
    return await _commit(db, ticket)


@router.post(
    "/{reference}/escalate",
    response_model=TicketResponse,
    summary="Escalate ticket",
)
async def escalate_ticket(
    reference: str,
    request: EscalateTicketRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """Escalate the ticket, raising its priority one level and recomputing the due date."""
    service = SupportTicketService(db)
    ticket = await service.escalate(
        reference,
        request.actor_id,
        escalated_to=request.escalated_to,
        reason=request.reason,
    )
    return await _commit(db, ticket)


@router.post(
    "/{reference}/resolve",
    response_model=TicketResponse,
    summary="Resolve ticket",
)
async def resolve_ticket(
    reference: str,
    request: ResolveTicketRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = SupportTicketService(db)
    ticket = await service.resolve(
        reference,
        request.resolution_notes,
        request.actor_id,
        request.reason,
    )
    return await _commit(db, ticket)


@router.post(
    "/{reference}/close",
    response_model=TicketResponse,
    summary="Close ticket",
)
async def close_ticket(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = SupportTicketService(db)
    ticket = await service.close(reference, request.actor_id, request.reason)
    return await _commit(db, ticket)


@router.post(
    "/{reference}/reopen",
    response_model=TicketResponse,
    summary="Reopen ticket",
)
async def reopen_ticket(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """Reopen a resolved or closed ticket. A reason is required."""
    service = SupportTicketService(db)
    ticket = await service.reopen(reference, request.actor_id, request.reason)
    return await _commit(db, ticket)


@router.post(
    "/{reference}/cancel",
    response_model=TicketResponse,
    summary="Cancel ticket",
)
async def cancel_ticket(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = SupportTicketService(db)
    ticket = await service.cancel(reference, request.actor_id, request.reason)
    return await _commit(db, ticket)


@router.post(
    "/{reference}/transition",
    response_model=TicketResponse,
    summary="Change ticket status",
)
async def transition_ticket(
    reference: str,
    request: TransitionRequest,
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    service = SupportTicketService(db)
    ticket = await service.transition(
        reference,
        request.target_status,
        request.reason,
        request.actor_id,
        expected_version=request.expected_version,
    )
    return await _commit(db, ticket)


@router.get(
    "/{reference}/history",
    response_model=list[StatusHistoryResponse],
    summary="Get status history",
)
async def get_history(
    reference: str,
    db: AsyncSession = Depends(get_db),
) -> list[StatusHistoryResponse]:
    service = SupportTicketService(db)
    entries = await service.history(reference)
    return [history_to_response(e) for e in entries]


@router.get(
    "/{reference}/transitions",
    response_model=AllowedTransitionsResponse,
    summary="Get allowed transitions",
)
async def get_allowed_transitions(
    reference: str,
    db: AsyncSession = Depends(get_db),
) -> AllowedTransitionsResponse:
    service = SupportTicketService(db)
    ticket, allowed = await service.allowed_transitions(reference)
    return AllowedTransitionsResponse(
        reference=ticket.reference,
        current_status=ticket.status.value,
        allowed_transitions=[s.value for s in allowed],
        is_terminal=ticket.status in TERMINAL_STATUSES[service.ENTITY_TYPE],
    )
