"""API routes for courier applicant onboarding."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from courierops.api.deps import Pagination, get_pagination
from courierops.core.database import get_db
from courierops.core.transitions import TERMINAL_STATUSES
from courierops.models.enums import CourierApplicationStatus, VehicleType
from courierops.schemas.courier_application import (
    ApproveCourierApplicationRequest,
    CourierApplicationListResponse,
    CourierApplicationResponse,
    CreateCourierApplicationRequest,
    RequestInfoRequest,
    StartReviewRequest,
    UpdateCourierApplicationRequest,
)
from courierops.schemas.errors import ErrorResponse
from courierops.schemas.lifecycle import (
    ActorRequest,
    AllowedTransitionsResponse,
    StatusHistoryResponse,
    TransitionRequest,
    history_to_response,
)
from courierops.services.courier_onboarding_service import CourierOnboardingService

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


async def _commit(db: AsyncSession, application) -> CourierApplicationResponse:
    # Build response before commit to avoid lazy loading issues
    response = CourierApplicationResponse.model_validate(application)
    await db.commit()
    return response


@router.post(
    "",
    response_model=CourierApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create courier application",
)
async def create_application(
    request: CreateCourierApplicationRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    """Start a courier application in 'draft' status.

    One open application is allowed per email address.
    """
    service = CourierOnboardingService(db)
    application = await service.create(request)
    return await _commit(db, application)


@router.get(
    "",
    response_model=CourierApplicationListResponse,
    summary="List courier applications",
)
async def list_applications(
    status: CourierApplicationStatus | None = Query(None),
    city: str | None = Query(None, max_length=100),
    vehicle_type: VehicleType | None = Query(None),
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationListResponse:
    service = CourierOnboardingService(db)
    applications, total = await service.list(
        status_filter=status,
        city=city,
        vehicle_type=vehicle_type,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return CourierApplicationListResponse(
        items=[CourierApplicationResponse.model_validate(a) for a in applications],
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.get(
    "/{reference}",
    response_model=CourierApplicationResponse,
    summary="Get courier application",
)
async def get_application(
    reference: str,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    service = CourierOnboardingService(db)
    application = await service.get(reference)
    return CourierApplicationResponse.model_validate(application)


@router.patch(
    "/{reference}",
    response_model=CourierApplicationResponse,
    summary="Update courier application",
)
async def update_application(
    reference: str,
    request: UpdateCourierApplicationRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    """Edit applicant details in 'draft' or 'info_requested' status."""
    service = CourierOnboardingService(db)
    application = await service.update(reference, request)
    return await _commit(db, application)


@router.post(
    "/{reference}/submit",
    response_model=CourierApplicationResponse,
    summary="Submit courier application",
)
async def submit_application(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    """Submit a draft, or resubmit after an information request.

    Requires personal details, a vehicle type, a licence number for motorised
    vehicles, accepted terms and background check consent.
    """
    service = CourierOnboardingService(db)
    application = await service.submit(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/review/start",
    response_model=CourierApplicationResponse,
    summary="Start application review",
)
async def start_review(
    reference: str,
    request: StartReviewRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    service = CourierOnboardingService(db)
    application = await service.start_review(
        reference,
        request.reviewer_id,
        request.actor_id,
        request.reason,
    )
    return await _commit(db, application)


@router.post(
    "/{reference}/request-info",
    response_model=CourierApplicationResponse,
    summary="Request more information",
)
async def request_info(
    reference: str,
    request: RequestInfoRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    service = CourierOnboardingService(db)
    application = await service.request_info(
        reference,
        request.details,
        request.actor_id,
        request.reason,
    )
    return await _commit(db, application)


@router.post(
    "/{reference}/approve",
    response_model=CourierApplicationResponse,
    summary="Approve courier application",
)
async def approve_application(
    reference: str,
    request: ApproveCourierApplicationRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    service = CourierOnboardingService(db)
    application = await service.approve(
        reference,
        request.actor_id,
        notes=request.notes,
        reason=request.reason,
    )
    return await _commit(db, application)


@router.post(
    "/{reference}/reject",
    response_model=CourierApplicationResponse,
    summary="Reject courier application",
)
async def reject_application(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    """Reject the application. A reason is required; 'rejected' is terminal."""
    service = CourierOnboardingService(db)
    application = await service.reject(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/activate",
    response_model=CourierApplicationResponse,
    summary="Activate courier",
)
async def activate_courier(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    service = CourierOnboardingService(db)
    application = await service.activate(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/suspend",
    response_model=CourierApplicationResponse,
    summary="Suspend courier",
)
async def suspend_courier(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    service = CourierOnboardingService(db)
    application = await service.suspend(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/reinstate",
    response_model=CourierApplicationResponse,
    summary="Reinstate suspended courier",
)
async def reinstate_courier(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    service = CourierOnboardingService(db)
    application = await service.reinstate(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/cancel",
    response_model=CourierApplicationResponse,
    summary="Withdraw courier application",
)
async def cancel_application(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    service = CourierOnboardingService(db)
    application = await service.cancel(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/transition",
    response_model=CourierApplicationResponse,
    summary="Change application status",
)
async def transition_application(
    reference: str,
    request: TransitionRequest,
    db: AsyncSession = Depends(get_db),
) -> CourierApplicationResponse:
    service = CourierOnboardingService(db)
    application = await service.transition(
        reference,
        request.target_status,
        request.reason,
        request.actor_id,
        expected_version=request.expected_version,
    )
    return await _commit(db, application)


@router.get(
    "/{reference}/history",
    response_model=list[StatusHistoryResponse],
    summary="Get status history",
)
async def get_history(
    reference: str,
    db: AsyncSession = Depends(get_db),
) -> list[StatusHistoryResponse]:
    service = CourierOnboardingService(db)
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
    service = CourierOnboardingService(db)
    application, allowed = await service.allowed_transitions(reference)
    return AllowedTransitionsResponse(
        reference=application.reference,
        current_status=application.status.value,
        allowed_transitions=[s.value for s in allowed],
        is_terminal=application.status in TERMINAL_STATUSES[service.ENTITY_TYPE],
    )
