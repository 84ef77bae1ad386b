"""API routes for corporate customer onboarding applications."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from courierops.api.deps import Pagination, get_pagination
from courierops.core.database import get_db
from courierops.core.transitions import TERMINAL_STATUSES
from courierops.models.enums import CorporateOnboardingStatus
from courierops.schemas.corporate_application import (
    ApproveCorporateApplicationRequest,
    ContractNegotiationRequest,
    CorporateApplicationListResponse,
    CorporateApplicationResponse,
    CreateCorporateApplicationRequest,
    DocumentsUploadedRequest,
    KybResultRequest,
    UpdateCorporateApplicationRequest,
)
from courierops.schemas.errors import ErrorResponse
from courierops.schemas.lifecycle import (
    ActorRequest,
    AllowedTransitionsResponse,
    StatusHistoryResponse,
    TransitionRequest,
    history_to_response,
)
from courierops.services.corporate_onboarding_service import CorporateOnboardingService

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


def _to_response(application) -> CorporateApplicationResponse:
    return CorporateApplicationResponse.model_validate(application)


async def _commit(db: AsyncSession, application) -> CorporateApplicationResponse:
    # Build response before commit to avoid lazy loading issues
    response = _to_response(application)
    await db.commit()
    return response


@router.post(
    "",
    response_model=CorporateApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create corporate application",
)
async def create_application(
    request: CreateCorporateApplicationRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    """Start a corporate onboarding application in 'draft' status.

    A business email or registration number may only be used by one application.
    """
    service = CorporateOnboardingService(db)
    application = await service.create(request)
    return await _commit(db, application)


@router.get(
    "",
    response_model=CorporateApplicationListResponse,
    summary="List corporate applications",
)
async def list_applications(
    status: CorporateOnboardingStatus | None = Query(None),
    business_type: str | None = Query(None, max_length=50),
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationListResponse:
    """List applications newest first, optionally filtered by status and business type."""
    service = CorporateOnboardingService(db)
    applications, total = await service.list(
        status_filter=status,
        business_type=business_type,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return CorporateApplicationListResponse(
        items=[_to_response(a) for a in applications],
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.get(
    "/{reference}",
    response_model=CorporateApplicationResponse,
    summary="Get corporate application",
)
async def get_application(
    reference: str,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    service = CorporateOnboardingService(db)
    application = await service.get(reference)
    return _to_response(application)


@router.patch(
    "/{reference}",
    response_model=CorporateApplicationResponse,
    summary="Update corporate application",
)
async def update_application(
    reference: str,
    request: UpdateCorporateApplicationRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    """Edit business details.

    Only allowed in 'draft' or 'documents_required' status. Pass
    ``expected_version`` to guard against concurrent edits.
    """
    service = CorporateOnboardingService(db)
    application = await service.update(reference, request)
    return await _commit(db, application)


@router.post(
    "/{reference}/submit",
    response_model=CorporateApplicationResponse,
    summary="Submit corporate application",
)
async def submit_application(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    """Submit a draft application.

    Requires complete business and contact details and acceptance of terms,
    privacy policy and data processing.
    """
    service = CorporateOnboardingService(db)
    application = await service.submit(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/request-documents",
    response_model=CorporateApplicationResponse,
    summary="Request supporting documents",
)
async def request_documents(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    service = CorporateOnboardingService(db)
    application = await service.request_documents(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/documents-uploaded",
    response_model=CorporateApplicationResponse,
    summary="Record uploaded documents",
)
async def record_documents_uploaded(
    reference: str,
    request: DocumentsUploadedRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    service = CorporateOnboardingService(db)
    application = await service.record_documents_uploaded(
        reference,
        request.document_types,
        request.actor_id,
        request.reason,
    )
    return await _commit(db, application)


@router.post(
    "/{reference}/kyb/initiate",
    response_model=CorporateApplicationResponse,
    summary="Initiate KYB verification",
)
async def initiate_kyb(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    """Start KYB verification and issue the verification id."""
    service = CorporateOnboardingService(db)
    application = await service.initiate_kyb(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/kyb/result",
    response_model=CorporateApplicationResponse,
    summary="Record KYB verification result",
)
async def record_kyb_result(
    reference: str,
    request: KybResultRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    """Apply a KYB result. The verification id must match the one issued."""
    service = CorporateOnboardingService(db)
    application = await service.record_kyb_result(
        reference,
        request.verification_id,
        request.passed,
        request.actor_id,
        request.reason,
    )
    return await _commit(db, application)


@router.post(
    "/{reference}/contract-negotiation",
    response_model=CorporateApplicationResponse,
    summary="Start contract negotiation",
)
async def start_contract_negotiation(
    reference: str,
    request: ContractNegotiationRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    """Open contract negotiation.

    Volume discount: 15% from 10000 shipments per month, 10% from 5000,
    5% from 1000.
    """
    service = CorporateOnboardingService(db)
    application = await service.start_contract_negotiation(
        reference,
        request.expected_monthly_volume,
        request.actor_id,
        special_requirements=request.special_requirements,
        reason=request.reason,
    )
    return await _commit(db, application)


@router.post(
    "/{reference}/review/start",
    response_model=CorporateApplicationResponse,
    summary="Start manual review",
)
async def start_review(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    service = CorporateOnboardingService(db)
    application = await service.start_review(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/approve",
    response_model=CorporateApplicationResponse,
    summary="Approve corporate application",
)
async def approve_application(
    reference: str,
    request: ApproveCorporateApplicationRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    service = CorporateOnboardingService(db)
    application = await service.approve(
        reference,
        request.actor_id,
        contract_terms=request.contract_terms,
        reason=request.reason,
    )
    return await _commit(db, application)


@router.post(
    "/{reference}/reject",
    response_model=CorporateApplicationResponse,
    summary="Reject corporate application",
)
async def reject_application(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    """Reject the application. A reason is required; 'rejected' is terminal."""
    service = CorporateOnboardingService(db)
    application = await service.reject(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/account-setup",
    response_model=CorporateApplicationResponse,
    summary="Set up customer account",
)
async def setup_account(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    service = CorporateOnboardingService(db)
    application = await service.setup_account(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/activate",
    response_model=CorporateApplicationResponse,
    summary="Activate customer account",
)
async def activate_account(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    service = CorporateOnboardingService(db)
    application = await service.activate(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/suspend",
    response_model=CorporateApplicationResponse,
    summary="Suspend customer account",
)
async def suspend_account(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    service = CorporateOnboardingService(db)
    application = await service.suspend(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/reinstate",
    response_model=CorporateApplicationResponse,
    summary="Reinstate suspended account",
)
async def reinstate_account(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    service = CorporateOnboardingService(db)
    application = await service.reinstate(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/cancel",
    response_model=CorporateApplicationResponse,
    summary="Cancel corporate application",
)
async def cancel_application(
    reference: str,
    request: ActorRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    service = CorporateOnboardingService(db)
    application = await service.cancel(reference, request.actor_id, request.reason)
    return await _commit(db, application)


@router.post(
    "/{reference}/transition",
    response_model=CorporateApplicationResponse,
    summary="Change application status",
)
async def transition_application(
    reference: str,
    request: TransitionRequest,
    db: AsyncSession = Depends(get_db),
) -> CorporateApplicationResponse:
    """Move the application to ``target_status`` through the transition table.

    Returns 409 for an illegal transition, a transition to the current status
    or a stale ``expected_version``.
    """
    service = CorporateOnboardingService(db)
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
    """Status changes of the application, newest first."""
    service = CorporateOnboardingService(db)
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
    service = CorporateOnboardingService(db)
    application, allowed = await service.allowed_transitions(reference)
    return AllowedTransitionsResponse(
        reference=application.reference,
        current_status=application.status.value,
        allowed_transitions=[s.value for s in allowed],
        is_terminal=application.status in TERMINAL_STATUSES[service.ENTITY_TYPE],
    )
