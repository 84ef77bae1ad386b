"""Courier onboarding service: use cases of a courier applicant."""
from __future__ import annotations

from enum import Enum

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from courierops.core.definitions import COURIER_APPLICATION_LIFECYCLE
from courierops.core.exceptions import (
    ConcurrentModificationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from courierops.core.lifecycle import StatusLifecycleEngine
from courierops.core.preconditions import (
    require_consents,
    require_fields,
    require_status_in,
    require_text,
)
from courierops.core.reference import generate_reference
from courierops.models.courier_application import (
    CourierApplication,
    CourierApplicationStatusHistory,
)
from courierops.models.enums import CourierApplicationStatus, VehicleType
from courierops.schemas.courier_application import (
    CreateCourierApplicationRequest,
    UpdateCourierApplicationRequest,
)
from courierops.services.notification_service import NotificationService

_Status = CourierApplicationStatus


class CourierOnboardingService:
    """Service for the courier applicant onboarding workflow."""

    REFERENCE_PREFIX = "COUR"
    ENTITY_TYPE = COURIER_APPLICATION_LIFECYCLE.entity_type

    EDITABLE_STATUSES = (_Status.DRAFT, _Status.INFO_REQUESTED)

    REQUIRED_FOR_SUBMISSION = {
        "first_name": "First name",
        "last_name": "Last name",
        "email": "Email",
        "phone": "Phone",
        "date_of_birth": "Date of birth",
        "city": "City",
        "vehicle_type": "Vehicle type",
    }

    REQUIRED_CONSENTS = {
        "terms_accepted": "Terms and conditions",
        "background_check_consent": "Background check consent",
    }

    def __init__(self, db: AsyncSession, notifier: NotificationService | None = None):
        """Initialize courier onboarding service.

        Args:
            db: Database session
            notifier: Notification service (defaults to the logging notifier)
        """
        self.db = db
        self.engine = StatusLifecycleEngine(db, COURIER_APPLICATION_LIFECYCLE)
        self.notifier = notifier or NotificationService()

    async def _check_duplicate_email(
        self,
        email: str,
        exclude_reference: str | None = None,
    ) -> None:
        """Allow one open application per email address.

        Rejected and cancelled applicants may apply again.

        Raises:
            ValidationError: If another open application uses the email
        """
        query = select(CourierApplication).where(
            func.lower(CourierApplication.email) == email.lower(),
            CourierApplication.status.not_in([_Status.REJECTED, _Status.CANCELLED]),
        )
        if exclude_reference:
            query = query.where(CourierApplication.reference != exclude_reference)
        result = await self.db.execute(query.limit(1))
        existing = result.scalar_one_or_none()

        if existing:
            raise ValidationError(
                "An open application already exists for this email",
                {"existing_reference": existing.reference},
            )

    async def create(self, request: CreateCourierApplicationRequest) -> CourierApplication:
        """Create a new courier application in DRAFT.

        Args:
            request: Application creation request

        Returns:
            Created CourierApplication instance

        Raises:
            ValidationError: If the applicant already has an open application
        """
        await self._check_duplicate_email(request.email)

        application = CourierApplication(
            reference=generate_reference(self.REFERENCE_PREFIX),
            status=COURIER_APPLICATION_LIFECYCLE.initial_status,
            created_by=request.actor_id,
            updated_by=request.actor_id,
            **request.model_dump(exclude={"actor_id"}),
        )
        self.db.add(application)
        await self.engine.flush(application)
        await self.engine.record_creation(application, request.actor_id)

        self.notifier.status_changed(
            self.ENTITY_TYPE,
            application.reference,
            None,
            application.status,
            recipient=application.email,
        )
        return application

    async def get(self, reference: str) -> CourierApplication:
        """Get application by reference code.

        Raises:
            NotFoundError: If no application has this reference
        """
        query = select(CourierApplication).where(CourierApplication.reference == reference)
        result = await self.db.execute(query)
        application = result.scalar_one_or_none()

        if not application:
            raise NotFoundError(self.ENTITY_TYPE, reference)

        return application

    async def list(
        self,
        status_filter: CourierApplicationStatus | None = None,
        city: str | None = None,
        vehicle_type: VehicleType | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[CourierApplication], int]:
        """List applications, newest first.

        Returns:
            Tuple of (applications list, total count)
        """
        filters = []
        if status_filter:
            filters.append(CourierApplication.status == status_filter)
        if city:
            filters.append(func.lower(CourierApplication.city) == city.lower())
        if vehicle_type:
            filters.append(CourierApplication.vehicle_type == vehicle_type)

        count_query = select(func.count()).select_from(CourierApplication).where(*filters)
        total = await self.db.scalar(count_query)

        query = (
            select(CourierApplication)
            .where(*filters)
            .order_by(CourierApplication.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0

    async def update(
        self,
        reference: str,
        request: UpdateCourierApplicationRequest,
    ) -> CourierApplication:
        """Edit applicant details in DRAFT or INFO_REQUESTED.

        Raises:
            NotFoundError: If application not found
            ValidationError: If the application is not editable
            ConcurrentModificationError: If ``expected_version`` is stale
        """
        application = await self.get(reference)
        require_status_in(application, self.EDITABLE_STATUSES, "update application")

        if (
            request.expected_version is not None
            and request.expected_version != application.version_id
        ):
            raise ConcurrentModificationError(
                f"{self.ENTITY_TYPE} {reference} was modified by another request",
                {
                    "expected_version": request.expected_version,
                    "current_version": application.version_id,
                },
            )

        update_data = request.model_dump(
            exclude_unset=True,
            exclude={"actor_id", "expected_version"},
        )
        if update_data.get("email"):
            await self._check_duplicate_email(update_data["email"], exclude_reference=reference)

        for field, value in update_data.items():
            setattr(application, field, value)
        application.updated_by = request.actor_id

        await self.engine.flush(application)
        return application

    async def _apply(
        self,
        application: CourierApplication,
        target: CourierApplicationStatus,
        reason: str | None,
        actor_id: str,
        *,
        expected_version: int | None = None,
        changes: dict | None = None,
    ) -> CourierApplication:
        from_status = application.status
        await self.engine.apply_transition(
            application,
            target,
            reason,
            actor_id,
            expected_version=expected_version,
            changes=changes,
        )
        self.notifier.status_changed(
            self.ENTITY_TYPE,
            application.reference,
            from_status,
            application.status,
            recipient=application.email,
            reason=reason,
        )
        return application

    def _check_submission(self, application: CourierApplication) -> None:
        require_fields(application, self.REQUIRED_FOR_SUBMISSION)
        if application.vehicle_type is not None and application.vehicle_type.requires_license:
            require_fields(application, {"license_number": "Driving licence number"})
        require_consents(application, self.REQUIRED_CONSENTS)

    def _prepare_transition(
        self,
        application: CourierApplication,
        target: CourierApplicationStatus,
        reason: str | None,
        actor_id: str,
    ) -> tuple[str | None, dict | None]:
        """Run the preconditions of the use case behind ``target``.

        A generic move to UNDER_REVIEW makes the actor the reviewer and a move
        to INFO_REQUESTED uses the reason as the requested information.

        Returns:
            Tuple of (reason, field changes) to apply with the transition
        """
        if target == _Status.SUBMITTED:
            self._check_submission(application)
        elif target == _Status.UNDER_REVIEW:
            return reason, {"reviewer_id": require_text(actor_id, "Reviewer")}
        elif target == _Status.INFO_REQUESTED:
            reason = require_text(reason, "Requested information")
            return reason, {"info_request_details": reason}
        elif target == _Status.REJECTED:
            reason = require_text(reason, "Rejection reason")
            return reason, {"rejection_reason": reason}
        elif target == _Status.SUSPENDED:
            reason = require_text(reason, "Suspension reason")
        return reason, None

    async def submit(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CourierApplication:
        """Submit (or resubmit after an information request) an application.

        Raises:
            NotFoundError: If application not found
            ValidationError: If personal details, licence or consents are missing
            InvalidTransitionError: If the application cannot be submitted now
        """
        application = await self.get(reference)
        self._check_submission(application)
        if application.status == _Status.INFO_REQUESTED:
            default_reason = "Application resubmitted with requested information"
        else:
            default_reason = "Application submitted"
        return await self._apply(
            application,
            _Status.SUBMITTED,
            reason or default_reason,
            actor_id,
        )

    async def start_review(
        self,
        reference: str,
        reviewer_id: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CourierApplication:
        application = await self.get(reference)
        reviewer_id = require_text(reviewer_id, "Reviewer")
        return await self._apply(
            application,
            _Status.UNDER_REVIEW,
            reason or f"Review started by {reviewer_id}",
            actor_id,
            changes={"reviewer_id": reviewer_id},
        )

    async def request_info(
        self,
        reference: str,
        details: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CourierApplication:
        """Send the application back to the applicant for more information."""
        application = await self.get(reference)
        details = require_text(details, "Requested information")
        return await self._apply(
            application,
            _Status.INFO_REQUESTED,
            reason or details,
            actor_id,
            changes={"info_request_details": details},
        )

    async def approve(
        self,
        reference: str,
        actor_id: str,
        notes: str | None = None,
        reason: str | None = None,
    ) -> CourierApplication:
        application = await self.get(reference)
        changes = {"review_notes": notes} if notes else None
        return await self._apply(
            application,
            _Status.APPROVED,
            reason or "Application approved",
            actor_id,
            changes=changes,
        )

    async def reject(
        self,
        reference: str,
        actor_id: str,
        reason: str | None,
    ) -> CourierApplication:
        application = await self.get(reference)
        reason = require_text(reason, "Rejection reason")
        return await self._apply(
            application,
            _Status.REJECTED,
            reason,
            actor_id,
            changes={"rejection_reason": reason},
        )

    async def activate(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CourierApplication:
        application = await self.get(reference)
        return await self._apply(
            application,
            _Status.ACTIVE,
            reason or "Courier activated",
            actor_id,
        )

    async def suspend(
        self,
        reference: str,
        actor_id: str,
        reason: str | None,
    ) -> CourierApplication:
        application = await self.get(reference)
        reason = require_text(reason, "Suspension reason")
        return await self._apply(application, _Status.SUSPENDED, reason, actor_id)

    async def reinstate(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CourierApplication:
        """Reactivate a suspended courier.

        Raises:
            InvalidTransitionError: If the courier is neither suspended nor active
            NoOpTransitionError: If the courier is already active
        """
        application = await self.get(reference)
        if application.status not in (_Status.SUSPENDED, _Status.ACTIVE):
            raise InvalidTransitionError(
                application.status,
                _Status.ACTIVE,
                self.engine.allowed_transitions(application.status),
            )
        return await self._apply(
            application,
            _Status.ACTIVE,
            reason or "Courier reinstated",
            actor_id,
        )

    async def cancel(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CourierApplication:
        application = await self.get(reference)
        return await self._apply(
            application,
            _Status.CANCELLED,
            reason or "Application withdrawn",
            actor_id,
        )

    async def transition(
        self,
        reference: str,
        target_status: CourierApplicationStatus | str,
        reason: str | None,
        actor_id: str,
        expected_version: int | None = None,
    ) -> CourierApplication:
        """Apply a generic status transition.

        The target goes through the same preconditions and field changes as
        its dedicated action.

        Raises:
            NotFoundError: If application not found
            ValidationError: If the status is unknown or a precondition is unmet
            InvalidTransitionError: If the transition is not in the table
            NoOpTransitionError: If the application already has this status
            ConcurrentModificationError: If ``expected_version`` is stale
        """
        application = await self.get(reference)
        target = self.engine.coerce_status(target_status)
        self.engine.check_transition(application, target, expected_version)
        reason, changes = self._prepare_transition(application, target, reason, actor_id)
        return await self._apply(
            application,
            target,
            reason,
            actor_id,
            expected_version=expected_version,
            changes=changes,
        )

    async def history(self, reference: str) -> list[CourierApplicationStatusHistory]:
        """Get status history, newest first."""
        application = await self.get(reference)
        return await self.engine.get_history(application.id)

    async def allowed_transitions(
        self,
        reference: str,
    ) -> tuple[CourierApplication, list[Enum]]:
        application = await self.get(reference)
        return application, self.engine.allowed_transitions(application.status)
