"""Corporate onboarding service: use cases of a corporate customer application."""
from __future__ import annotations

import secrets
from decimal import Decimal
from enum import Enum

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from courierops.core.definitions import CORPORATE_APPLICATION_LIFECYCLE
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
    require_reference_match,
    require_status_in,
    require_text,
)
from courierops.core.reference import generate_reference
from courierops.models.corporate_application import (
    CorporateApplication,
    CorporateApplicationStatusHistory,
)
from courierops.models.enums import CorporateOnboardingStatus
from courierops.schemas.corporate_application import (
    CreateCorporateApplicationRequest,
    UpdateCorporateApplicationRequest,
)
from courierops.services.notification_service import NotificationService

_Status = CorporateOnboardingStatus

# (minimum expected monthly shipments, discount rate), highest tier first
VOLUME_DISCOUNT_TIERS = (
    (10000, Decimal("0.15")),
    (5000, Decimal("0.10")),
    (1000, Decimal("0.05")),
)


def calculate_volume_discount(expected_monthly_volume: int) -> Decimal:
    """Return the discount rate granted for an expected monthly volume."""
    for threshold, rate in VOLUME_DISCOUNT_TIERS:
        if expected_monthly_volume >= threshold:
            return rate
    return Decimal("0.00")


class CorporateOnboardingService:
    """Service for the corporate customer onboarding workflow."""

    REFERENCE_PREFIX = "CORP"
    ENTITY_TYPE = CORPORATE_APPLICATION_LIFECYCLE.entity_type

    EDITABLE_STATUSES = (_Status.DRAFT, _Status.DOCUMENTS_REQUIRED)

    REQUIRED_FOR_SUBMISSION = {
        "business_name": "Business name",
        "business_type": "Business type",
        "business_email": "Business email",
        "business_phone": "Business phone",
        "registration_number": "Registration number",
        "business_address": "Business address",
        "contact_first_name": "Contact first name",
        "contact_last_name": "Contact last name",
        "contact_email": "Contact email",
    }

    REQUIRED_CONSENTS = {
        "terms_accepted": "Terms and conditions",
        "privacy_policy_accepted": "Privacy policy",
        "data_processing_consent": "Data processing consent",
    }

    # Targets whose action needs input a generic transition cannot carry
    DEDICATED_ACTIONS = {
        _Status.DOCUMENTS_UPLOADED: "documents-uploaded",
        _Status.KYB_APPROVED: "kyb/result",
        _Status.KYB_FAILED: "kyb/result",
        _Status.CONTRACT_NEGOTIATION: "contract-negotiation",
    }

    def __init__(self, db: AsyncSession, notifier: NotificationService | None = None):
        """Initialize corporate onboarding service.

        Args:
            db: Database session
            notifier: Notification service (defaults to the logging notifier)
        """
        self.db = db
        self.engine = StatusLifecycleEngine(db, CORPORATE_APPLICATION_LIFECYCLE)
        self.notifier = notifier or NotificationService()

    async def _check_duplicates(
        self,
        business_email: str | None,
        registration_number: str | None,
        exclude_reference: str | None = None,
    ) -> None:
        """Reject a second application for the same business.

        Raises:
            ValidationError: If another application uses the email or registration number
        """
        conditions = []
        if business_email:
            conditions.append(
                func.lower(CorporateApplication.business_email) == business_email.lower()
            )
        if registration_number:
            conditions.append(CorporateApplication.registration_number == registration_number)
        if not conditions:
            return

        query = select(CorporateApplication).where(or_(*conditions))
        if exclude_reference:
            query = query.where(CorporateApplication.reference != exclude_reference)
        result = await self.db.execute(query.limit(1))
        existing = result.scalar_one_or_none()

        if existing:
            raise ValidationError(
                "An application already exists for this business",
                {"existing_reference": existing.reference},
            )

    async def create(self, request: CreateCorporateApplicationRequest) -> CorporateApplication:
        """Create a new corporate application in DRAFT.

        Args:
            request: Application creation request

        Returns:
            Created CorporateApplication instance

        Raises:
            ValidationError: If the business already has an application
        """
        await self._check_duplicates(request.business_email, request.registration_number)

        fields = request.model_dump(exclude={"actor_id"})
        application = CorporateApplication(
            reference=generate_reference(self.REFERENCE_PREFIX),
            status=CORPORATE_APPLICATION_LIFECYCLE.initial_status,
            created_by=request.actor_id,
            updated_by=request.actor_id,
            **fields,
        )
        self.db.add(application)
        await self.engine.flush(application)
        await self.engine.record_creation(application, request.actor_id)

        self.notifier.status_changed(
            self.ENTITY_TYPE,
            application.reference,
            None,
            application.status,
            recipient=application.business_email,
        )
        return application

    async def get(self, reference: str) -> CorporateApplication:
        """Get application by reference code.

        Raises:
            NotFoundError: If no application has this reference
        """
        query = select(CorporateApplication).where(CorporateApplication.reference == reference)
        result = await self.db.execute(query)
        application = result.scalar_one_or_none()

        if not application:
            raise NotFoundError(self.ENTITY_TYPE, reference)

        return application

    async def list(
        self,
        status_filter: CorporateOnboardingStatus | None = None,
        business_type: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[CorporateApplication], int]:
        """List applications, newest first.

        Returns:
            Tuple of (applications list, total count)
        """
        query = select(CorporateApplication)
        count_query = select(func.count()).select_from(CorporateApplication)

        if status_filter:
            query = query.where(CorporateApplication.status == status_filter)
            count_query = count_query.where(CorporateApplication.status == status_filter)
        if business_type:
            query = query.where(CorporateApplication.business_type == business_type)
            count_query = count_query.where(CorporateApplication.business_type == business_type)

        total = await self.db.scalar(count_query)

        query = query.order_by(CorporateApplication.created_at.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        applications = list(result.scalars().all())

        return applications, total or 0

    async def update(
        self,
        reference: str,
        request: UpdateCorporateApplicationRequest,
    ) -> CorporateApplication:
        """Edit business details while the application is editable.

        Raises:
            NotFoundError: If application not found
            ValidationError: If the application is not editable or duplicates another
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
        if "business_email" in update_data or "registration_number" in update_data:
            await self._check_duplicates(
                update_data.get("business_email"),
                update_data.get("registration_number"),
                exclude_reference=reference,
            )

        for field, value in update_data.items():
            setattr(application, field, value)
        application.updated_by = request.actor_id

        await self.engine.flush(application)
        return application

    async def _apply(
        self,
        application: CorporateApplication,
        target: CorporateOnboardingStatus,
        reason: str | None,
        actor_id: str,
        *,
        expected_version: int | None = None,
        changes: dict | None = None,
    ) -> CorporateApplication:
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
            recipient=application.contact_email or application.business_email,
            reason=reason,
        )
        return application

    def _check_submission(self, application: CorporateApplication) -> None:
        require_fields(application, self.REQUIRED_FOR_SUBMISSION)
        require_consents(application, self.REQUIRED_CONSENTS)

    @staticmethod
    def _kyb_initiation_changes() -> dict:
        # Echoed back by the verification result
        return {"kyb_verification_id": f"KYB-{secrets.token_hex(6).upper()}"}

    @staticmethod
    def _account_setup_changes() -> dict:
        return {
            "account_id": f"ACC-{secrets.token_hex(6).upper()}",
            "billing_account_id": f"BILL-{secrets.token_hex(6).upper()}",
        }

    def _prepare_transition(
        self,
        application: CorporateApplication,
        target: CorporateOnboardingStatus,
        reason: str | None,
    ) -> tuple[str | None, dict | None]:
        """Run the preconditions of the use case behind ``target``.

        Returns:
            Tuple of (reason, field changes) to apply with the transition

        Raises:
            ValidationError: If a precondition is unmet or the target needs its dedicated action
        """
        action = self.DEDICATED_ACTIONS.get(target)
        if action:
            raise ValidationError(
                f"Transition to '{target.value}' must use the {action} action",
                {"target_status": target.value, "action": action},
            )

        if target == _Status.SUBMITTED:
            self._check_submission(application)
        elif target == _Status.DOCUMENTS_REQUIRED:
            reason = require_text(reason, "Reason")
        elif target == _Status.KYB_IN_PROGRESS:
            return reason, self._kyb_initiation_changes()
        elif target == _Status.REJECTED:
            reason = require_text(reason, "Rejection reason")
            return reason, {"rejection_reason": reason}
        elif target == _Status.ACCOUNT_SETUP:
            return reason, self._account_setup_changes()
        elif target == _Status.SUSPENDED:
            reason = require_text(reason, "Suspension reason")
        return reason, None

    async def submit(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CorporateApplication:
        """Submit a draft application for verification.

        Raises:
            NotFoundError: If application not found
            ValidationError: If required fields or consents are missing
            InvalidTransitionError: If the application is not a draft
        """
        application = await self.get(reference)
        self._check_submission(application)
        return await self._apply(
            application,
            _Status.SUBMITTED,
            reason or "Application submitted",
            actor_id,
        )

    async def request_documents(
        self,
        reference: str,
        actor_id: str,
        reason: str | None,
    ) -> CorporateApplication:
        """Ask the business for (more) supporting documents.

        Raises:
            ValidationError: If no reason describes the documents needed
        """
        application = await self.get(reference)
        reason = require_text(reason, "Reason")
        return await self._apply(application, _Status.DOCUMENTS_REQUIRED, reason, actor_id)

    async def record_documents_uploaded(
        self,
        reference: str,
        document_types: list[str],
        actor_id: str,
        reason: str | None = None,
    ) -> CorporateApplication:
        """Record that the requested documents were uploaded.

        Raises:
            ValidationError: If the document list is empty
        """
        application = await self.get(reference)
        cleaned = [d.strip() for d in document_types if d and d.strip()]
        if not cleaned:
            raise ValidationError(
                "At least one document type is required",
                {"field": "document_types"},
            )
        return await self._apply(
            application,
            _Status.DOCUMENTS_UPLOADED,
            reason or f"Documents uploaded: {', '.join(cleaned)}",
            actor_id,
            changes={"uploaded_document_types": ",".join(cleaned)},
        )

    async def initiate_kyb(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CorporateApplication:
        """Start Know-Your-Business verification.

        A verification id is issued here and must be echoed back by the
        verification result.
        """
        application = await self.get(reference)
        return await self._apply(
            application,
            _Status.KYB_IN_PROGRESS,
            reason or "KYB verification initiated",
            actor_id,
            changes=self._kyb_initiation_changes(),
        )

    async def record_kyb_result(
        self,
        reference: str,
        verification_id: str,
        passed: bool,
        actor_id: str,
        reason: str | None = None,
    ) -> CorporateApplication:
        """Apply the outcome of a KYB verification.

        Raises:
            ValidationError: If the verification id does not match the one issued
        """
        application = await self.get(reference)
        require_reference_match(
            application.kyb_verification_id,
            verification_id,
            "KYB verification",
        )
        if passed:
            return await self._apply(
                application,
                _Status.KYB_APPROVED,
                reason or "KYB verification passed",
                actor_id,
            )
        return await self._apply(
            application,
            _Status.KYB_FAILED,
            reason or "KYB verification failed",
            actor_id,
        )

    async def start_contract_negotiation(
        self,
        reference: str,
        expected_monthly_volume: int,
        actor_id: str,
        special_requirements: str | None = None,
        reason: str | None = None,
    ) -> CorporateApplication:
        """Open contract negotiation and compute the volume discount."""
        application = await self.get(reference)
        if expected_monthly_volume < 0:
            raise ValidationError(
                "Expected monthly volume cannot be negative",
                {"field": "expected_monthly_volume"},
            )
        discount = calculate_volume_discount(expected_monthly_volume)
        return await self._apply(
            application,
            _Status.CONTRACT_NEGOTIATION,
            reason or "Contract negotiation started",
            actor_id,
            changes={
                "expected_monthly_volume": expected_monthly_volume,
                "volume_discount": discount,
                "special_requirements": special_requirements,
            },
        )

    async def start_review(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CorporateApplication:
        application = await self.get(reference)
        return await self._apply(
            application,
            _Status.UNDER_REVIEW,
            reason or "Manual review started",
            actor_id,
        )

    async def approve(
        self,
        reference: str,
        actor_id: str,
        contract_terms: str | None = None,
        reason: str | None = None,
    ) -> CorporateApplication:
        application = await self.get(reference)
        changes = {"contract_terms": contract_terms} if contract_terms else None
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
    ) -> CorporateApplication:
        """Reject the application. REJECTED is terminal.

        Raises:
            ValidationError: If no rejection reason is given
        """
        application = await self.get(reference)
        reason = require_text(reason, "Rejection reason")
        return await self._apply(
            application,
            _Status.REJECTED,
            reason,
            actor_id,
            changes={"rejection_reason": reason},
        )

    async def setup_account(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CorporateApplication:
        """Provision the customer and billing accounts of an approved business."""
        application = await self.get(reference)
        return await self._apply(
            application,
            _Status.ACCOUNT_SETUP,
            reason or "Account setup started",
            actor_id,
            changes=self._account_setup_changes(),
        )

    async def activate(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CorporateApplication:
        application = await self.get(reference)
        return await self._apply(
            application,
            _Status.ACTIVE,
            reason or "Account activated",
            actor_id,
        )

    async def suspend(
        self,
        reference: str,
        actor_id: str,
        reason: str | None,
    ) -> CorporateApplication:
        application = await self.get(reference)
        reason = require_text(reason, "Suspension reason")
        return await self._apply(application, _Status.SUSPENDED, reason, actor_id)

    async def reinstate(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CorporateApplication:
        """Reactivate a suspended account.

        Raises:
            InvalidTransitionError: If the application is neither suspended nor active
            NoOpTransitionError: If the account is already active
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
            reason or "Account reinstated",
            actor_id,
        )

    async def cancel(
        self,
        reference: str,
        actor_id: str,
        reason: str | None = None,
    ) -> CorporateApplication:
        application = await self.get(reference)
        return await self._apply(
            application,
            _Status.CANCELLED,
            reason or "Application cancelled",
            actor_id,
        )

    async def transition(
        self,
        reference: str,
        target_status: CorporateOnboardingStatus | str,
        reason: str | None,
        actor_id: str,
        expected_version: int | None = None,
    ) -> CorporateApplication:
        """Apply a generic status transition.

        The target goes through the same preconditions and field changes as
        its dedicated action. Targets whose action needs more input than a
        reason (documents, KYB result, contract volume) are refused.

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
        reason, changes = self._prepare_transition(application, target, reason)
        return await self._apply(
            application,
            target,
            reason,
            actor_id,
            expected_version=expected_version,
            changes=changes,
        )

    async def history(self, reference: str) -> list[CorporateApplicationStatusHistory]:
        """Get status history, newest first."""
        application = await self.get(reference)
        return await self.engine.get_history(application.id)

    async def allowed_transitions(
        self,
        reference: str,
    ) -> tuple[CorporateApplication, list[Enum]]:
        application = await self.get(reference)
        return application, self.engine.allowed_transitions(application.status)
