"""Enumerations for lifecycle statuses and ticket attributes."""

from enum import Enum


class CorporateOnboardingStatus(str, Enum):
    """Corporate customer onboarding application status.

    Workflow:
    - DRAFT: Started, editable, not yet submitted
    - SUBMITTED .. CONTRACT_NEGOTIATION: Documents, KYB and commercial checks
    - UNDER_REVIEW: Manual review by the onboarding team
    - APPROVED -> ACCOUNT_SETUP -> ACTIVE: Account provisioning
    - SUSPENDED: Active account put on hold (can be reinstated)
    - REJECTED, CANCELLED: Terminal
    """

    DRAFT = "draft"
    SUBMITTED = "submitted"
    DOCUMENTS_REQUIRED = "documents_required"
    DOCUMENTS_UPLOADED = "documents_uploaded"
    KYB_IN_PROGRESS = "kyb_in_progress"
    KYB_APPROVED = "kyb_approved"
    KYB_FAILED = "kyb_failed"
    CONTRACT_NEGOTIATION = "contract_negotiation"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    ACCOUNT_SETUP = "account_setup"
    ACTIVE = "active"
    REJECTED = "rejected"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class CourierApplicationStatus(str, Enum):
    """Courier applicant onboarding status."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    INFO_REQUESTED = "info_requested"
    APPROVED = "approved"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class TicketStatus(str, Enum):
    """Customer support ticket status."""

    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    PENDING_CUSTOMER = "pending_customer"
    PENDING_INTERNAL = "pending_internal"
    ESCALATED = "escalated"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REOPENED = "reopened"
    CANCELLED = "cancelled"


class TicketPriority(str, Enum):
    """Ticket priority with escalation order (LOW < NORMAL < HIGH < CRITICAL)."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def get_level(cls, priority: "TicketPriority") -> int:
        levels = {
            cls.LOW: 1,
            cls.NORMAL: 2,
            cls.HIGH: 3,
            cls.CRITICAL: 4,
        }
        return levels.get(priority, 0)

    def escalated(self) -> "TicketPriority":
        """Return the next priority up (CRITICAL stays CRITICAL)."""
        order = [TicketPriority.LOW, TicketPriority.NORMAL, TicketPriority.HIGH, TicketPriority.CRITICAL]
        index = order.index(self)
        return order[min(index + 1, len(order) - 1)]


class TicketCategory(str, Enum):
    """Support ticket category."""

    SHIPMENT_TRACKING = "shipment_tracking"
    DELIVERY_ISSUES = "delivery_issues"
    BILLING_INQUIRY = "billing_inquiry"
    ACCOUNT_MANAGEMENT = "account_management"
    SERVICE_DISRUPTION = "service_disruption"
    DAMAGE_CLAIMS = "damage_claims"
    REFUND_REQUEST = "refund_request"
    TECHNICAL_SUPPORT = "technical_support"
    GENERAL_INQUIRY = "general_inquiry"
    COMPLAINT = "complaint"


class VehicleType(str, Enum):
    """Vehicle used by a courier applicant."""

    BICYCLE = "bicycle"
    MOTORCYCLE = "motorcycle"
    CAR = "car"
    VAN = "van"
    ON_FOOT = "on_foot"

    @property
    def requires_license(self) -> bool:
        return self in (VehicleType.MOTORCYCLE, VehicleType.CAR, VehicleType.VAN)
