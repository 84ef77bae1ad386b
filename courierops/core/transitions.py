"""Static status transition tables.

Key: current status, value: statuses that may follow it. Any pair that is not
listed is illegal. Tables are read-only mappings built once at import.
"""

from types import MappingProxyType

from courierops.models.enums import CorporateOnboardingStatus, CourierApplicationStatus, TicketStatus

_Corp = CorporateOnboardingStatus
_Courier = CourierApplicationStatus
_Ticket = TicketStatus

CORPORATE_TRANSITIONS = MappingProxyType({
    _Corp.DRAFT: frozenset({_Corp.SUBMITTED, _Corp.CANCELLED}),
    _Corp.SUBMITTED: frozenset({
        _Corp.DOCUMENTS_REQUIRED,
        _Corp.KYB_IN_PROGRESS,
        _Corp.UNDER_REVIEW,
        _Corp.REJECTED,
        _Corp.CANCELLED,
    }),
    _Corp.DOCUMENTS_REQUIRED: frozenset({_Corp.DOCUMENTS_UPLOADED, _Corp.REJECTED, _Corp.CANCELLED}),
    _Corp.DOCUMENTS_UPLOADED: frozenset({_Corp.KYB_IN_PROGRESS, _Corp.DOCUMENTS_REQUIRED, _Corp.REJECTED}),
    _Corp.KYB_IN_PROGRESS: frozenset({_Corp.KYB_APPROVED, _Corp.KYB_FAILED, _Corp.UNDER_REVIEW}),
    _Corp.KYB_APPROVED: frozenset({_Corp.CONTRACT_NEGOTIATION, _Corp.UNDER_REVIEW, _Corp.APPROVED}),
    _Corp.KYB_FAILED: frozenset({_Corp.DOCUMENTS_REQUIRED, _Corp.REJECTED}),
    _Corp.CONTRACT_NEGOTIATION: frozenset({_Corp.UNDER_REVIEW, _Corp.APPROVED, _Corp.REJECTED}),
    _Corp.UNDER_REVIEW: frozenset({_Corp.APPROVED, _Corp.REJECTED, _Corp.DOCUMENTS_REQUIRED}),
    _Corp.APPROVED: frozenset({_Corp.ACCOUNT_SETUP}),
    _Corp.ACCOUNT_SETUP: frozenset({_Corp.ACTIVE}),
    _Corp.ACTIVE: frozenset({_Corp.SUSPENDED}),
    _Corp.SUSPENDED: frozenset({_Corp.ACTIVE}),  # reinstatement
    _Corp.REJECTED: frozenset(),
    _Corp.CANCELLED: frozenset(),
})

CORPORATE_TIMESTAMP_FIELDS = MappingProxyType({
    _Corp.SUBMITTED: "submitted_at",
    _Corp.KYB_IN_PROGRESS: "kyb_started_at",
    _Corp.APPROVED: "approved_at",
    _Corp.REJECTED: "rejected_at",
    _Corp.ACTIVE: "activated_at",
    _Corp.SUSPENDED: "suspended_at",
    _Corp.CANCELLED: "cancelled_at",
})

COURIER_TRANSITIONS = MappingProxyType({
    _Courier.DRAFT: frozenset({_Courier.SUBMITTED, _Courier.CANCELLED}),
    _Courier.SUBMITTED: frozenset({_Courier.UNDER_REVIEW, _Courier.CANCELLED}),
    _Courier.UNDER_REVIEW: frozenset({_Courier.APPROVED, _Courier.REJECTED, _Courier.INFO_REQUESTED}),
    _Courier.INFO_REQUESTED: frozenset({_Courier.SUBMITTED, _Courier.CANCELLED}),
    _Courier.APPROVED: frozenset({_Courier.ACTIVE}),
    _Courier.ACTIVE: frozenset({_Courier.SUSPENDED}),
    _Courier.SUSPENDED: frozenset({_Courier.ACTIVE}),  # reinstatement
    _Courier.REJECTED: frozenset(),
    _Courier.CANCELLED: frozenset(),
})

COURIER_TIMESTAMP_FIELDS = MappingProxyType({
    _Courier.SUBMITTED: "submitted_at",
    _Courier.UNDER_REVIEW: "review_started_at",
    _Courier.APPROVED: "approved_at",
    _Courier.REJECTED: "rejected_at",
    _Courier.ACTIVE: "activated_at",
    _Courier.SUSPENDED: "suspended_at",
    _Courier.CANCELLED: "cancelled_at",
})

TICKET_TRANSITIONS = MappingProxyType({
    _Ticket.OPEN: frozenset({_Ticket.ASSIGNED, _Ticket.ESCALATED, _Ticket.CANCELLED}),
    _Ticket.ASSIGNED: frozenset({
        _Ticket.IN_PROGRESS,
        _Ticket.PENDING_INTERNAL,
        _Ticket.ESCALATED,
        _Ticket.CANCELLED,
    }),
    _Ticket.IN_PROGRESS: frozenset({
        _Ticket.PENDING_CUSTOMER,
        _Ticket.PENDING_INTERNAL,
        _Ticket.RESOLVED,
        _Ticket.ESCALATED,
    }),
    _Ticket.PENDING_CUSTOMER: frozenset({
        _Ticket.IN_PROGRESS,
        _Ticket.RESOLVED,
        _Ticket.CLOSED,
        _Ticket.ESCALATED,
    }),
    _Ticket.PENDING_INTERNAL: frozenset({_Ticket.IN_PROGRESS, _Ticket.ESCALATED}),
    _Ticket.ESCALATED: frozenset({_Ticket.IN_PROGRESS, _Ticket.RESOLVED, _Ticket.CLOSED}),
    _Ticket.RESOLVED: frozenset({_Ticket.CLOSED, _Ticket.REOPENED}),
    _Ticket.REOPENED: frozenset({_Ticket.ASSIGNED, _Ticket.IN_PROGRESS, _Ticket.ESCALATED}),
    _Ticket.CLOSED: frozenset({_Ticket.REOPENED}),  # reopen
    _Ticket.CANCELLED: frozenset(),
})

TICKET_TIMESTAMP_FIELDS = MappingProxyType({
    _Ticket.ASSIGNED: "assigned_at",
    _Ticket.IN_PROGRESS: "first_response_at",
    _Ticket.ESCALATED: "escalated_at",
    _Ticket.RESOLVED: "resolved_at",
    _Ticket.CLOSED: "closed_at",
    _Ticket.CANCELLED: "cancelled_at",
})

# Terminal statuses and the only transitions allowed to leave them.
TERMINAL_STATUSES = MappingProxyType({
    "corporate_application": frozenset({_Corp.REJECTED, _Corp.CANCELLED}),
    "courier_application": frozenset({_Courier.REJECTED, _Courier.CANCELLED}),
    "support_ticket": frozenset({_Ticket.CLOSED, _Ticket.CANCELLED}),
})

REINSTATEMENT_PATHS = MappingProxyType({
    "corporate_application": frozenset({(_Corp.SUSPENDED, _Corp.ACTIVE)}),
    "courier_application": frozenset({(_Courier.SUSPENDED, _Courier.ACTIVE)}),
    "support_ticket": frozenset({(_Ticket.CLOSED, _Ticket.REOPENED)}),
})
