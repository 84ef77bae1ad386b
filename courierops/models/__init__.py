"""SQLAlchemy models."""

from courierops.models.base import Base, BaseModel, LifecycleEntity, StatusHistoryEntry
from courierops.models.corporate_application import (
    CorporateApplication,
    CorporateApplicationStatusHistory,
)
from courierops.models.courier_application import (
    CourierApplication,
    CourierApplicationStatusHistory,
)
from courierops.models.enums import (
    CorporateOnboardingStatus,
    CourierApplicationStatus,
    TicketCategory,
    TicketPriority,
    TicketStatus,
    VehicleType,
)
from courierops.models.support_ticket import SupportTicket, TicketStatusHistory

__all__ = [
    "Base",
    "BaseModel",
    "LifecycleEntity",
    "StatusHistoryEntry",
    "CorporateOnboardingStatus",
    "CourierApplicationStatus",
    "TicketStatus",
    "TicketPriority",
    "TicketCategory",
    "VehicleType",
    "CorporateApplication",
    "CorporateApplicationStatusHistory",
    "CourierApplication",
    "CourierApplicationStatusHistory",
    "SupportTicket",
    "TicketStatusHistory",
]
