"""Lifecycle definitions for each entity type handled by the engine."""

from courierops.core.lifecycle import LifecycleDefinition
from courierops.core.transitions import (
    CORPORATE_TIMESTAMP_FIELDS,
    CORPORATE_TRANSITIONS,
    COURIER_TIMESTAMP_FIELDS,
    COURIER_TRANSITIONS,
    TICKET_TIMESTAMP_FIELDS,
    TICKET_TRANSITIONS,
)
from courierops.models.corporate_application import CorporateApplicationStatusHistory
from courierops.models.courier_application import CourierApplicationStatusHistory
from courierops.models.enums import CorporateOnboardingStatus, CourierApplicationStatus, TicketStatus
from courierops.models.support_ticket import TicketStatusHistory

CORPORATE_APPLICATION_LIFECYCLE = LifecycleDefinition(
    entity_type="corporate_application",
    status_enum=CorporateOnboardingStatus,
    initial_status=CorporateOnboardingStatus.DRAFT,
    transitions=CORPORATE_TRANSITIONS,
    timestamp_fields=CORPORATE_TIMESTAMP_FIELDS,
    history_model=CorporateApplicationStatusHistory,
    owner_fk="application_id",
)

COURIER_APPLICATION_LIFECYCLE = LifecycleDefinition(
    entity_type="courier_application",
    status_enum=CourierApplicationStatus,
    initial_status=CourierApplicationStatus.DRAFT,
    transitions=COURIER_TRANSITIONS,
    timestamp_fields=COURIER_TIMESTAMP_FIELDS,
    history_model=CourierApplicationStatusHistory,
    owner_fk="application_id",
)

SUPPORT_TICKET_LIFECYCLE = LifecycleDefinition(
    entity_type="support_ticket",
    status_enum=TicketStatus,
    initial_status=TicketStatus.OPEN,
    transitions=TICKET_TRANSITIONS,
    timestamp_fields=TICKET_TIMESTAMP_FIELDS,
    history_model=TicketStatusHistory,
    owner_fk="ticket_id",
)
