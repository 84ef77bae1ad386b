"""Unit tests for the static transition tables."""

import pytest

from courierops.core.definitions import (
    CORPORATE_APPLICATION_LIFECYCLE,
    COURIER_APPLICATION_LIFECYCLE,
    SUPPORT_TICKET_LIFECYCLE,
)
from courierops.core.transitions import REINSTATEMENT_PATHS, TERMINAL_STATUSES
from courierops.models.corporate_application import CorporateApplication
from courierops.models.courier_application import CourierApplication
from courierops.models.enums import CorporateOnboardingStatus, CourierApplicationStatus, TicketStatus
from courierops.models.support_ticket import SupportTicket

LIFECYCLES = [
    (CORPORATE_APPLICATION_LIFECYCLE, CorporateApplication),
    (COURIER_APPLICATION_LIFECYCLE, CourierApplication),
    (SUPPORT_TICKET_LIFECYCLE, SupportTicket),
]
IDS = ["corporate", "courier", "ticket"]


@pytest.mark.parametrize(("definition", "model"), LIFECYCLES, ids=IDS)
class TestTransitionTables:
    """Structural checks shared by every lifecycle."""

    def test_every_status_has_an_entry(self, definition, model):
        assert set(definition.transitions) == set(definition.status_enum)

    def test_targets_belong_to_the_same_enum(self, definition, model):
        for targets in definition.transitions.values():
            assert all(isinstance(t, definition.status_enum) for t in targets)

    def test_no_self_transitions(self, definition, model):
        for status, targets in definition.transitions.items():
            assert status not in targets

    def test_terminal_statuses_only_leave_through_whitelisted_paths(self, definition, model):
        whitelisted = REINSTATEMENT_PATHS[definition.entity_type]
        for status in TERMINAL_STATUSES[definition.entity_type]:
            exits = {(status, target) for target in definition.transitions[status]}
            assert exits <= whitelisted

    def test_every_status_is_reachable_from_initial(self, definition, model):
        seen = {definition.initial_status}
        frontier = [definition.initial_status]
        while frontier:
            current = frontier.pop()
            for target in definition.transitions[current]:
                if target not in seen:
                    seen.add(target)
                    frontier.append(target)
        assert seen == set(definition.status_enum)

    def test_timestamp_fields_are_model_columns(self, definition, model):
        columns = set(model.__table__.columns.keys())
        for field in definition.timestamp_fields.values():
            assert field in columns


def test_transition_tables_are_read_only():
    with pytest.raises(TypeError):
        CORPORATE_APPLICATION_LIFECYCLE.transitions[CorporateOnboardingStatus.REJECTED] = frozenset(
            {CorporateOnboardingStatus.DRAFT}
        )


def test_rejected_and_cancelled_are_dead_ends():
    corporate = CORPORATE_APPLICATION_LIFECYCLE.transitions
    courier = COURIER_APPLICATION_LIFECYCLE.transitions
    assert corporate[CorporateOnboardingStatus.REJECTED] == frozenset()
    assert corporate[CorporateOnboardingStatus.CANCELLED] == frozenset()
    assert courier[CourierApplicationStatus.REJECTED] == frozenset()
    assert courier[CourierApplicationStatus.CANCELLED] == frozenset()
    assert SUPPORT_TICKET_LIFECYCLE.transitions[TicketStatus.CANCELLED] == frozenset()


def test_closed_ticket_can_only_be_reopened():
    assert SUPPORT_TICKET_LIFECYCLE.transitions[TicketStatus.CLOSED] == frozenset(
        {TicketStatus.REOPENED}
    )
