"""Integration tests for the support ticket workflow."""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

BASE = "/api/v1/support-tickets"
AGENT = "agent-42"


async def _create(client: AsyncClient, payload: dict) -> dict:
    response = await client.post(BASE, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _post(client: AsyncClient, reference: str, action: str, **body):
    return await client.post(f"{BASE}/{reference}/{action}", json={"actor_id": AGENT, **body})


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.mark.asyncio
async def test_create_infers_category_and_due_date(client: AsyncClient, ticket_payload):
    data = await _create(client, ticket_payload())

    assert data["reference"].startswith("TKT-")
    assert data["status"] == "open"
    assert data["category"] == "delivery_issues"
    assert data["priority"] == "normal"
    assert data["reopen_count"] == 0
    assert _parse(data["due_at"]) - _parse(data["created_at"]) == timedelta(hours=8)


@pytest.mark.asyncio
async def test_urgent_ticket_is_raised_to_high(client: AsyncClient, ticket_payload):
    data = await _create(client, ticket_payload(priority="low", is_urgent=True))

    assert data["priority"] == "high"
    assert _parse(data["due_at"]) - _parse(data["created_at"]) == timedelta(hours=4)


@pytest.mark.asyncio
async def test_explicit_category_is_kept(client: AsyncClient, ticket_payload):
    data = await _create(client, ticket_payload(category="complaint"))

    assert data["category"] == "complaint"


@pytest.mark.asyncio
async def test_ticket_lifecycle(client: AsyncClient, ticket_payload):
    reference = (await _create(client, ticket_payload()))["reference"]

    assigned = await _post(client, reference, "assign", agent_id=AGENT)
    assert assigned.json()["status"] == "assigned"
    assert assigned.json()["assigned_agent_id"] == AGENT
    assert assigned.json()["assigned_at"] is not None

    started = await _post(client, reference, "start")
    assert started.json()["status"] == "in_progress"
    assert started.json()["first_response_at"] is not None

    waiting = await _post(client, reference, "await-customer", reason="Asked for photo of label")
    assert waiting.json()["status"] == "pending_customer"

    await _post(client, reference, "start")

    missing_notes = await _post(client, reference, "resolve", resolution_notes="  ")
    assert missing_notes.status_code == 400

    resolved = await _post(
        client,
        reference,
        "resolve",
        resolution_notes="Parcel found at depot and redelivered",
    )
    assert resolved.status_code == 200
    assert resolved.json()["status"] == "resolved"
    assert resolved.json()["resolution_notes"] == "Parcel found at depot and redelivered"

    closed = await _post(client, reference, "close")
    assert closed.json()["status"] == "closed"
    assert closed.json()["closed_at"] is not None

    history = (await client.get(f"{BASE}/{reference}/history")).json()
    assert len(history) == 7
    assert history[-1]["reason"] == "Ticket opened"


@pytest.mark.asyncio
async def test_escalation_raises_priority(client: AsyncClient, ticket_payload):
    reference = (await _create(client, ticket_payload(priority="high")))["reference"]

    escalated = await _post(
        client,
        reference,
        "escalate",
        escalated_to="tier-2",
        reason="Customer is a key account",
    )

    assert escalated.status_code == 200
    data = escalated.json()
    assert data["status"] == "escalated"
    assert data["priority"] == "critical"
    assert data["escalated_to"] == "tier-2"
    assert data["escalated_at"] is not None
    assert _parse(data["due_at"]) - _parse(data["escalated_at"]) < timedelta(hours=1, seconds=5)


@pytest.mark.asyncio
async def test_reopen_closed_ticket(client: AsyncClient, ticket_payload):
    reference = (await _create(client, ticket_payload()))["reference"]
    await _post(client, reference, "escalate")
    await _post(client, reference, "close")

    no_reason = await _post(client, reference, "reopen")
    assert no_reason.status_code == 400

    reopened = await _post(client, reference, "reopen", reason="Parcel still missing")
    assert reopened.status_code == 200
    assert reopened.json()["status"] == "reopened"
    assert reopened.json()["reopen_count"] == 1
    assert reopened.json()["closed_at"] is not None

    await _post(client, reference, "assign", agent_id=AGENT)
    await _post(client, reference, "start")
    await _post(client, reference, "resolve", resolution_notes="Refund issued")
    again = await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": AGENT, "target_status": "reopened", "reason": "Refund never arrived"},
    )
    assert again.json()["reopen_count"] == 2


@pytest.mark.asyncio
async def test_cancelled_ticket_is_terminal(client: AsyncClient, ticket_payload):
    reference = (await _create(client, ticket_payload()))["reference"]
    cancelled = await _post(client, reference, "cancel", reason="Duplicate")
    assert cancelled.json()["status"] == "cancelled"

    reopened = await _post(client, reference, "reopen", reason="Not a duplicate")
    assert reopened.status_code == 409

    patched = await client.patch(f"{BASE}/{reference}", json={"actor_id": AGENT, "subject": "x"})
    assert patched.status_code == 400

    transitions = (await client.get(f"{BASE}/{reference}/transitions")).json()
    assert transitions["is_terminal"] is True
    assert transitions["allowed_transitions"] == []


@pytest.mark.asyncio
async def test_open_ticket_cannot_be_resolved(client: AsyncClient, open_ticket):
    response = await _post(client, open_ticket.reference, "resolve", resolution_notes="Done")

    assert response.status_code == 409
    assert response.json()["details"]["allowed_transitions"] == [
        "assigned",
        "escalated",
        "cancelled",
    ]


@pytest.mark.asyncio
async def test_priority_change_recomputes_due_date(client: AsyncClient, ticket_payload):
    created = await _create(client, ticket_payload())

    patched = await client.patch(
        f"{BASE}/{created['reference']}",
        json={"actor_id": AGENT, "priority": "critical", "expected_version": 1},
    )

    assert patched.status_code == 200
    data = patched.json()
    assert data["priority"] == "critical"
    assert _parse(data["due_at"]) - _parse(data["created_at"]) == timedelta(hours=1)


@pytest.mark.asyncio
async def test_list_by_agent_and_customer(client: AsyncClient, ticket_payload):
    first = await _create(client, ticket_payload())
    await _create(
        client,
        ticket_payload(
            customer_id="CUST-2002",
            subject="Invoice question",
            description="Why was I charged twice on my invoice?",
        ),
    )
    await _post(client, first["reference"], "assign", agent_id=AGENT)

    mine = (await client.get(BASE, params={"assigned_agent_id": AGENT})).json()
    assert mine["total"] == 1
    assert mine["items"][0]["reference"] == first["reference"]

    customer = (await client.get(BASE, params={"customer_id": "CUST-2002"})).json()
    assert customer["total"] == 1
    assert customer["items"][0]["category"] == "billing_inquiry"

    assigned = (await client.get(BASE, params={"status": "assigned"})).json()
    assert assigned["total"] == 1


async def _transition(client: AsyncClient, reference: str, target: str, **body):
    return await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": AGENT, "target_status": target, **body},
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(("target", "action"), [("assigned", "assign"), ("resolved", "resolve")])
async def test_generic_transition_refuses_assignment_and_resolution(
    client: AsyncClient, ticket_payload, target, action
):
    reference = (await _create(client, ticket_payload()))["reference"]
    await _post(client, reference, "escalate")

    response = await _transition(client, reference, target)

    assert response.status_code == 400
    assert response.json()["details"]["action"] == action
    ticket = (await client.get(f"{BASE}/{reference}")).json()
    assert ticket["status"] == "escalated"
    assert ticket["resolution_notes"] is None


@pytest.mark.asyncio
async def test_generic_escalation_raises_priority(client: AsyncClient, open_ticket):
    response = await _transition(client, open_ticket.reference, "escalated")

    assert response.status_code == 200
    data = response.json()
    assert data["priority"] == "high"
    assert _parse(data["due_at"]) - _parse(data["escalated_at"]) < timedelta(hours=4, seconds=5)


@pytest.mark.asyncio
async def test_generic_reopen_requires_reason(client: AsyncClient, ticket_payload):
    reference = (await _create(client, ticket_payload()))["reference"]
    await _post(client, reference, "escalate")
    await _post(client, reference, "close")

    response = await _transition(client, reference, "reopened")

    assert response.status_code == 400
    assert (await client.get(f"{BASE}/{reference}")).json()["reopen_count"] == 0
