"""Integration tests for the courier applicant onboarding workflow."""

import pytest
from httpx import AsyncClient

BASE = "/api/v1/courier-applications"
ACTOR = "ops-agent-1"


async def _create(client: AsyncClient, payload: dict) -> dict:
    response = await client.post(BASE, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _post(client: AsyncClient, reference: str, action: str, **body):
    return await client.post(f"{BASE}/{reference}/{action}", json={"actor_id": ACTOR, **body})


@pytest.mark.asyncio
async def test_courier_happy_path(client: AsyncClient, courier_payload):
    data = await _create(client, courier_payload())
    reference = data["reference"]
    assert reference.startswith("COUR-")
    assert data["status"] == "draft"

    response = await _post(client, reference, "submit")
    assert response.json()["status"] == "submitted"

    response = await _post(client, reference, "review/start", reviewer_id="reviewer-7")
    assert response.json()["status"] == "under_review"
    assert response.json()["reviewer_id"] == "reviewer-7"
    assert response.json()["review_started_at"] is not None

    response = await _post(client, reference, "approve", notes="Documents verified")
    assert response.json()["status"] == "approved"
    assert response.json()["review_notes"] == "Documents verified"

    response = await _post(client, reference, "activate")
    assert response.status_code == 200
    assert response.json()["status"] == "active"
    assert response.json()["activated_at"] is not None

    history = (await client.get(f"{BASE}/{reference}/history")).json()
    assert [h["to_status"] for h in history] == [
        "active",
        "approved",
        "under_review",
        "submitted",
        "draft",
    ]


@pytest.mark.asyncio
async def test_info_request_and_resubmission(client: AsyncClient, courier_payload):
    reference = (await _create(client, courier_payload(license_number=None)))["reference"]

    # licence is required for a motorcycle
    response = await _post(client, reference, "submit")
    assert response.status_code == 400
    assert "license_number" in response.json()["details"]["missing_fields"]

    await client.patch(
        f"{BASE}/{reference}",
        json={"actor_id": ACTOR, "license_number": "LAG-778812"},
    )
    assert (await _post(client, reference, "submit")).status_code == 200
    await _post(client, reference, "review/start", reviewer_id="reviewer-7")

    response = await _post(
        client,
        reference,
        "request-info",
        details="Upload a clearer photo of your licence",
    )
    assert response.status_code == 200
    assert response.json()["status"] == "info_requested"
    assert response.json()["info_request_details"] == "Upload a clearer photo of your licence"

    patched = await client.patch(
        f"{BASE}/{reference}",
        json={"actor_id": "applicant", "city": "Abuja"},
    )
    assert patched.status_code == 200
    assert patched.json()["city"] == "Abuja"

    response = await _post(client, reference, "submit")
    assert response.status_code == 200
    assert response.json()["status"] == "submitted"

    history = (await client.get(f"{BASE}/{reference}/history")).json()
    assert history[0]["reason"] == "Application resubmitted with requested information"
    assert history[0]["from_status"] == "info_requested"


@pytest.mark.asyncio
async def test_bicycle_needs_no_licence(client: AsyncClient, courier_payload):
    payload = courier_payload(vehicle_type="bicycle", license_number=None)
    reference = (await _create(client, payload))["reference"]

    response = await _post(client, reference, "submit")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_background_check_consent_required(client: AsyncClient, courier_payload):
    payload = courier_payload(background_check_consent=False)
    reference = (await _create(client, payload))["reference"]

    response = await _post(client, reference, "submit")

    assert response.status_code == 400
    assert list(response.json()["details"]["missing_consents"]) == ["background_check_consent"]


@pytest.mark.asyncio
async def test_one_open_application_per_email(client: AsyncClient, courier_payload):
    first = await _create(client, courier_payload())

    duplicate = await client.post(BASE, json=courier_payload(email="Tunde.Bello@example.com"))
    assert duplicate.status_code == 400
    assert duplicate.json()["details"]["existing_reference"] == first["reference"]

    await _post(client, first["reference"], "cancel", reason="Applied by mistake")
    again = await client.post(BASE, json=courier_payload())
    assert again.status_code == 201


@pytest.mark.asyncio
async def test_rejected_application_is_terminal(client: AsyncClient, courier_payload):
    reference = (await _create(client, courier_payload()))["reference"]
    await _post(client, reference, "submit")
    await _post(client, reference, "review/start", reviewer_id="reviewer-7")

    missing_reason = await _post(client, reference, "reject")
    assert missing_reason.status_code == 400

    rejected = await _post(client, reference, "reject", reason="Failed background check")
    assert rejected.status_code == 200
    assert rejected.json()["rejection_reason"] == "Failed background check"

    for action in ("submit", "activate", "cancel"):
        response = await _post(client, reference, action)
        assert response.status_code == 409, action
        assert response.json()["error"] == "invalid_transition"


@pytest.mark.asyncio
async def test_approval_requires_review(client: AsyncClient, draft_courier):
    response = await _post(client, draft_courier.reference, "submit")
    assert response.status_code == 200

    response = await _post(client, draft_courier.reference, "approve")

    assert response.status_code == 409
    details = response.json()["details"]
    assert details["current_status"] == "submitted"
    assert details["allowed_transitions"] == ["under_review", "cancelled"]


@pytest.mark.asyncio
async def test_suspend_and_reinstate_courier(client: AsyncClient, draft_courier):
    reference = draft_courier.reference
    for target in ("submitted", "under_review", "approved", "active"):
        response = await client.post(
            f"{BASE}/{reference}/transition",
            json={"actor_id": ACTOR, "target_status": target},
        )
        assert response.status_code == 200, target

    assert (await _post(client, reference, "suspend")).status_code == 400
    suspended = await _post(client, reference, "suspend", reason="Customer complaints")
    assert suspended.json()["status"] == "suspended"

    reinstated = await _post(client, reference, "reinstate")
    assert reinstated.status_code == 200
    assert reinstated.json()["status"] == "active"
    assert reinstated.json()["suspended_at"] == suspended.json()["suspended_at"]


@pytest.mark.asyncio
async def test_list_by_city_and_vehicle(client: AsyncClient, courier_payload):
    await _create(client, courier_payload())
    await _create(
        client,
        courier_payload(email="amaka@example.com", city="Abuja", vehicle_type="car"),
    )

    lagos = (await client.get(BASE, params={"city": "Lagos"})).json()
    assert lagos["total"] == 1
    assert lagos["items"][0]["email"] == "tunde.bello@example.com"

    cars = (await client.get(BASE, params={"vehicle_type": "car"})).json()
    assert cars["total"] == 1
    assert cars["items"][0]["city"] == "Abuja"


async def _transition(client: AsyncClient, reference: str, target: str, **body):
    return await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": ACTOR, "target_status": target, **body},
    )


@pytest.mark.asyncio
async def test_generic_review_and_info_request(client: AsyncClient, draft_courier):
    reference = draft_courier.reference
    await _transition(client, reference, "submitted")

    review = await _transition(client, reference, "under_review")
    assert review.status_code == 200
    assert review.json()["reviewer_id"] == ACTOR

    assert (await _transition(client, reference, "info_requested")).status_code == 400
    info = await _transition(client, reference, "info_requested", reason="Upload licence photo")
    assert info.status_code == 200
    assert info.json()["info_request_details"] == "Upload licence photo"


@pytest.mark.asyncio
async def test_reinstate_retry_is_noop(client: AsyncClient, draft_courier):
    reference = draft_courier.reference
    await _post(client, reference, "submit")
    await _post(client, reference, "review/start", reviewer_id="reviewer-7")
    await _post(client, reference, "approve")
    await _post(client, reference, "activate")
    await _post(client, reference, "suspend", reason="Late deliveries")
    assert (await _post(client, reference, "reinstate")).status_code == 200

    retry = await _post(client, reference, "reinstate")
    generic_retry = await _transition(client, reference, "active")

    assert retry.status_code == 409
    assert retry.json()["error"] == "noop_transition"
    assert generic_retry.json()["error"] == "noop_transition"
