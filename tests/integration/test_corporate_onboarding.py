"""Integration tests for the corporate onboarding workflow."""

import pytest
from httpx import AsyncClient

BASE = "/api/v1/corporate-applications"
ACTOR = "ops-agent-1"


async def _create(client: AsyncClient, payload: dict) -> dict:
    response = await client.post(BASE, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _post(client: AsyncClient, reference: str, action: str, **body) -> dict:
    response = await client.post(f"{BASE}/{reference}/{action}", json={"actor_id": ACTOR, **body})
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_application_starts_in_draft(client: AsyncClient, corporate_payload):
    data = await _create(client, corporate_payload())

    assert data["status"] == "draft"
    assert data["reference"].startswith("CORP-")
    assert data["version_id"] == 1
    assert data["created_by"] == ACTOR
    assert data["submitted_at"] is None

    history = await client.get(f"{BASE}/{data['reference']}/history")
    assert history.status_code == 200
    assert len(history.json()) == 1
    assert history.json()[0]["from_status"] is None
    assert history.json()[0]["to_status"] == "draft"


@pytest.mark.asyncio
async def test_duplicate_business_is_rejected(client: AsyncClient, corporate_payload):
    await _create(client, corporate_payload())

    response = await client.post(
        BASE,
        json=corporate_payload(
            business_email="OPS@acme-logistics.example",
            registration_number="RC-0000001",
        ),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
    assert "existing_reference" in response.json()["details"]


@pytest.mark.asyncio
async def test_submit_reject_then_terminal(client: AsyncClient, corporate_payload):
    """Draft -> submitted -> (approved refused) -> rejected -> nothing."""
    reference = (await _create(client, corporate_payload()))["reference"]

    submitted = await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": ACTOR, "target_status": "submitted"},
    )
    assert submitted.status_code == 200
    assert submitted.json()["status"] == "submitted"

    approved = await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": ACTOR, "target_status": "approved"},
    )
    assert approved.status_code == 409
    assert approved.json()["error"] == "invalid_transition"
    assert approved.json()["details"]["current_status"] == "submitted"

    rejected = await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": ACTOR, "target_status": "rejected", "reason": "Incomplete KYB"},
    )
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["rejection_reason"] == "Incomplete KYB"
    assert rejected.json()["rejected_at"] is not None

    for target in ("draft", "submitted", "under_review", "approved", "cancelled"):
        response = await client.post(
            f"{BASE}/{reference}/transition",
            json={"actor_id": ACTOR, "target_status": target},
        )
        assert response.status_code == 409, target

    history = (await client.get(f"{BASE}/{reference}/history")).json()
    assert len(history) >= 3
    assert [h["to_status"] for h in history[:3]] == ["rejected", "submitted", "draft"]

    transitions = (await client.get(f"{BASE}/{reference}/transitions")).json()
    assert transitions["allowed_transitions"] == []
    assert transitions["is_terminal"] is True


@pytest.mark.asyncio
async def test_full_onboarding_to_active_account(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]

    await _post(client, reference, "submit")
    data = await _post(client, reference, "request-documents", reason="Certificate of incorporation")
    assert data["status"] == "documents_required"

    data = await _post(
        client,
        reference,
        "documents-uploaded",
        document_types=["certificate_of_incorporation", "utility_bill"],
    )
    assert data["status"] == "documents_uploaded"

    data = await _post(client, reference, "kyb/initiate")
    assert data["status"] == "kyb_in_progress"
    verification_id = data["kyb_verification_id"]
    assert verification_id.startswith("KYB-")
    assert data["kyb_started_at"] is not None

    data = await _post(client, reference, "kyb/result", verification_id=verification_id, passed=True)
    assert data["status"] == "kyb_approved"

    data = await _post(
        client,
        reference,
        "contract-negotiation",
        expected_monthly_volume=6000,
        special_requirements="Same-day delivery in London",
    )
    assert data["status"] == "contract_negotiation"
    assert data["expected_monthly_volume"] == 6000
    assert data["volume_discount"] == pytest.approx(0.10)

    data = await _post(client, reference, "approve", contract_terms="Net 30, 10% discount")
    assert data["status"] == "approved"
    assert data["contract_terms"] == "Net 30, 10% discount"

    data = await _post(client, reference, "account-setup")
    assert data["status"] == "account_setup"
    assert data["account_id"].startswith("ACC-")
    assert data["billing_account_id"].startswith("BILL-")

    data = await _post(client, reference, "activate")
    assert data["status"] == "active"
    activated_at = data["activated_at"]

    data = await _post(client, reference, "suspend", reason="Unpaid invoices")
    assert data["status"] == "suspended"
    suspended_at = data["suspended_at"]

    data = await _post(client, reference, "reinstate", reason="Invoices paid")
    assert data["status"] == "active"
    assert data["activated_at"] == activated_at

    data = await _post(client, reference, "suspend", reason="Unpaid again")
    assert data["suspended_at"] == suspended_at

    history = (await client.get(f"{BASE}/{reference}/history")).json()
    assert len(history) == 13
    assert [h["sequence"] for h in history] == list(range(13, 0, -1))


@pytest.mark.asyncio
async def test_kyb_result_requires_issued_verification_id(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]
    await _post(client, reference, "submit")
    await _post(client, reference, "kyb/initiate")

    response = await client.post(
        f"{BASE}/{reference}/kyb/result",
        json={"actor_id": ACTOR, "verification_id": "KYB-FORGED", "passed": True},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
    current = (await client.get(f"{BASE}/{reference}")).json()
    assert current["status"] == "kyb_in_progress"


@pytest.mark.asyncio
async def test_failed_kyb_can_request_documents_again(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]
    await _post(client, reference, "submit")
    verification_id = (await _post(client, reference, "kyb/initiate"))["kyb_verification_id"]

    data = await _post(client, reference, "kyb/result", verification_id=verification_id, passed=False)
    assert data["status"] == "kyb_failed"

    data = await _post(client, reference, "request-documents", reason="Proof of address unreadable")
    assert data["status"] == "documents_required"


@pytest.mark.asyncio
async def test_submit_requires_consents(client: AsyncClient, corporate_payload):
    payload = corporate_payload(privacy_policy_accepted=False, data_processing_consent=False)
    reference = (await _create(client, payload))["reference"]

    response = await client.post(f"{BASE}/{reference}/submit", json={"actor_id": ACTOR})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_error"
    assert set(body["details"]["missing_consents"]) == {
        "privacy_policy_accepted",
        "data_processing_consent",
    }
    assert (await client.get(f"{BASE}/{reference}")).json()["status"] == "draft"


@pytest.mark.asyncio
async def test_submit_requires_business_details(client: AsyncClient, corporate_payload):
    payload = corporate_payload(registration_number=None, business_address=None)
    reference = (await _create(client, payload))["reference"]

    response = await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": ACTOR, "target_status": "submitted"},
    )

    assert response.status_code == 400
    missing = response.json()["details"]["missing_fields"]
    assert set(missing) == {"registration_number", "business_address"}


@pytest.mark.asyncio
async def test_update_only_while_editable(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]

    updated = await client.patch(
        f"{BASE}/{reference}",
        json={"actor_id": ACTOR, "business_phone": "+44 20 7946 1111", "expected_version": 1},
    )
    assert updated.status_code == 200
    assert updated.json()["business_phone"] == "+44 20 7946 1111"
    assert updated.json()["version_id"] == 2

    stale = await client.patch(
        f"{BASE}/{reference}",
        json={"actor_id": ACTOR, "business_phone": "+44 0", "expected_version": 1},
    )
    assert stale.status_code == 409
    assert stale.json()["error"] == "concurrent_modification"

    await _post(client, reference, "submit")
    locked = await client.patch(
        f"{BASE}/{reference}",
        json={"actor_id": ACTOR, "business_phone": "+44 20 7946 2222"},
    )
    assert locked.status_code == 400
    assert locked.json()["details"]["current_status"] == "submitted"


@pytest.mark.asyncio
async def test_reject_requires_reason(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]
    await _post(client, reference, "submit")

    response = await client.post(f"{BASE}/{reference}/reject", json={"actor_id": ACTOR})
    assert response.status_code == 400

    response = await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": ACTOR, "target_status": "rejected", "reason": "  "},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_reinstate_requires_suspension(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]

    response = await client.post(f"{BASE}/{reference}/reinstate", json={"actor_id": ACTOR})

    assert response.status_code == 409
    assert response.json()["details"]["target_status"] == "active"


@pytest.mark.asyncio
async def test_transition_with_stale_version(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]

    response = await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": ACTOR, "target_status": "cancelled", "expected_version": 7},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "concurrent_modification"
    assert (await client.get(f"{BASE}/{reference}")).json()["status"] == "draft"


@pytest.mark.asyncio
async def test_noop_transition_is_conflict(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]

    response = await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": ACTOR, "target_status": "draft"},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "noop_transition"


@pytest.mark.asyncio
async def test_unknown_target_status_is_validation_error(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]

    response = await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": ACTOR, "target_status": "archived"},
    )

    assert response.status_code == 400
    assert "draft" in response.json()["details"]["allowed_values"]


@pytest.mark.asyncio
async def test_list_filters_and_paginates(client: AsyncClient, corporate_payload):
    first = await _create(client, corporate_payload())
    await _create(
        client,
        corporate_payload(
            business_email="hello@bolt-freight.example",
            registration_number="RC-555",
            business_type="sole_trader",
        ),
    )
    await _post(client, first["reference"], "submit")

    submitted = (await client.get(BASE, params={"status": "submitted"})).json()
    assert submitted["total"] == 1
    assert submitted["items"][0]["reference"] == first["reference"]

    sole_traders = (await client.get(BASE, params={"business_type": "sole_trader"})).json()
    assert sole_traders["total"] == 1

    page = (await client.get(BASE, params={"limit": 1, "offset": 1})).json()
    assert page["total"] == 2
    assert page["limit"] == 1
    assert page["offset"] == 1
    assert len(page["items"]) == 1


@pytest.mark.asyncio
async def test_allowed_transitions_for_submitted(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]
    await _post(client, reference, "submit")

    data = (await client.get(f"{BASE}/{reference}/transitions")).json()

    assert data["current_status"] == "submitted"
    assert data["allowed_transitions"] == [
        "documents_required",
        "kyb_in_progress",
        "under_review",
        "rejected",
        "cancelled",
    ]
    assert data["is_terminal"] is False


async def _transition(client: AsyncClient, reference: str, target: str, **body):
    return await client.post(
        f"{BASE}/{reference}/transition",
        json={"actor_id": ACTOR, "target_status": target, **body},
    )


@pytest.mark.asyncio
async def test_generic_transition_issues_kyb_and_account_ids(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]
    assert (await _transition(client, reference, "submitted")).status_code == 200

    started = await _transition(client, reference, "kyb_in_progress")
    assert started.status_code == 200
    verification_id = started.json()["kyb_verification_id"]
    assert verification_id.startswith("KYB-")

    await _post(client, reference, "kyb/result", verification_id=verification_id, passed=True)
    assert (await _transition(client, reference, "approved")).status_code == 200

    setup = await _transition(client, reference, "account_setup")
    assert setup.status_code == 200
    assert setup.json()["account_id"].startswith("ACC-")
    assert setup.json()["billing_account_id"].startswith("BILL-")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("target", "action"),
    [("kyb_approved", "kyb/result"), ("kyb_failed", "kyb/result")],
)
async def test_generic_transition_refuses_kyb_outcome(
    client: AsyncClient, corporate_payload, target, action
):
    reference = (await _create(client, corporate_payload()))["reference"]
    await _post(client, reference, "submit")
    await _post(client, reference, "kyb/initiate")

    response = await _transition(client, reference, target)

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
    assert response.json()["details"]["action"] == action
    assert (await client.get(f"{BASE}/{reference}")).json()["status"] == "kyb_in_progress"


@pytest.mark.asyncio
async def test_generic_transition_document_and_contract_steps(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]
    await _post(client, reference, "submit")

    assert (await _transition(client, reference, "documents_required")).status_code == 400
    requested = await _transition(
        client, reference, "documents_required", reason="Certificate of incorporation"
    )
    assert requested.status_code == 200

    uploaded = await _transition(client, reference, "documents_uploaded")
    assert uploaded.status_code == 400
    assert uploaded.json()["details"]["action"] == "documents-uploaded"

    await _post(client, reference, "documents-uploaded", document_types=["certificate"])
    started = await _post(client, reference, "kyb/initiate")
    await _post(
        client,
        reference,
        "kyb/result",
        verification_id=started["kyb_verification_id"],
        passed=True,
    )

    negotiation = await _transition(client, reference, "contract_negotiation")
    assert negotiation.status_code == 400
    assert negotiation.json()["details"]["action"] == "contract-negotiation"


@pytest.mark.asyncio
async def test_generic_transition_checks_legality_first(client: AsyncClient, corporate_payload):
    reference = (await _create(client, corporate_payload()))["reference"]

    response = await _transition(client, reference, "kyb_approved")

    assert response.status_code == 409
    assert response.json()["error"] == "invalid_transition"


@pytest.mark.asyncio
async def test_generic_suspension_requires_reason_and_reinstate_retry_is_noop(
    client: AsyncClient, corporate_payload
):
    reference = (await _create(client, corporate_payload()))["reference"]
    for target in ("submitted", "under_review", "approved", "account_setup", "active"):
        response = await _transition(client, reference, target)
        assert response.status_code == 200, target

    assert (await _transition(client, reference, "suspended")).status_code == 400
    await _transition(client, reference, "suspended", reason="Unpaid invoices")
    await _post(client, reference, "reinstate")

    retry = await client.post(f"{BASE}/{reference}/reinstate", json={"actor_id": ACTOR})

    assert retry.status_code == 409
    assert retry.json()["error"] == "noop_transition"
    assert (await client.get(f"{BASE}/{reference}")).json()["status"] == "active"
