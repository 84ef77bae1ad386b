"""Pytest fixtures for testing."""

import os
from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from courierops.core.database import get_db
from courierops.main import app
from courierops.models.base import Base
from courierops.models.enums import TicketPriority, VehicleType
from courierops.schemas.corporate_application import CreateCorporateApplicationRequest
from courierops.schemas.courier_application import CreateCourierApplicationRequest
from courierops.schemas.support_ticket import CreateTicketRequest
from courierops.services.corporate_onboarding_service import CorporateOnboardingService
from courierops.services.courier_onboarding_service import CourierOnboardingService
from courierops.services.support_ticket_service import SupportTicketService

# In-memory SQLite shared by every session of a test through a single connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ACTOR = "ops-agent-1"


@pytest_asyncio.fixture(scope="function")
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Create test database session.

    Each test gets a fresh in-memory database with all tables created; it is
    discarded when the engine is disposed.
    """
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database dependency override.

    Args:
        db: Test database session

    Yields:
        AsyncClient configured for testing
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def _corporate_payload(**overrides) -> dict:
    """Complete corporate application body (ready for submission)."""
    payload = {
        "actor_id": ACTOR,
        "business_name": "Acme Logistics Ltd",
        "business_email": "ops@acme-logistics.example",
        "business_type": "limited_company",
        "industry_sector": "retail",
        "business_phone": "+44 20 7946 0000",
        "registration_number": "RC-1029384",
        "tax_identification_number": "TIN-5566",
        "business_address": "1 Dock Road, London",
        "contact_first_name": "Ada",
        "contact_last_name": "Okafor",
        "contact_email": "ada@acme-logistics.example",
        "contact_phone": "+44 7700 900000",
        "terms_accepted": True,
        "privacy_policy_accepted": True,
        "data_processing_consent": True,
    }
    payload.update(overrides)
    return payload


def _courier_payload(**overrides) -> dict:
    """Complete courier application body (ready for submission)."""
    payload = {
        "actor_id": ACTOR,
        "first_name": "Tunde",
        "last_name": "Bello",
        "email": "tunde.bello@example.com",
        "phone": "+234 800 000 0000",
        "date_of_birth": "1994-05-17",
        "city": "Lagos",
        "vehicle_type": "motorcycle",
        "license_number": "LAG-778812",
        "terms_accepted": True,
        "background_check_consent": True,
    }
    payload.update(overrides)
    return payload


def _ticket_payload(**overrides) -> dict:
    payload = {
        "actor_id": "customer-portal",
        "customer_id": "CUST-1001",
        "customer_email": "jane@example.com",
        "customer_name": "Jane Doe",
        "subject": "Parcel not received",
        "description": "My parcel was marked delivered but it was not received.",
        "priority": "normal",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def actor_id() -> str:
    return ACTOR


@pytest.fixture()
def corporate_payload():
    """Builder for corporate application request bodies."""
    return _corporate_payload


@pytest.fixture()
def courier_payload():
    return _courier_payload


@pytest.fixture()
def ticket_payload():
    return _ticket_payload


@pytest_asyncio.fixture
async def draft_corporate(db: AsyncSession):
    """A complete corporate application in DRAFT."""
    service = CorporateOnboardingService(db)
    application = await service.create(CreateCorporateApplicationRequest(**_corporate_payload()))
    await db.commit()
    return application


@pytest_asyncio.fixture
async def draft_courier(db: AsyncSession):
    """A complete courier application in DRAFT."""
    service = CourierOnboardingService(db)
    application = await service.create(
        CreateCourierApplicationRequest(
            **_courier_payload(
                date_of_birth=date(1994, 5, 17),
                vehicle_type=VehicleType.MOTORCYCLE,
            )
        )
    )
    await db.commit()
    return application


@pytest_asyncio.fixture
async def open_ticket(db: AsyncSession):
    """A NORMAL priority ticket in OPEN."""
    service = SupportTicketService(db)
    ticket = await service.create(
        CreateTicketRequest(**_ticket_payload(priority=TicketPriority.NORMAL))
    )
    await db.commit()
    return ticket
