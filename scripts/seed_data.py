"""Seed script for development data.

Creates:
- Corporate application "Acme Logistics Ltd" (draft)
- Courier application for "tunde.bello@example.com" (submitted)
- Support ticket for customer "CUST-1001" (open)

Can be run multiple times safely (skips if exists).
"""
import asyncio
import os
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from sqlalchemy import select

from courierops.core.database import get_db
from courierops.core.exceptions import LifecycleError
from courierops.models.corporate_application import CorporateApplication
from courierops.models.courier_application import CourierApplication
from courierops.models.enums import VehicleType
from courierops.models.support_ticket import SupportTicket
from courierops.schemas.corporate_application import CreateCorporateApplicationRequest
from courierops.schemas.courier_application import CreateCourierApplicationRequest
from courierops.schemas.support_ticket import CreateTicketRequest
from courierops.services.corporate_onboarding_service import CorporateOnboardingService
from courierops.services.courier_onboarding_service import CourierOnboardingService
from courierops.services.support_ticket_service import SupportTicketService


async def seed_data():
    """Seed development data."""
    print("Starting database seeding...")

    actor = os.environ.get("SEED_ACTOR_ID", "seed-script")
    business_email = os.environ.get("SEED_BUSINESS_EMAIL", "ops@acme-logistics.example")
    courier_email = os.environ.get("SEED_COURIER_EMAIL", "tunde.bello@example.com")

    async for db in get_db():
        result = await db.execute(
            select(CorporateApplication).where(CorporateApplication.business_email == business_email)
        )
        existing = result.scalar_one_or_none()
        if existing:
            print(f"✓ Corporate application already exists ({existing.reference})")
        else:
            application = await CorporateOnboardingService(db).create(
                CreateCorporateApplicationRequest(
                    actor_id=actor,
                    business_name="Acme Logistics Ltd",
                    business_email=business_email,
                    business_type="limited_company",
                    business_phone="+44 20 7946 0000",
                    registration_number="RC-1029384",
                    business_address="1 Dock Road, London",
                    contact_first_name="Ada",
                    contact_last_name="Okafor",
                    contact_email="ada@acme-logistics.example",
                    terms_accepted=True,
                    privacy_policy_accepted=True,
                    data_processing_consent=True,
                )
            )
            print(f"✓ Created corporate application {application.reference}")

        result = await db.execute(
            select(CourierApplication).where(CourierApplication.email == courier_email)
        )
        existing = result.scalar_one_or_none()
        if existing:
            print(f"✓ Courier application already exists ({existing.reference})")
        else:
            service = CourierOnboardingService(db)
            application = await service.create(
                CreateCourierApplicationRequest(
                    actor_id=actor,
                    first_name="Tunde",
                    last_name="Bello",
                    email=courier_email,
                    phone="+234 800 000 0000",
                    date_of_birth=date(1994, 5, 17),
                    city="Lagos",
                    vehicle_type=VehicleType.MOTORCYCLE,
                    license_number="LAG-778812",
                    terms_accepted=True,
                    background_check_consent=True,
                )
            )
            try:
                await service.submit(application.reference, actor)
            except LifecycleError as e:
                print(f"✗ Created courier application {application.reference} but could not submit it: {e.message}")
            else:
                print(f"✓ Created and submitted courier application {application.reference}")

        result = await db.execute(
            select(SupportTicket).where(SupportTicket.customer_id == "CUST-1001").limit(1)
        )
        existing = result.scalar_one_or_none()
        if existing:
            print(f"✓ Support ticket already exists ({existing.reference})")
        else:
            ticket = await SupportTicketService(db).create(
                CreateTicketRequest(
                    actor_id=actor,
                    customer_id="CUST-1001",
                    customer_email="jane@example.com",
                    customer_name="Jane Doe",
                    subject="Where is my parcel?",
                    description="Tracking has not updated for three days.",
                )
            )
            print(f"✓ Created support ticket {ticket.reference} ({ticket.category.value})")

        # Commit changes
        await db.commit()

    print("\n✓ Database seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(seed_data())
