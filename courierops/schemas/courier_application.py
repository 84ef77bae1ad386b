"""Pydantic schemas for courier applicant onboarding endpoints."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from courierops.models.enums import CourierApplicationStatus, VehicleType
from courierops.schemas.lifecycle import ActorRequest


class CreateCourierApplicationRequest(BaseModel):
    """Request schema for starting a courier application."""

    model_config = ConfigDict(extra="forbid")

    actor_id: str = Field(..., min_length=1, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    date_of_birth: date | None = None
    city: str | None = Field(None, max_length=100)
    vehicle_type: VehicleType | None = None
    license_number: str | None = Field(None, max_length=100)
    terms_accepted: bool = False
    background_check_consent: bool = False

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class UpdateCourierApplicationRequest(BaseModel):
    """Request schema for editing an application (draft or info requested)."""

    model_config = ConfigDict(extra="forbid")

    actor_id: str = Field(..., min_length=1, max_length=100)
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    date_of_birth: date | None = None
    city: str | None = Field(None, max_length=100)
    vehicle_type: VehicleType | None = None
    license_number: str | None = Field(None, max_length=100)
    terms_accepted: bool | None = None
    background_check_consent: bool | None = None
    expected_version: int | None = Field(
        None,
        description="For optimistic locking - must match current version",
    )


class StartReviewRequest(ActorRequest):
    """Request schema for picking up an application for review."""

    reviewer_id: str = Field(..., min_length=1, max_length=100)


class RequestInfoRequest(ActorRequest):
    """Request schema for asking the applicant for more information."""

    details: str = Field(..., min_length=1, max_length=5000)


class ApproveCourierApplicationRequest(ActorRequest):
    """Request schema for approving a courier application."""

    notes: str | None = Field(None, max_length=5000)


class CourierApplicationResponse(BaseModel):
    """Response schema for a courier application."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    reference: str
    status: CourierApplicationStatus
    version_id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    date_of_birth: date | None = None
    city: str | None = None
    vehicle_type: VehicleType | None = None
    license_number: str | None = None
    terms_accepted: bool
    background_check_consent: bool
    reviewer_id: str | None = None
    review_notes: str | None = None
    info_request_details: str | None = None
    rejection_reason: str | None = None
    submitted_at: datetime | None = None
    review_started_at: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    activated_at: datetime | None = None
    suspended_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_by: str
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime


class CourierApplicationListResponse(BaseModel):
    """Paginated list response for courier applications."""

    items: list[CourierApplicationResponse]
    total: int
    limit: int
    offset: int
