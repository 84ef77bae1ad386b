"""Pydantic schemas for corporate onboarding endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from courierops.models.enums import CorporateOnboardingStatus
from courierops.schemas.lifecycle import ActorRequest


class CreateCorporateApplicationRequest(BaseModel):
    """Request schema for starting a corporate onboarding application."""

    model_config = ConfigDict(extra="forbid")

    actor_id: str = Field(..., min_length=1, max_length=100)
    business_name: str = Field(..., min_length=1, max_length=200)
    business_email: EmailStr
    business_type: str | None = Field(None, max_length=50)
    industry_sector: str | None = Field(None, max_length=100)
    business_phone: str | None = Field(None, max_length=50)
    registration_number: str | None = Field(None, max_length=100)
    tax_identification_number: str | None = Field(None, max_length=100)
    business_address: str | None = Field(None, max_length=2000)
    website_url: str | None = Field(None, max_length=255)
    business_description: str | None = Field(None, max_length=5000)
    contact_first_name: str | None = Field(None, max_length=100)
    contact_last_name: str | None = Field(None, max_length=100)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=50)
    terms_accepted: bool = False
    privacy_policy_accepted: bool = False
    data_processing_consent: bool = False

    @field_validator("business_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("business_name cannot be empty")
        return v


class UpdateCorporateApplicationRequest(BaseModel):
    """Request schema for editing an application (draft or documents required)."""

    model_config = ConfigDict(extra="forbid")

    actor_id: str = Field(..., min_length=1, max_length=100)
    business_name: str | None = Field(None, min_length=1, max_length=200)
    business_email: EmailStr | None = None
    business_type: str | None = Field(None, max_length=50)
    industry_sector: str | None = Field(None, max_length=100)
    business_phone: str | None = Field(None, max_length=50)
    registration_number: str | None = Field(None, max_length=100)
    tax_identification_number: str | None = Field(None, max_length=100)
    business_address: str | None = Field(None, max_length=2000)
    website_url: str | None = Field(None, max_length=255)
    business_description: str | None = Field(None, max_length=5000)
    contact_first_name: str | None = Field(None, max_length=100)
    contact_last_name: str | None = Field(None, max_length=100)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=50)
    terms_accepted: bool | None = None
    privacy_policy_accepted: bool | None = None
    data_processing_consent: bool | None = None
    expected_version: int | None = Field(
        None,
        description="For optimistic locking - must match current version",
    )


class DocumentsUploadedRequest(ActorRequest):
    """Request schema recording that requested documents were uploaded."""

    document_types: list[str] = Field(..., min_length=1, max_length=20)


class KybResultRequest(ActorRequest):
    """Result reported by the KYB verification provider."""

    verification_id: str = Field(..., min_length=1, max_length=64)
    passed: bool


class ContractNegotiationRequest(ActorRequest):
    """Request schema for opening contract negotiation."""

    expected_monthly_volume: int = Field(..., ge=0)
    special_requirements: str | None = Field(None, max_length=5000)


class ApproveCorporateApplicationRequest(ActorRequest):
    """Request schema for approving an application."""

    contract_terms: str | None = Field(None, max_length=10000)


class CorporateApplicationResponse(BaseModel):
    """Response schema for a corporate onboarding application."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    reference: str
    status: CorporateOnboardingStatus
    version_id: int
    business_name: str
    business_email: str
    business_type: str | None = None
    industry_sector: str | None = None
    business_phone: str | None = None
    registration_number: str | None = None
    tax_identification_number: str | None = None
    business_address: str | None = None
    website_url: str | None = None
    business_description: str | None = None
    contact_first_name: str | None = None
    contact_last_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    terms_accepted: bool
    privacy_policy_accepted: bool
    data_processing_consent: bool
    kyb_verification_id: str | None = None
    expected_monthly_volume: int | None = None
    volume_discount: float | None = None
    special_requirements: str | None = None
    contract_terms: str | None = None
    rejection_reason: str | None = None
    account_id: str | None = None
    billing_account_id: str | None = None
    submitted_at: datetime | None = None
    kyb_started_at: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    activated_at: datetime | None = None
    suspended_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_by: str
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime


class CorporateApplicationListResponse(BaseModel):
    """Paginated list response for corporate applications."""

    items: list[CorporateApplicationResponse]
    total: int
    limit: int
    offset: int
