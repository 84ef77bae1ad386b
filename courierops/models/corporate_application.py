"""Corporate customer onboarding application models."""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from courierops.models.base import LifecycleEntity, StatusHistoryEntry
from courierops.models.enums import CorporateOnboardingStatus


def _status_enum(name: str) -> SQLEnum:
    return SQLEnum(
        CorporateOnboardingStatus,
        name=name,
        create_type=False,
        values_callable=lambda x: [e.value for e in x],
    )


class CorporateApplication(LifecycleEntity):
    """Application of a business that wants a corporate shipping account."""

    __tablename__ = "corporate_applications"

    status = Column(
        _status_enum("corporate_onboarding_status"),
        nullable=False,
        default=CorporateOnboardingStatus.DRAFT,
        index=True,
    )
    version_id = Column(Integer, nullable=False)

    # Business information
    business_name = Column(String(200), nullable=False)
    business_type = Column(String(50), nullable=True)
    industry_sector = Column(String(100), nullable=True)
    business_email = Column(String(255), nullable=False)
    business_phone = Column(String(50), nullable=True)
    registration_number = Column(String(100), nullable=True)
    tax_identification_number = Column(String(100), nullable=True)
    business_address = Column(Text, nullable=True)
    website_url = Column(String(255), nullable=True)
    business_description = Column(Text, nullable=True)

    # Primary contact
    contact_first_name = Column(String(100), nullable=True)
    contact_last_name = Column(String(100), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)

    # Consents
    terms_accepted = Column(Boolean, nullable=False, default=False)
    privacy_policy_accepted = Column(Boolean, nullable=False, default=False)
    data_processing_consent = Column(Boolean, nullable=False, default=False)

    # Verification and commercial terms
    uploaded_document_types = Column(Text, nullable=True)
    kyb_verification_id = Column(String(64), nullable=True)
    expected_monthly_volume = Column(Integer, nullable=True)
    volume_discount = Column(Numeric(4, 2), nullable=True)
    special_requirements = Column(Text, nullable=True)
    contract_terms = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # Provisioned account
    account_id = Column(String(64), nullable=True)
    billing_account_id = Column(String(64), nullable=True)

    # Lifecycle timestamps (set once by the matching transition)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    kyb_started_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    activated_at = Column(DateTime(timezone=True), nullable=True)
    suspended_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    history = relationship(
        "CorporateApplicationStatusHistory",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="CorporateApplicationStatusHistory.sequence.desc()",
    )

    __mapper_args__ = {"version_id_col": version_id}

    __table_args__ = (
        Index("idx_corporate_applications_email", "business_email"),
        Index("idx_corporate_applications_registration", "registration_number"),
    )

    def __repr__(self) -> str:
        return f"<CorporateApplication(reference={self.reference}, status={self.status})>"


class CorporateApplicationStatusHistory(StatusHistoryEntry):
    """One row per status change of a corporate application."""

    __tablename__ = "corporate_application_status_history"

    application_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("corporate_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_status = Column(_status_enum("corporate_onboarding_status"), nullable=True)
    to_status = Column(_status_enum("corporate_onboarding_status"), nullable=False)

    application = relationship("CorporateApplication", back_populates="history")

    __table_args__ = (
        Index(
            "idx_corporate_history_application_sequence",
            "application_id",
            "sequence",
            unique=True,
        ),
    )
