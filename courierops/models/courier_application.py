"""Courier applicant onboarding models."""
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from courierops.models.base import LifecycleEntity, StatusHistoryEntry
from courierops.models.enums import CourierApplicationStatus, VehicleType


def _status_enum() -> SQLEnum:
    return SQLEnum(
        CourierApplicationStatus,
        name="courier_application_status",
        create_type=False,
        values_callable=lambda x: [e.value for e in x],
    )


class CourierApplication(LifecycleEntity):
    """Application of a person who wants to deliver as a courier."""

    __tablename__ = "courier_applications"

    status = Column(
        _status_enum(),
        nullable=False,
        default=CourierApplicationStatus.DRAFT,
        index=True,
    )
    version_id = Column(Integer, nullable=False)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    city = Column(String(100), nullable=True)
    vehicle_type = Column(
        SQLEnum(
            VehicleType,
            name="vehicle_type",
            create_type=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=True,
    )
    license_number = Column(String(100), nullable=True)

    terms_accepted = Column(Boolean, nullable=False, default=False)
    background_check_consent = Column(Boolean, nullable=False, default=False)

    reviewer_id = Column(String(100), nullable=True)
    review_notes = Column(Text, nullable=True)
    info_request_details = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    submitted_at = Column(DateTime(timezone=True), nullable=True)
    review_started_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    activated_at = Column(DateTime(timezone=True), nullable=True)
    suspended_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    history = relationship(
        "CourierApplicationStatusHistory",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="CourierApplicationStatusHistory.sequence.desc()",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<CourierApplication(reference={self.reference}, status={self.status})>"


class CourierApplicationStatusHistory(StatusHistoryEntry):
    """One row per status change of a courier application."""

    __tablename__ = "courier_application_status_history"

    application_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("courier_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_status = Column(_status_enum(), nullable=True)
    to_status = Column(_status_enum(), nullable=False)

    application = relationship("CourierApplication", back_populates="history")

    __table_args__ = (
        Index(
            "idx_courier_history_application_sequence",
            "application_id",
            "sequence",
            unique=True,
        ),
    )
