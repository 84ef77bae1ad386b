"""Base SQLAlchemy models with UUID primary key and audit columns."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(UTC)


class BaseModel(Base):
    """Base model with UUID primary key and timestamps."""

    __abstract__ = True

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )


class LifecycleEntity(BaseModel):
    """Base for entities whose ``status`` is driven by the lifecycle engine.

    Concrete models add the ``status`` column (typed with their own enum), a
    ``version_id`` column registered as the mapper's ``version_id_col`` and
    their lifecycle timestamp columns.
    """

    __abstract__ = True

    reference = Column(String(32), nullable=False, unique=True, index=True)
    created_by = Column(String(100), nullable=False)
    updated_by = Column(String(100), nullable=True)


class StatusHistoryEntry(Base):
    """Base for append-only status history rows.

    Rows are written once by the lifecycle engine and never updated.
    ``sequence`` numbers the rows of one entity starting at 1 (the creation
    record); concrete tables put a unique index on (owner, sequence).
    """

    __abstract__ = True

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    sequence = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    changed_by = Column(String(100), nullable=False)
    changed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
