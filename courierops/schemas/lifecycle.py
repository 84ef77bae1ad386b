"""Pydantic schemas shared by every lifecycle-controlled resource."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_optional(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    return v or None


class ActorRequest(BaseModel):
    """Base request for actions performed by an identified actor."""

    model_config = ConfigDict(extra="forbid")

    actor_id: str = Field(..., min_length=1, max_length=100)
    reason: str | None = Field(None, max_length=2000)

    @field_validator("actor_id")
    @classmethod
    def strip_actor(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("actor_id cannot be empty")
        return v

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class TransitionRequest(ActorRequest):
    """Request schema for a generic status transition."""

    target_status: str = Field(..., min_length=1, max_length=50)
    expected_version: int | None = Field(None, ge=1)

    @field_validator("target_status")
    @classmethod
    def normalize_status(cls, v: str) -> str:
        return v.strip().lower()


class StatusHistoryResponse(BaseModel):
    """One status history entry."""

    from_status: str | None = None
    to_status: str
    reason: str | None = None
    changed_by: str
    changed_at: datetime
    sequence: int


class AllowedTransitionsResponse(BaseModel):
    """Statuses reachable from the entity's current status."""

    reference: str
    current_status: str
    allowed_transitions: list[str]
    is_terminal: bool


def history_to_response(entry: Any) -> StatusHistoryResponse:
    """Convert a history model row to its response schema."""
    return StatusHistoryResponse(
        from_status=entry.from_status.value if entry.from_status is not None else None,
        to_status=entry.to_status.value,
        reason=entry.reason,
        changed_by=entry.changed_by,
        changed_at=entry.changed_at,
        sequence=entry.sequence,
    )
