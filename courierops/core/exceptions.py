"""Domain exceptions raised by the lifecycle engine and use-case services.

Each exception carries the error code and HTTP status it is rendered with by
the API layer (see ``courierops.api.errors``).
"""

from __future__ import annotations

from enum import Enum
from typing import Any


def _value(status: Enum | str | None) -> str | None:
    if status is None:
        return None
    return status.value if isinstance(status, Enum) else str(status)


class LifecycleError(Exception):
    """Base class for all user-visible lifecycle failures."""

    error = "lifecycle_error"
    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(LifecycleError):
    """Raised when an entity reference is unknown."""

    error = "not_found"
    status_code = 404

    def __init__(self, entity_type: str, reference: str):
        super().__init__(
            f"{entity_type.replace('_', ' ').capitalize()} not found: {reference}",
            {"entity_type": entity_type, "reference": reference},
        )
        self.entity_type = entity_type
        self.reference = reference


class ValidationError(LifecycleError):
    """Raised when a precondition is unmet before a transition is attempted."""

    error = "validation_error"
    status_code = 400


class InvalidTransitionError(LifecycleError):
    """Raised when the (current, target) pair is absent from the transition table."""

    error = "invalid_transition"
    status_code = 409

    def __init__(
        self,
        current_status: Enum | str,
        target_status: Enum | str,
        allowed: list[Enum] | None = None,
    ):
        self.current_status = current_status
        self.target_status = target_status
        self.allowed = list(allowed or [])
        super().__init__(
            f"Invalid status transition from {_value(current_status)} to {_value(target_status)}",
            {
                "current_status": _value(current_status),
                "target_status": _value(target_status),
                "allowed_transitions": [_value(s) for s in self.allowed],
            },
        )


class NoOpTransitionError(LifecycleError):
    """Raised when the target status equals the current status.

    Retrying an already-applied transition yields this error, so callers may
    treat it as "already done".
    """

    error = "noop_transition"
    status_code = 409

    def __init__(self, status: Enum | str):
        self.current_status = status
        self.target_status = status
        super().__init__(
            f"Entity is already in status {_value(status)}",
            {"current_status": _value(status), "target_status": _value(status)},
        )


class ConcurrentModificationError(LifecycleError):
    """Raised when another writer changed the entity first."""

    error = "concurrent_modification"
    status_code = 409
