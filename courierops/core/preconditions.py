"""Precondition checks run by services before a transition is attempted."""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from courierops.core.exceptions import ValidationError


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require_fields(entity: Any, fields: Mapping[str, str]) -> None:
    """Require that every listed attribute is populated.

    Args:
        entity: Entity to inspect
        fields: Attribute name -> human-readable label

    Raises:
        ValidationError: Listing every missing field
    """
    missing = {
        name: f"{label} is required"
        for name, label in fields.items()
        if _is_blank(getattr(entity, name, None))
    }
    if missing:
        raise ValidationError(
            "Required fields are missing: " + ", ".join(fields[name] for name in missing),
            {"missing_fields": missing},
        )


def require_consents(entity: Any, consents: Mapping[str, str]) -> None:
    """Require that every listed boolean attribute is exactly True."""
    missing = {
        name: f"{label} must be accepted"
        for name, label in consents.items()
        if getattr(entity, name, None) is not True
    }
    if missing:
        raise ValidationError(
            "Required consents are missing: " + ", ".join(consents[name] for name in missing),
            {"missing_consents": missing},
        )


def require_status_in(entity: Any, allowed: Iterable[Enum], action: str) -> None:
    """Require the entity's current status to be one of ``allowed``.

    Raises:
        ValidationError: Naming the action and the current status
    """
    allowed = list(allowed)
    if entity.status not in allowed:
        raise ValidationError(
            f"Cannot {action} in status {entity.status.value}",
            {
                "current_status": entity.status.value,
                "allowed_statuses": [s.value for s in allowed],
            },
        )


def require_reference_match(expected: str | None, provided: str | None, label: str) -> None:
    """Require an externally supplied reference to match the stored one."""
    if expected is None:
        raise ValidationError(f"{label} has not been initiated")
    if provided != expected:
        raise ValidationError(
            f"{label} does not match",
            {"expected": expected, "provided": provided},
        )


def require_text(value: str | None, label: str) -> str:
    """Require a non-blank free-text value and return it stripped."""
    if _is_blank(value):
        raise ValidationError(f"{label} is required", {"field": label})
    return value.strip()
