"""Status lifecycle engine.

Validates and applies status transitions for any lifecycle-controlled entity
and records every change in that entity's append-only history table. The
engine is generic: each entity type is described by a ``LifecycleDefinition``
(status enum, transition table, lifecycle timestamp columns, history model).

Domain preconditions (required fields, consents, verification references) are
checked by the calling service before ``apply_transition`` is invoked.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from courierops.core.exceptions import (
    ConcurrentModificationError,
    InvalidTransitionError,
    NoOpTransitionError,
    ValidationError,
)
from courierops.core.metrics import observe_rejected_transition, observe_transition
from courierops.core.structured_logging import log_json
from courierops.models.base import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LifecycleDefinition:
    """Static description of one entity type's lifecycle."""

    entity_type: str
    status_enum: type[Enum]
    initial_status: Enum
    transitions: Mapping[Enum, frozenset]
    timestamp_fields: Mapping[Enum, str]
    history_model: type
    owner_fk: str


def is_transition_legal(
    transitions: Mapping[Enum, frozenset],
    current_status: Enum,
    target_status: Enum,
) -> bool:
    """Check if a status transition is listed in the table.

    Args:
        transitions: Transition table of the entity type
        current_status: Current status
        target_status: Requested status

    Returns:
        True if the ordered pair is allowed, False otherwise
    """
    return target_status in transitions.get(current_status, frozenset())


def get_allowed_transitions(
    transitions: Mapping[Enum, frozenset],
    current_status: Enum,
) -> list[Enum]:
    """Get allowed next statuses, in the enum's declaration order."""
    allowed = transitions.get(current_status, frozenset())
    return [status for status in type(current_status) if status in allowed]


class StatusLifecycleEngine:
    """Applies legal transitions and writes status history."""

    def __init__(self, db: AsyncSession, definition: LifecycleDefinition):
        """Initialize lifecycle engine.

        Args:
            db: Database session (the caller's transaction boundary)
            definition: Lifecycle of the entity type handled by this engine
        """
        self.db = db
        self.definition = definition

    def coerce_status(self, value: Enum | str) -> Enum:
        """Convert a raw value to the entity's status enum.

        Raises:
            ValidationError: If the value is not a member of the enumeration
        """
        status_enum = self.definition.status_enum
        if isinstance(value, status_enum):
            return value
        try:
            return status_enum(value)
        except ValueError:
            raise ValidationError(
                f"Unknown {self.definition.entity_type} status: {value}",
                {"allowed_values": [s.value for s in status_enum]},
            ) from None

    def is_transition_legal(self, current_status: Enum, target_status: Enum) -> bool:
        return is_transition_legal(self.definition.transitions, current_status, target_status)

    def allowed_transitions(self, current_status: Enum) -> list[Enum]:
        return get_allowed_transitions(self.definition.transitions, current_status)

    def check_transition(
        self,
        entity: Any,
        target_status: Enum,
        expected_version: int | None = None,
    ) -> None:
        """Raise if the transition may not be applied. Never mutates anything.

        Raises:
            NoOpTransitionError: If target equals the current status
            InvalidTransitionError: If the pair is absent from the table
            ConcurrentModificationError: If ``expected_version`` is stale
        """
        current_status = entity.status
        entity_type = self.definition.entity_type

        if target_status == current_status:
            observe_rejected_transition(entity_type=entity_type, reason="noop")
            self._log_rejected(entity, target_status, "noop")
            raise NoOpTransitionError(current_status)

        if not self.is_transition_legal(current_status, target_status):
            observe_rejected_transition(entity_type=entity_type, reason="invalid")
            self._log_rejected(entity, target_status, "invalid")
            raise InvalidTransitionError(
                current_status,
                target_status,
                self.allowed_transitions(current_status),
            )

        if expected_version is not None and expected_version != entity.version_id:
            observe_rejected_transition(entity_type=entity_type, reason="stale_version")
            self._log_rejected(entity, target_status, "stale_version")
            raise ConcurrentModificationError(
                f"{entity_type} {entity.reference} was modified by another request",
                {"expected_version": expected_version, "current_version": entity.version_id},
            )

    async def apply_transition(
        self,
        entity: Any,
        target_status: Enum | str,
        reason: str | None,
        actor_id: str,
        *,
        expected_version: int | None = None,
        changes: Mapping[str, Any] | None = None,
    ) -> Any:
        """Move an entity to a new status and append a history row.

        Args:
            entity: Lifecycle-controlled entity loaded in ``self.db``
            target_status: Requested status
            reason: Free-text reason stored in history
            actor_id: Identifier of the actor performing the change
            expected_version: Optional optimistic version supplied by the caller
            changes: Domain attributes written together with the status change

        Returns:
            The updated entity

        Raises:
            NoOpTransitionError: If target equals the current status
            InvalidTransitionError: If the pair is absent from the table
            ConcurrentModificationError: If another writer changed the entity
        """
        target_status = self.coerce_status(target_status)
        self.check_transition(entity, target_status, expected_version)

        from_status = entity.status
        now = utcnow()

        for name, value in (changes or {}).items():
            setattr(entity, name, value)

        entity.status = target_status
        entity.updated_by = actor_id
        entity.updated_at = now

        timestamp_field = self.definition.timestamp_fields.get(target_status)
        if timestamp_field and getattr(entity, timestamp_field) is None:
            setattr(entity, timestamp_field, now)

        sequence = await self._next_sequence(entity.id)
        self._add_history(entity, from_status, target_status, reason, actor_id, now, sequence)
        await self.flush(entity)

        observe_transition(
            entity_type=self.definition.entity_type,
            from_status=from_status.value,
            to_status=target_status.value,
        )
        log_json(
            logger,
            logging.INFO,
            "status_transition",
            entity_type=self.definition.entity_type,
            reference=entity.reference,
            from_status=from_status.value,
            to_status=target_status.value,
            changed_by=actor_id,
        )
        return entity

    async def record_creation(
        self,
        entity: Any,
        actor_id: str,
        reason: str | None = None,
    ) -> None:
        """Write the initial history row (no legality check)."""
        self._add_history(
            entity,
            None,
            entity.status,
            reason or f"{self.definition.entity_type.replace('_', ' ').capitalize()} created",
            actor_id,
            entity.created_at or utcnow(),
            1,
        )
        await self.flush(entity)
        observe_transition(
            entity_type=self.definition.entity_type,
            from_status=None,
            to_status=entity.status.value,
        )

    async def get_history(self, entity_id: UUID) -> list[Any]:
        """Get status history of an entity, newest first."""
        history_model = self.definition.history_model
        query = (
            select(history_model)
            .where(getattr(history_model, self.definition.owner_fk) == entity_id)
            .order_by(history_model.sequence.desc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _next_sequence(self, entity_id: UUID) -> int:
        history_model = self.definition.history_model
        query = select(func.max(history_model.sequence)).where(
            getattr(history_model, self.definition.owner_fk) == entity_id
        )
        current = await self.db.scalar(query)
        return int(current or 0) + 1

    def _add_history(
        self,
        entity: Any,
        from_status: Enum | None,
        to_status: Enum,
        reason: str | None,
        actor_id: str,
        changed_at,
        sequence: int,
    ) -> None:
        row = self.definition.history_model(
            from_status=from_status,
            to_status=to_status,
            reason=reason,
            changed_by=actor_id,
            changed_at=changed_at,
            sequence=sequence,
        )
        setattr(row, self.definition.owner_fk, entity.id)
        self.db.add(row)

    async def flush(self, entity: Any) -> None:
        """Flush pending changes, surfacing version conflicts as domain errors."""
        try:
            await self.db.flush()
        except (StaleDataError, IntegrityError) as exc:
            observe_rejected_transition(
                entity_type=self.definition.entity_type, reason="concurrent_modification"
            )
            raise ConcurrentModificationError(
                f"{self.definition.entity_type} {entity.reference} was modified by another request",
                {"reference": entity.reference},
            ) from exc

    def _log_rejected(self, entity: Any, target_status: Enum, reason: str) -> None:
        log_json(
            logger,
            logging.WARNING,
            "status_transition_rejected",
            entity_type=self.definition.entity_type,
            reference=entity.reference,
            from_status=entity.status.value,
            to_status=target_status.value,
            reason=reason,
        )
