"""Notification service.

Delivery channels (email, SMS, push) live outside this service; status
changes are only queued as structured log events for a downstream consumer.
"""

import logging
from enum import Enum

from courierops.core.config import get_settings
from courierops.core.structured_logging import log_json

logger = logging.getLogger(__name__)


class NotificationService:
    """Queues notifications about lifecycle events."""

    def __init__(self, enabled: bool | None = None):
        if enabled is None:
            enabled = get_settings().notifications_enabled
        self.enabled = enabled

    def status_changed(
        self,
        entity_type: str,
        reference: str,
        from_status: Enum | None,
        to_status: Enum,
        recipient: str | None = None,
        reason: str | None = None,
    ) -> bool:
        """Queue a status change notification.

        Args:
            entity_type: Entity type, e.g. ``support_ticket``
            reference: Reference code of the entity
            from_status: Previous status (None for creation)
            to_status: New status
            recipient: Address or identifier of the party to notify
            reason: Optional reason recorded with the change

        Returns:
            True if the notification was queued, False if notifications are disabled
        """
        if not self.enabled:
            return False

        log_json(
            logger,
            logging.INFO,
            "notification_queued",
            entity_type=entity_type,
            reference=reference,
            from_status=from_status.value if from_status is not None else None,
            to_status=to_status.value,
            recipient=recipient,
            reason=reason,
        )
        return True
