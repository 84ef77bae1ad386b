"""Small structured logging helper.

Every log line is a single JSON object so lifecycle events (transitions,
rejected transitions, notifications) can be consumed by any log collector.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from courierops.core.request_context import get_request_id


def log_json(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """Emit a single JSON log line with the request correlation ID, if any."""

    payload: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "event": event,
    }
    request_id = get_request_id()
    if request_id:
        payload["request_id"] = request_id

    payload.update(fields)
    logger.log(level, json.dumps(payload, default=str))


def configure_logging(level: int = logging.INFO) -> None:
    """Route courierops loggers to stderr with the bare message as format.

    The message already is a JSON document, so no extra formatting is applied.
    """
    root = logging.getLogger("courierops")
    if root.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
