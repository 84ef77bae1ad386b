"""Human-readable reference codes (``PREFIX-YYYYMMDD-XXXXXXXX``)."""

import secrets
from datetime import UTC, datetime


def generate_reference(prefix: str, now: datetime | None = None) -> str:
    """Generate a reference code for a new application or ticket.

    Args:
        prefix: Upper-case entity prefix, e.g. ``CORP`` or ``TKT``
        now: Creation time (defaults to current UTC time)

    Returns:
        Reference code such as ``CORP-20260115-9F3A1C7B``
    """
    now = now or datetime.now(UTC)
    return f"{prefix}-{now:%Y%m%d}-{secrets.token_hex(4).upper()}"
