"""Unit tests for reference code generation."""

import re
from datetime import UTC, datetime

from courierops.core.reference import generate_reference


def test_reference_has_prefix_date_and_suffix():
    reference = generate_reference("CORP", datetime(2026, 1, 15, 9, 30, tzinfo=UTC))

    prefix, day, suffix = reference.split("-")
    assert prefix == "CORP"
    assert day == "20260115"
    assert re.fullmatch(r"[0-9A-F]{8}", suffix)


def test_references_are_unique():
    references = {generate_reference("TKT") for _ in range(200)}
    assert len(references) == 200
