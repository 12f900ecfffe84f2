"""Shared fixtures for tablekit tests."""

from __future__ import annotations

import pytest

from tablekit.sources import RecordSource


@pytest.fixture
def records() -> list[dict]:
    """Three rows with amounts 10, 20 and 30."""
    return [
        {"id": 1, "name": "Alice", "amount": 10},
        {"id": 2, "name": "Bob", "amount": 20},
        {"id": 3, "name": "Carol", "amount": 30},
    ]


@pytest.fixture
def source(records) -> RecordSource:
    """Record source over the sample rows."""
    return RecordSource(records)


@pytest.fixture
def empty_source() -> RecordSource:
    """Source with declared fields and no rows."""
    return RecordSource([], fields={"name": "string", "amount": "integer"})
