"""Shared test fixtures for barbeat tests."""

from __future__ import annotations

import pytest

from barbeat.model.notes import TimeSignature
from barbeat.server.clips import ClipService


@pytest.fixture
def sig44() -> TimeSignature:
    return TimeSignature(4, 4)


@pytest.fixture
def sig68() -> TimeSignature:
    return TimeSignature(6, 8)


@pytest.fixture
def service() -> ClipService:
    """Provide a fresh ClipService with no clips."""
    return ClipService()


@pytest.fixture
def service_with_clip(service: ClipService) -> ClipService:
    """Provide a ClipService holding clip 'a' (C3 D3 E3 on beats 1-3 of 4/4)."""
    result = service.create_clip("a", "1|1 v100 t1.0 C3\n1|2 D3\n1|3 E3", "4/4")
    assert result.startswith("+")
    return service
