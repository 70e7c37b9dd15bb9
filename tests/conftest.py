from __future__ import annotations

import pytest

from tests._fixtures.backend import FakeBackend


@pytest.fixture
def backend() -> FakeBackend:
    """Provide a fresh fake backend with no routes."""
    return FakeBackend()
