"""Shared test harness plumbing."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo per-test structlog configuration so no test keeps a closed capture stream."""
    yield
    structlog.reset_defaults()
