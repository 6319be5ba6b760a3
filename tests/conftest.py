"""Shared fixtures for the client tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from adapters.api_client import ClientRegistry
from core.config import AppSettings


@pytest.fixture
def settings() -> AppSettings:
    """Settings that ignore any .env on the machine running the tests."""
    return AppSettings(_env_file=None, http_timeout_seconds=5.0)


@pytest.fixture
async def registry(settings: AppSettings) -> AsyncIterator[ClientRegistry]:
    """Isolated registry, closed after each test."""
    async with ClientRegistry(settings) as reg:
        yield reg
