"""
Shared fixtures for fetch_transport_retry tests.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from fetch_transport_retry import HTTP_VERBS


class ConnectionFailure(Exception):
    """Failure raised before any response was received (no status)."""


class StatusFailure(Exception):
    """Failure carrying an HTTP status from the server."""

    def __init__(self, status: int, message: str = "") -> None:
        super().__init__(message or f"HTTP {status}")
        self.status = status


@pytest.fixture
def inner():
    """Mock verb transport: every verb is an AsyncMock, dispose is sync."""
    transport = MagicMock()
    for verb in HTTP_VERBS:
        setattr(transport, verb, AsyncMock(return_value={"verb": verb}))
    transport.dispose = MagicMock(return_value=None)
    return transport


@pytest.fixture
def events():
    """Collects emitted events; pass ``events.append`` to ``transport.on``."""
    return []
