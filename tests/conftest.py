"""Shared fixtures for watch party tests."""

import pytest

from backend import RoomRegistry
from connections import Connection
from session import SessionCoordinator


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def coordinator(registry):
    return SessionCoordinator(registry)


@pytest.fixture
def make_connection():
    """Factory for connections with readable ids."""
    def _make(connection_id=None):
        return Connection(connection_id)
    return _make


def events_of(connection, event_type=None):
    """Drain a connection and return (type, data) pairs, optionally filtered by type."""
    messages = [(m["type"], m["data"]) for m in connection.drain()]
    if event_type is None:
        return messages
    return [m for m in messages if m[0] == event_type]
