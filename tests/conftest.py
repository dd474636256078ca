"""Pytest configuration and shared fixtures for the hub simulator test suite."""

import time

import pytest

from HUB_SIM.errors import TransportFault
from HUB_SIM.physical.channel import create_station_link


# ---------------------------------------------------------------------------
# In-memory endpoints
# ---------------------------------------------------------------------------


class RecordingEndpoint:
    """Write-only endpoint that keeps every write; optionally logs into a shared event list."""

    def __init__(self, name="rec", log=None):
        self.name = name
        self.writes = []
        self.log = log
        self.closed = False

    def write(self, data):
        if self.closed:
            raise TransportFault(self.name, "write", "endpoint closed")
        self.writes.append(bytes(data))
        if self.log is not None:
            self.log.append(("write", bytes(data)))

    def close(self):
        self.closed = True

    @property
    def data(self):
        return b"".join(self.writes)


class ScriptedEndpoint:
    """Read-only endpoint returning scripted chunks, then end-of-stream."""

    def __init__(self, chunks, name="script", log=None):
        self.name = name
        self.chunks = list(chunks)
        self.log = log
        self.reads = 0
        self.closed = False

    def read(self, size):
        self.reads += 1
        data = self.chunks.pop(0) if self.chunks else b""
        if self.log is not None:
            self.log.append(("read", data))
        return data

    def close(self):
        self.closed = True


class FailingEndpoint:
    """Endpoint whose every operation fails."""

    def __init__(self, name="broken"):
        self.name = name
        self.closed = False

    def read(self, size):
        raise TransportFault(self.name, "read", "broken pipe")

    def write(self, data):
        raise TransportFault(self.name, "write", "broken pipe")

    def close(self):
        self.closed = True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def recording_endpoint():
    return RecordingEndpoint


@pytest.fixture
def scripted_endpoint():
    return ScriptedEndpoint


@pytest.fixture
def failing_endpoint():
    return FailingEndpoint


@pytest.fixture
def station_links():
    """Factory for OS-pipe station links, all closed at teardown."""
    links = []

    def make(name):
        link = create_station_link(name)
        links.append(link)
        return link

    yield make

    for link in links:
        link.close_hub_side()
        link.close_station_side()


def wait_until(predicate, timeout=5.0, interval=0.01):
    """Poll predicate until it is true or timeout expires; returns its last value."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def wait_for():
    return wait_until
