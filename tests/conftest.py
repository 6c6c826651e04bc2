"""Shared test fixtures and helpers for tasklog tests."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tasklog.config import Settings
from tasklog.engine import TaskEngine
from tasklog.events import EventStore
from tasklog.models import CreateEvent, DeleteEvent
from tasklog.server import create_app


# --- Fixtures ---


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def event_file(temp_dir):
    """Path to a not-yet-created event log."""
    return temp_dir / "eventlist.txt"


@pytest.fixture
def store(event_file):
    """Provide an EventStore on an empty log."""
    store = EventStore(event_file)
    store.ensure()
    return store


@pytest.fixture
def engine(event_file):
    """Provide a fresh TaskEngine with an empty log."""
    return TaskEngine(event_file)


@pytest.fixture
def settings(event_file):
    return Settings(event_file=event_file, environment="test")


@pytest.fixture
def client(settings, engine):
    """TestClient over an app sharing the ``engine`` fixture."""
    return TestClient(create_app(settings, engine))


# --- Helper Functions (not fixtures) ---


STAMP = "2025-01-01T00:00:00.000Z"


def make_create(id: str, name: str, **fields) -> CreateEvent:
    """Build a create event with a fixed id and timestamp (and optional overrides)."""
    fields.setdefault("created_at", STAMP)
    return CreateEvent(id=id, name=name, **fields)


def make_delete(id: str) -> DeleteEvent:
    return DeleteEvent(id=id, deleted_at=STAMP)


def write_raw(path: Path, text: str) -> None:
    """Append raw text to a log, bypassing EventStore."""
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)
