"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides
common fixtures and configuration for all test files.
"""
from __future__ import annotations
import pytest
from pathlib import Path
from typing import List, Tuple

from tailfollow.events import EventEmitter
from tailfollow.sources.watcher import WATCH_EVENTS


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root):
    """Return path to the sample follow configuration."""
    return project_root / "configs" / "follow.yaml"


@pytest.fixture
def log_file(tmp_path):
    """An empty file to follow."""
    path = tmp_path / "app.log"
    path.write_bytes(b"")
    return path


@pytest.fixture
def append():
    """Append raw bytes to a file."""
    def _append(path: Path, data: bytes) -> None:
        with open(path, "ab") as f:
            f.write(data)
    return _append


class FakeWatcher(EventEmitter):
    """Watch primitive driven by hand from the tests."""

    def __init__(self, path: str, config) -> None:
        super().__init__(WATCH_EVENTS)
        self.path = path
        self.config = config
        self.started = False
        self.closed = False

    def start(self) -> None:
        self.started = True

    def close(self) -> None:
        self.closed = True
        self.emit("close")


class Recorder:
    """Subscribes to every session event and keeps what it saw."""

    def __init__(self, session) -> None:
        self.lines: List[str] = []
        self.errors: List[Tuple[str, Exception]] = []
        self.successes: List[str] = []
        self.closes: List[str] = []
        session.on("line", lambda f, text: self.lines.append(text))
        session.on("error", lambda f, reason: self.errors.append((f, reason)))
        session.on("success", self.successes.append)
        session.on("close", self.closes.append)


@pytest.fixture
def recorder():
    return Recorder


@pytest.fixture
def watchers():
    """List that collects every FakeWatcher created through `watcher_factory`."""
    return []


@pytest.fixture
def watcher_factory(watchers):
    def factory(path, config):
        w = FakeWatcher(path, config)
        watchers.append(w)
        return w
    return factory
