"""Global pytest fixtures for an isolated, deterministic environment."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from jobsage import config
from jobsage.errors import PersistenceError
from jobsage.local_storage import InMemoryKeyValueStore


@pytest.fixture(autouse=True)
def _isolate_config_dir(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Keep config.json and persona.json out of the developer's home directory."""
    config_dir = tmp_path / "jobsage-config"
    monkeypatch.setenv("JOBSAGE_CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(config, "_config_dir", config_dir)
    config.reset_config()
    yield config_dir
    config.reset_config()


class FlakyStorage(InMemoryKeyValueStore):
    """In-memory store whose writes can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail = False
        self.saves = 0

    def save_snapshot(self, key: str, text: str) -> None:
        if self.fail:
            raise PersistenceError(key, "quota exceeded")
        self.saves += 1
        super().save_snapshot(key, text)


@pytest.fixture
def storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


@pytest.fixture
def clock():
    """Clock that advances one second per call."""
    start = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
    ticks = itertools.count()
    return lambda: start + timedelta(seconds=next(ticks))
