# tests/conftest.py

from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from fakes import FakeClock
from tasktracker.cli.bootstrap import create_initial_state
from tasktracker.core.state import AppState
from tasktracker.tasks import task_models
from tasktracker.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    data_dir = tmp_path / "data"
    return SimpleNamespace(
        app_name="task-tracker-test",
        log_level="WARNING",
        log_file=None,
        data_dir=data_dir,
        tasks_path=data_dir / "tasks.json",
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_path)


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    return create_initial_state(settings=settings)


@pytest.fixture()
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr(task_models, "_now", fake)
    return fake


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """main() reconfigures the root logger; put pytest's handlers back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)
