# src/tasktracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..tasks.task_models import TaskCollection
from ..tasks.task_store import TaskStore


@dataclass(slots=True)
class AppState:
    # Settings are kept on the state so handlers never read config globals.
    settings: object
    store: TaskStore

    # Filled by the dispatcher right before a handler runs.
    tasks: TaskCollection = field(default_factory=TaskCollection)
