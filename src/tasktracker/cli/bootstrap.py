# src/tasktracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root": it turns settings into a TaskStore and
wraps both in an AppState. Nothing here touches the disk; the store creates its
directory lazily on the first save.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _tasks_path(settings) -> Path:
    path = getattr(settings, "tasks_path", None)
    if path:
        return Path(path)
    return Path(getattr(settings, "data_dir", "data")) / "tasks.json"


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable lets tests point the store at a temp directory.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    store = TaskStore(_tasks_path(settings))
    logger.debug("State ready tasks_path=%s", store.path)
    return AppState(settings=settings, store=store)
