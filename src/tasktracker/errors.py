# src/tasktracker/errors.py

"""
Error taxonomy.

Everything the app raises on purpose derives from TaskTrackerError, so the
command dispatcher can catch one type at the boundary and map it to a message
and an exit code.
"""

from __future__ import annotations

from pathlib import Path


class TaskTrackerError(Exception):
    """Base class for expected, user-reportable failures."""


class ValidationError(TaskTrackerError):
    """Invalid id, empty description or unrecognized status."""


class NotFoundError(TaskTrackerError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task not found with ID: {task_id}")
        self.task_id = task_id


class ParseError(TaskTrackerError):
    """A command argument could not be parsed (e.g. a non-numeric id)."""

    def __init__(self, raw: str, message: str | None = None) -> None:
        super().__init__(message or "Invalid task ID. Please provide a numeric ID.")
        self.raw = raw


class DecodeError(TaskTrackerError):
    """
    A single stored entry is malformed.

    Raised and caught inside the codec; the entry is dropped and decoding goes on.
    """


class StorageError(TaskTrackerError):
    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class UsageError(TaskTrackerError):
    """A command was called with missing arguments."""
