# src/tasktracker/tasks/task_models.py

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..errors import DecodeError, ValidationError

# Persisted key order is part of the file format.
RECORD_FIELDS: tuple[str, ...] = ("id", "description", "status", "createdAt", "updatedAt")


def _now() -> datetime:
    # Local wall-clock time without tzinfo; the file format carries no offset.
    return datetime.now()


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - the file stores the member *name* (TODO / IN_PROGRESS / DONE)
    - the CLI shows and accepts the hyphenated label (todo / in-progress / done)
    """

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @property
    def label(self) -> str:
        return self.value.replace("_", "-")

    @classmethod
    def parse(cls, raw: Any) -> TaskStatus:
        """Accept user spellings: 'in-progress', 'in_progress', 'IN_PROGRESS', ..."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            raise ValidationError(f"Invalid status: {raw!r}")
        key = raw.strip().lower().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(f"Invalid status: {raw}") from None

    @classmethod
    def from_name(cls, raw: Any) -> TaskStatus:
        """Strict lookup by persisted enum name."""
        if not isinstance(raw, str):
            raise DecodeError(f"status must be a string, got {raw!r}")
        try:
            return cls[raw]
        except KeyError:
            raise DecodeError(f"unrecognized status name: {raw!r}") from None


def _check_id(task_id: Any) -> int:
    if isinstance(task_id, bool) or not isinstance(task_id, int):
        raise ValidationError(f"ID must be an integer, got {task_id!r}")
    if task_id < 0:
        raise ValidationError("ID cannot be negative")
    return task_id


def _check_description(text: Any) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Description cannot be empty")
    return text.strip()


@dataclass(slots=True)
class Task:
    id: int
    description: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(cls, id: int, description: str) -> Task:
        task_id = _check_id(id)
        text = _check_description(description)
        now = _now()
        return cls(
            id=task_id,
            description=text,
            status=TaskStatus.TODO,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def reconstruct(
        cls,
        id: int,
        description: str,
        status: TaskStatus,
        created_at: datetime,
        updated_at: datetime,
    ) -> Task:
        """
        Rehydrate a stored task.

        Timestamps are kept verbatim (no refresh), but invariants are still
        checked so a bad record can be rejected by the caller.
        """
        task_id = _check_id(id)
        text = _check_description(description)
        if not isinstance(status, TaskStatus):
            raise ValidationError(f"Invalid status: {status!r}")
        if updated_at < created_at:
            raise ValidationError(
                f"updatedAt {updated_at.isoformat()} precedes createdAt {created_at.isoformat()}"
            )
        return cls(
            id=task_id,
            description=text,
            status=status,
            created_at=created_at,
            updated_at=updated_at,
        )

    def _touch(self) -> None:
        # Never move updated_at behind created_at, even if the clock steps back.
        self.updated_at = max(_now(), self.created_at)

    def set_description(self, text: str) -> None:
        self.description = _check_description(text)
        self._touch()

    def set_status(self, new_status: TaskStatus | str) -> None:
        self.status = TaskStatus.parse(new_status)
        self._touch()

    def to_record(self) -> dict[str, Any]:
        # Quote escaping happens in the JSON encoder, not here.
        return {
            "id": self.id,
            "description": self.description,
            "status": self.status.name,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(slots=True)
class TaskCollection:
    """
    All tasks of one invocation, in file (append) order.

    last_issued_id is the high-water mark: ids at or below it are never handed out again.
    """

    tasks: list[Task] = field(default_factory=list)
    last_issued_id: int = 0

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)

    def __len__(self) -> int:
        return len(self.tasks)

    def next_id(self) -> int:
        return max([self.last_issued_id, *(t.id for t in self.tasks)]) + 1

    def find(self, task_id: int) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
