# tests/test_task_models.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from tasktracker.errors import DecodeError, ValidationError
from tasktracker.tasks.task_models import Task, TaskCollection, TaskStatus


def test_create_sets_defaults(clock) -> None:
    task = Task.create(1, "  Buy groceries  ")

    assert task.id == 1
    assert task.description == "Buy groceries"
    assert task.status is TaskStatus.TODO
    assert task.created_at == datetime(2024, 3, 1, 9, 30, 0)
    assert task.updated_at == task.created_at


@pytest.mark.parametrize(
    ("task_id", "description"),
    [(-1, "x"), (1, ""), (1, "   \t "), (1, None), ("1", "x"), (True, "x")],
)
def test_create_rejects_invalid_input(task_id, description) -> None:
    with pytest.raises(ValidationError):
        Task.create(task_id, description)


def test_create_allows_id_zero() -> None:
    assert Task.create(0, "x").id == 0


def test_set_description_refreshes_updated_at_only(clock) -> None:
    task = Task.create(1, "old")
    created = task.created_at

    task.set_description(" new text ")

    assert task.description == "new text"
    assert task.created_at == created
    assert task.updated_at > created


def test_set_description_empty_leaves_task_untouched(clock) -> None:
    task = Task.create(1, "keep me")
    before = (task.description, task.updated_at)

    with pytest.raises(ValidationError):
        task.set_description("")

    assert (task.description, task.updated_at) == before


def test_set_status_accepts_labels_and_members(clock) -> None:
    task = Task.create(1, "x")

    task.set_status("in-progress")
    assert task.status is TaskStatus.IN_PROGRESS
    first_update = task.updated_at

    task.set_status(TaskStatus.DONE)
    assert task.status is TaskStatus.DONE
    assert task.updated_at > first_update


def test_set_status_unknown_value_is_rejected(clock) -> None:
    task = Task.create(1, "x")
    before = (task.status, task.updated_at)

    with pytest.raises(ValidationError):
        task.set_status("blocked")
    with pytest.raises(ValidationError):
        task.set_status(None)  # type: ignore[arg-type]

    assert (task.status, task.updated_at) == before


def test_updated_at_never_precedes_created_at(clock) -> None:
    task = Task.create(1, "x")
    clock.current = task.created_at - timedelta(hours=1)

    task.set_status(TaskStatus.DONE)

    assert task.updated_at == task.created_at


def test_reconstruct_keeps_timestamps_verbatim() -> None:
    created = datetime(2023, 1, 2, 3, 4, 5, 600)
    updated = datetime(2023, 1, 3, 0, 0)

    task = Task.reconstruct(7, "old task", TaskStatus.DONE, created, updated)

    assert task.created_at == created
    assert task.updated_at == updated
    assert task.status is TaskStatus.DONE


def test_reconstruct_rejects_updated_before_created() -> None:
    created = datetime(2023, 1, 2)
    with pytest.raises(ValidationError):
        Task.reconstruct(1, "x", TaskStatus.TODO, created, created - timedelta(seconds=1))


def test_to_record_field_order_and_values() -> None:
    task = Task.reconstruct(
        3,
        'Say "hi"',
        TaskStatus.IN_PROGRESS,
        datetime(2024, 3, 1, 9, 30),
        datetime(2024, 3, 1, 9, 30, 0, 250000),
    )

    record = task.to_record()

    assert list(record) == ["id", "description", "status", "createdAt", "updatedAt"]
    assert record == {
        "id": 3,
        "description": 'Say "hi"',
        "status": "IN_PROGRESS",
        "createdAt": "2024-03-01T09:30:00",
        "updatedAt": "2024-03-01T09:30:00.250000",
    }


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("todo", TaskStatus.TODO),
        ("in-progress", TaskStatus.IN_PROGRESS),
        ("in_progress", TaskStatus.IN_PROGRESS),
        ("IN_PROGRESS", TaskStatus.IN_PROGRESS),
        (" Done ", TaskStatus.DONE),
    ],
)
def test_status_parse_spellings(raw, expected) -> None:
    assert TaskStatus.parse(raw) is expected


def test_status_from_name_is_strict() -> None:
    assert TaskStatus.from_name("IN_PROGRESS") is TaskStatus.IN_PROGRESS
    with pytest.raises(DecodeError):
        TaskStatus.from_name("todo")
    with pytest.raises(DecodeError):
        TaskStatus.from_name(None)


def test_status_labels() -> None:
    assert [s.label for s in TaskStatus] == ["todo", "in-progress", "done"]


def test_collection_next_id_uses_high_water_mark() -> None:
    assert TaskCollection().next_id() == 1

    tasks = TaskCollection(tasks=[Task.create(2, "a"), Task.create(4, "b")])
    assert tasks.next_id() == 5

    tasks.last_issued_id = 9
    assert tasks.next_id() == 10
    assert tasks.find(4) is tasks.tasks[1]
    assert tasks.find(3) is None
