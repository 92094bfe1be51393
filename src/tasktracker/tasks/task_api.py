# src/tasktracker/tasks/task_api.py

from __future__ import annotations

import logging

from ..errors import NotFoundError, ParseError
from .task_models import Task, TaskCollection, TaskStatus

logger = logging.getLogger(__name__)


def parse_task_id(raw: str) -> int:
    try:
        return int(raw.strip())
    except (AttributeError, ValueError):
        raise ParseError(str(raw)) from None


def get_task(tasks: TaskCollection, task_id: int) -> Task:
    task = tasks.find(task_id)
    if task is None:
        raise NotFoundError(task_id)
    return task


def add_task(tasks: TaskCollection, description: str) -> Task:
    """
    Append a new task with the next unused id.

    Ids come from max(existing ids, high-water mark) + 1, so a deleted id is never reused.
    """
    task = Task.create(tasks.next_id(), description)
    tasks.tasks.append(task)
    tasks.last_issued_id = max(tasks.last_issued_id, task.id)
    logger.debug("Task added id=%s", task.id)
    return task


def update_description(tasks: TaskCollection, task_id: int, description: str) -> Task:
    task = get_task(tasks, task_id)
    task.set_description(description)
    logger.debug("Task updated id=%s", task_id)
    return task


def mark_status(tasks: TaskCollection, task_id: int, status: TaskStatus | str) -> Task:
    task = get_task(tasks, task_id)
    task.set_status(status)
    logger.debug("Task status id=%s status=%s", task_id, task.status.value)
    return task


def delete_task(tasks: TaskCollection, task_id: int) -> Task:
    task = get_task(tasks, task_id)
    tasks.tasks.remove(task)
    logger.debug("Task deleted id=%s", task_id)
    return task


def filter_tasks(tasks: TaskCollection, status: TaskStatus | str | None = None) -> list[Task]:
    """Tasks in file order, optionally only those with the given status."""
    if status is None:
        return list(tasks)
    wanted = TaskStatus.parse(status)
    return [t for t in tasks if t.status is wanted]


def format_task(task: Task) -> str:
    return (
        f"[{task.id}] {task.description} - Status: {task.status.label} "
        f"(Created: {task.created_at.isoformat(sep=' ', timespec='seconds')}, "
        f"Updated: {task.updated_at.isoformat(sep=' ', timespec='seconds')})"
    )
