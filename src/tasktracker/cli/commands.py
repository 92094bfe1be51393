# src/tasktracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

from ..core.state import AppState
from ..errors import (
    NotFoundError,
    ParseError,
    StorageError,
    TaskTrackerError,
    UsageError,
    ValidationError,
)
from ..tasks import task_api
from ..tasks.task_models import TaskStatus

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    OK = 0
    USAGE = 1
    INVALID = 2
    NOT_FOUND = 3
    STORAGE = 4


@dataclass(frozen=True, slots=True)
class CommandResult:
    code: ExitCode
    text: str

    @property
    def ok(self) -> bool:
        return self.code == ExitCode.OK


@dataclass(frozen=True, slots=True)
class _Command:
    handler: CommandHandler
    usage: str
    help_text: str
    mutates: bool


_HELP_NAMES = ("help", "-h", "--help")


class CommandRegistry:
    """
    Maps argv[0] to a handler.

    One call to handle() is one invocation: load all tasks, run the handler,
    save all tasks if the command mutates them. Handlers raise TaskTrackerError
    subclasses; this is the only place they are turned into messages.
    """

    def __init__(self, prog: str = "task-tracker") -> None:
        self.prog = prog
        self._commands: dict[str, _Command] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        *,
        usage: str = "",
        mutates: bool = True,
    ) -> None:
        self._commands[name.lower()] = _Command(
            handler=handler,
            usage=usage,
            help_text=help_text,
            mutates=mutates,
        )

    def names(self) -> list[str]:
        return list(self._commands)

    def handle(self, state: AppState, argv: list[str]) -> CommandResult:
        if not argv or argv[0].lower() in _HELP_NAMES:
            return CommandResult(ExitCode.OK, self.build_help())

        name = argv[0].lower()
        args = argv[1:]
        command = self._commands.get(name)
        if command is None:
            logger.debug("Unknown command %r", argv[0])
            return CommandResult(ExitCode.USAGE, f"Unknown command: {argv[0]}\n{self.build_help()}")

        try:
            state.tasks = state.store.load_all()
            text = command.handler(state, args)
            if command.mutates:
                state.store.save_all(state.tasks)
        except TaskTrackerError as exc:
            return self._error_result(name, exc)

        return CommandResult(ExitCode.OK, text)

    @staticmethod
    def _error_result(name: str, exc: TaskTrackerError) -> CommandResult:
        logger.debug("Command %s failed: %s: %s", name, type(exc).__name__, exc)
        if isinstance(exc, NotFoundError):
            return CommandResult(ExitCode.NOT_FOUND, str(exc))
        if isinstance(exc, UsageError):
            return CommandResult(ExitCode.USAGE, f"Error: {exc}")
        if isinstance(exc, (ValidationError, ParseError)):
            return CommandResult(ExitCode.INVALID, f"Error: {exc}")
        if isinstance(exc, StorageError):
            return CommandResult(ExitCode.STORAGE, f"Error: {exc}")
        return CommandResult(ExitCode.INVALID, f"Error: {exc}")

    def build_help(self) -> str:
        width = max((len(f"{n} {c.usage}".strip()) for n, c in self._commands.items()), default=0)
        lines = [
            "==== Task Tracker CLI ====",
            f"Usage: {self.prog} <command> [arguments]",
            "",
            "Commands:",
        ]
        for name, cmd in self._commands.items():
            lines.append(f"  {f'{name} {cmd.usage}'.strip():<{width}}  - {cmd.help_text}")
        lines += [
            "",
            "Status filters: " + ", ".join(s.label for s in TaskStatus),
            "",
            "Examples:",
            f"  {self.prog} add Buy groceries",
            f"  {self.prog} list done",
            f"  {self.prog} mark-in-progress 1",
            f"  {self.prog} update 1 Buy milk and bread",
        ]
        return "\n".join(lines)


registry = CommandRegistry()


def _require_id(args: list[str], missing: str) -> int:
    if not args:
        raise UsageError(missing)
    return task_api.parse_task_id(args[0])


def cmd_add(state: AppState, args: list[str]) -> str:
    if not args:
        raise UsageError("Please provide a task description.")
    task = task_api.add_task(state.tasks, " ".join(args))
    return f"Task added: [{task.id}] {task.description}"


def cmd_list(state: AppState, args: list[str]) -> str:
    status = TaskStatus.parse(args[0]) if args else None
    if not len(state.tasks):
        return "No tasks found."

    tasks = task_api.filter_tasks(state.tasks, status)
    if not tasks and status is not None:
        return f"No tasks found with status: {status.label}"
    return "\n".join(task_api.format_task(t) for t in tasks)


def cmd_update(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        raise UsageError("Please provide a task ID and new description.")
    task_id = task_api.parse_task_id(args[0])
    task = task_api.update_description(state.tasks, task_id, " ".join(args[1:]))
    return f"Task updated: [{task.id}] {task.description}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    task_id = _require_id(args, "Please provide a task ID to delete.")
    task = task_api.delete_task(state.tasks, task_id)
    return f"Task deleted: [{task.id}] {task.description}"


def _make_mark(status: TaskStatus) -> CommandHandler:
    def cmd_mark(state: AppState, args: list[str]) -> str:
        task_id = _require_id(args, "Please provide a task ID.")
        task = task_api.mark_status(state.tasks, task_id, status)
        return f"Task marked as {status.label}: [{task.id}] {task.description}"

    cmd_mark.__name__ = f"cmd_mark_{status.value}"
    return cmd_mark


registry.register("add", cmd_add, "Add a new task", usage="<description>")
registry.register(
    "list", cmd_list, "List all tasks or filter by status", usage="[status]", mutates=False
)
registry.register("update", cmd_update, "Update a task's description", usage="<id> <description>")
registry.register("delete", cmd_delete, "Delete a task by ID", usage="<id>")
registry.register(
    "mark-in-progress", _make_mark(TaskStatus.IN_PROGRESS), "Mark a task as in-progress", usage="<id>"
)
registry.register("mark-done", _make_mark(TaskStatus.DONE), "Mark a task as done", usage="<id>")
registry.register("mark-todo", _make_mark(TaskStatus.TODO), "Move a task back to todo", usage="<id>")
