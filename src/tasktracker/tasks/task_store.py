# src/tasktracker/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from ..errors import StorageError
from . import task_codec
from .task_models import Task, TaskCollection

logger = logging.getLogger(__name__)

DEFAULT_TASKS_PATH = Path("data") / "tasks.json"


class TaskStore:
    """
    Flat-file task store.

    Layout:
    - <dir>/tasks.json       the task array (see task_codec)
    - <dir>/tasks.meta.json  {"lastId": N}, the highest id ever issued

    Every save rewrites both files in full through a temp file + os.replace,
    so a reader sees either the old or the new content. The sidecar goes first:
    if the task file then fails to land, the only trace is a skipped id.

    A task file with no sidecar next to it came from the older writer, which
    escaped only quotes; it is decoded with task_codec legacy=True.

    Concurrency:
    - single writer assumed; two invocations racing will overwrite each other
    """

    def __init__(self, path: str | Path = DEFAULT_TASKS_PATH) -> None:
        self._path = Path(path)
        self._meta_path = self._path.with_name(f"{self._path.stem}.meta.json")
        logger.debug("TaskStore path=%s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def meta_path(self) -> Path:
        return self._meta_path

    def exists(self) -> bool:
        return self._path.exists()

    # ---- public API ----

    def load_all(self) -> TaskCollection:
        if not self.exists():
            logger.debug("No task file at %s; starting empty.", self._path)
            return TaskCollection(last_issued_id=self._read_last_id())

        try:
            raw = self._path.read_bytes()
        except OSError as exc:
            logger.exception("Failed to read tasks from %s", self._path)
            raise StorageError(f"could not load tasks from {self._path}: {exc}", self._path) from exc

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.warning(
                "Task file %s is not valid UTF-8 (%s); dropping affected entries.", self._path, exc
            )
            text = raw.decode("utf-8", errors="surrogateescape")

        legacy = not self._meta_path.exists()
        if legacy:
            logger.info("No metadata next to %s; reading it as a legacy task file.", self._path)
        result = task_codec.decode_report(text, legacy=legacy)
        if result.dropped:
            logger.warning(
                "Loaded tasks with errors path=%s kept=%d dropped=%d",
                self._path,
                len(result.tasks),
                result.dropped,
            )

        collection = TaskCollection(tasks=result.tasks, last_issued_id=self._read_last_id())
        logger.debug("Loaded %d task(s) from %s", len(collection), self._path)
        return collection

    def save_all(self, tasks: TaskCollection | Iterable[Task]) -> None:
        if isinstance(tasks, TaskCollection):
            collection = tasks
        else:
            collection = TaskCollection(tasks=list(tasks))
        last_id = max([collection.last_issued_id, *(t.id for t in collection.tasks)])

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(self._meta_path, json.dumps({"lastId": last_id}))
            self._write_atomic(self._path, task_codec.encode(collection.tasks))
        except OSError as exc:
            logger.exception("Failed to save tasks to %s", self._path)
            raise StorageError(f"could not save tasks to {self._path}: {exc}", self._path) from exc

        collection.last_issued_id = last_id
        logger.debug("Saved %d task(s) to %s (lastId=%d)", len(collection), self._path, last_id)

    # ---- low-level helpers ----

    @staticmethod
    def _write_atomic(target: Path, text: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, target)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise

    def _read_last_id(self) -> int:
        if not self._meta_path.exists():
            return 0
        try:
            data = json.loads(self._meta_path.read_text("utf-8"))
            value = data.get("lastId", 0) if isinstance(data, dict) else 0
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"bad lastId {value!r}")
            return value
        except (OSError, ValueError) as exc:
            # json.JSONDecodeError is a ValueError
            logger.warning("Ignoring unreadable task metadata %s: %s", self._meta_path, exc)
            return 0
