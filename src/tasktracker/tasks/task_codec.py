# src/tasktracker/tasks/task_codec.py

"""
Task collection <-> text.

The on-disk shape is a compact JSON array:

    [{"id":1,"description":"Buy milk","status":"TODO","createdAt":"...","updatedAt":"..."}]

Decoding is two-stage:
- strict: the whole blob goes through json.loads, then each element is checked on its own
- salvage: if the blob is not valid JSON, split it on the "}, {" boundary and recover
  every entry that still parses (json first, then a per-key scan)

legacy=True is for files from the older writer, which escaped only quotes. Those
are never fed to json.loads: "C:\\temp\\new" there is a path, not a tab and a
newline. Every entry goes straight to the per-key scan and only \\" is unescaped.

A bad entry is dropped and counted; it never takes the rest of the file down with it.
The salvage split cannot cope with a raw "},{" inside a description.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..errors import DecodeError, ValidationError
from .task_models import RECORD_FIELDS, Task, TaskStatus

logger = logging.getLogger(__name__)

EMPTY_MARKER = "[]"

_BOUNDARY_RE = re.compile(r"\}\s*,\s*\{")
_KEY_RES = {key: re.compile(r'"%s"\s*:\s*' % re.escape(key)) for key in RECORD_FIELDS}


@dataclass(slots=True)
class DecodeResult:
    tasks: list[Task] = field(default_factory=list)
    dropped: int = 0
    errors: list[str] = field(default_factory=list)

    def drop(self, index: int, reason: Exception | str) -> None:
        msg = f"entry #{index}: {reason}"
        self.dropped += 1
        self.errors.append(msg)
        logger.warning("Dropping malformed task %s", msg)


def encode(tasks: Iterable[Task]) -> str:
    records = [task.to_record() for task in tasks]
    if not records:
        return EMPTY_MARKER
    return json.dumps(records, ensure_ascii=False, separators=(",", ":"))


def decode(text: str, *, legacy: bool = False) -> list[Task]:
    return decode_report(text, legacy=legacy).tasks


def decode_report(text: str, *, legacy: bool = False) -> DecodeResult:
    result = DecodeResult()
    body = (text or "").strip()
    if not body or body == EMPTY_MARKER:
        return result

    if legacy:
        return _collect(result, _salvage_entries(body, scan_only=True))

    entries: list[Any]
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        logger.warning("Task data is not valid JSON (%s); salvaging entries one by one.", exc)
        entries = _salvage_entries(body)
    else:
        if not isinstance(data, list):
            result.drop(0, f"expected a JSON array, got {type(data).__name__}")
            return result
        entries = data

    return _collect(result, entries)


def _collect(result: DecodeResult, entries: list[Any]) -> DecodeResult:
    seen: set[int] = set()
    for index, raw in enumerate(entries):
        try:
            if isinstance(raw, DecodeError):
                raise raw
            task = _record_to_task(raw)
            if task.id in seen:
                raise DecodeError(f"duplicate id {task.id}")
        except (DecodeError, ValidationError) as exc:
            result.drop(index, exc)
            continue
        seen.add(task.id)
        result.tasks.append(task)

    logger.debug("Decoded %d task(s), dropped %d.", len(result.tasks), result.dropped)
    return result


# ---- strict record mapping ----


def _parse_timestamp(value: Any, key: str) -> datetime:
    if not isinstance(value, str):
        raise DecodeError(f"{key} must be a string, got {value!r}")
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise DecodeError(f"{key} is not a valid timestamp: {value!r}") from None
    if parsed.tzinfo is not None:
        raise DecodeError(f"{key} must be a local timestamp without offset: {value!r}")
    return parsed


def _record_to_task(raw: Any) -> Task:
    if not isinstance(raw, dict):
        raise DecodeError(f"entry is not an object: {type(raw).__name__}")

    missing = [key for key in RECORD_FIELDS if raw.get(key) is None]
    if missing:
        raise DecodeError(f"missing field(s): {', '.join(missing)}")

    task_id = raw["id"]
    if isinstance(task_id, bool) or not isinstance(task_id, int):
        raise DecodeError(f"invalid id: {task_id!r}")

    description = raw["description"]
    if not isinstance(description, str):
        raise DecodeError(f"description must be a string, got {description!r}")
    try:
        description.encode("utf-8")
    except UnicodeEncodeError:
        # undecodable bytes come through as surrogateescape code points
        raise DecodeError(f"description is not valid UTF-8: {description!r}") from None

    return Task.reconstruct(
        id=task_id,
        description=description,
        status=TaskStatus.from_name(raw["status"]),
        created_at=_parse_timestamp(raw["createdAt"], "createdAt"),
        updated_at=_parse_timestamp(raw["updatedAt"], "updatedAt"),
    )


# ---- salvage path ----


def _salvage_entries(body: str, *, scan_only: bool = False) -> list[dict[str, Any] | DecodeError]:
    if body.startswith("["):
        body = body[1:]
    if body.endswith("]"):
        body = body[:-1]
    body = body.strip()
    if not body:
        return []

    out: list[dict[str, Any] | DecodeError] = []
    for chunk in _BOUNDARY_RE.split(body):
        chunk = chunk.strip()
        if not chunk.startswith("{"):
            chunk = "{" + chunk
        if not chunk.endswith("}"):
            chunk = chunk + "}"
        try:
            out.append(_scan_record(chunk) if scan_only else _chunk_to_record(chunk))
        except DecodeError as exc:
            out.append(exc)
    return out


def _chunk_to_record(chunk: str) -> dict[str, Any]:
    try:
        value = json.loads(chunk)
    except json.JSONDecodeError:
        return _scan_record(chunk)
    if not isinstance(value, dict):
        raise DecodeError(f"entry is not an object: {type(value).__name__}")
    return value


def _scan_record(chunk: str) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for key in RECORD_FIELDS:
        value = _extract_value(chunk, key)
        if value is None:
            raise DecodeError(f"missing field(s): {key}")
        record[key] = value

    try:
        record["id"] = int(record["id"])
    except ValueError:
        raise DecodeError(f"invalid id: {record['id']!r}") from None
    record["description"] = record["description"].replace('\\"', '"')
    return record


def _extract_value(chunk: str, key: str) -> str | None:
    """
    Find `"key":` and return the raw value after it.

    Quoted values run to the next unescaped quote; bare literals run to the
    next ',' or '}'. Returns None if the key is absent.
    """
    match = _KEY_RES[key].search(chunk)
    if match is None:
        return None
    start = match.end()

    if chunk.startswith('"', start):
        pos = start + 1
        while pos < len(chunk):
            ch = chunk[pos]
            if ch == "\\":
                pos += 2
                continue
            if ch == '"':
                return chunk[start + 1 : pos]
            pos += 1
        raise DecodeError(f"unterminated string value for {key!r}")

    end = len(chunk)
    for stop in (",", "}"):
        idx = chunk.find(stop, start)
        if idx != -1:
            end = min(end, idx)
    return chunk[start:end].strip()
