# src/taskwiki/engine/codec.py

"""
Taskwarrior JSON wire format.

Decodes one task object (as exchanged with hooks on stdin/stdout) into a
Task model and encodes it back.

Format rules:
- timestamps are UTC and rendered as YYYYMMDDTHHMMSSZ (no offset, no subseconds),
- uuid is the canonical hyphenated lowercase form,
- status is a lowercase token,
- every attribute not modelled by Task is kept in Task.unknown_fields and
  merged back on encode.

Decoding is strict: there are no fallback formats.
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Final
from uuid import UUID

from .model import Annotation, Status, Task


# ---------------------------------------------------------------------
# Format constants
# ---------------------------------------------------------------------

TIMESTAMP_FORMAT: Final[str] = "%Y%m%dT%H%M%SZ"

_TIMESTAMP_RE = re.compile(r"^[0-9]{8}T[0-9]{6}Z$")
_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-(?:[0-9a-fA-F]{4}-){3}[0-9a-fA-F]{12}$")

KNOWN_FIELDS: Final[tuple[str, ...]] = (
    "status",
    "uuid",
    "entry",
    "description",
    "project",
    "tags",
    "annotations",
    "modified",
)


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class DecodeError(ValueError):
    """
    Raised when a payload is not a valid Taskwarrior task.
    """


class EncodeError(ValueError):
    """
    Raised when a task cannot be rendered as JSON.

    Only reachable through non-JSON values placed in unknown_fields.
    """


# ---------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------

def parse_timestamp(raw: Any, key: str = "timestamp") -> datetime:
    if not isinstance(raw, str) or not _TIMESTAMP_RE.match(raw):
        raise DecodeError(f"Invalid {key} '{raw}' (expected YYYYMMDDTHHMMSSZ)")

    try:
        parsed = datetime.strptime(raw, TIMESTAMP_FORMAT)
    except ValueError as e:
        raise DecodeError(f"Invalid {key} '{raw}': {e}") from e

    return parsed.replace(tzinfo=timezone.utc)


def format_timestamp(value: datetime) -> str:
    """
    Render a datetime in Taskwarrior's format.

    Aware datetimes are converted to UTC first; naive ones are taken as UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIMESTAMP_FORMAT)


# ---------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------

def decode_task(payload: str | bytes) -> Task:
    """
    Decode a single JSON task object.

    Raises DecodeError on invalid JSON, unknown status, non-canonical uuid,
    malformed timestamps or fields of the wrong type.
    """
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError("Task payload must be a JSON object")

    project = data.get("project")
    if project is not None and not isinstance(project, str):
        raise DecodeError("Field 'project' must be a string")

    modified = data.get("modified")

    return Task(
        status=_decode_status(data),
        uuid=_decode_uuid(data),
        entry=parse_timestamp(_require(data, "entry"), "entry"),
        description=_require_str(data, "description"),
        project=project,
        tags=_decode_tags(data),
        annotations=_decode_annotations(data),
        modified=None if modified is None else parse_timestamp(modified, "modified"),
        unknown_fields={k: v for k, v in data.items() if k not in KNOWN_FIELDS},
    )


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise DecodeError(f"Missing required field: {key}")
    return data[key]


def _require_str(data: dict[str, Any], key: str) -> str:
    value = _require(data, key)
    if not isinstance(value, str):
        raise DecodeError(f"Field '{key}' must be a string")
    return value


def _decode_status(data: dict[str, Any]) -> Status:
    raw = _require_str(data, "status")
    try:
        return Status(raw)
    except ValueError as e:
        allowed = ", ".join([s.value for s in Status])
        raise DecodeError(f"Invalid status '{raw}' (allowed: {allowed})") from e


def _decode_uuid(data: dict[str, Any]) -> UUID:
    raw = _require_str(data, "uuid")
    if not _UUID_RE.match(raw):
        raise DecodeError(f"Invalid uuid '{raw}'")
    return UUID(raw)


def _decode_tags(data: dict[str, Any]) -> set[str]:
    raw = data.get("tags", [])
    if raw is None:
        return set()

    if not isinstance(raw, list) or not all(isinstance(t, str) for t in raw):
        raise DecodeError("Field 'tags' must be a list of strings")

    return set(raw)


def _decode_annotations(data: dict[str, Any]) -> list[Annotation]:
    raw = data.get("annotations", [])
    if raw is None:
        return []

    if not isinstance(raw, list):
        raise DecodeError("Field 'annotations' must be a list")

    out: list[Annotation] = []
    for i, item in enumerate(raw, start=1):
        if not isinstance(item, dict):
            raise DecodeError(f"annotations[{i}] must be an object")
        description = item.get("description")
        if not isinstance(description, str):
            raise DecodeError(f"annotations[{i}] must have a string 'description'")
        entry = parse_timestamp(item.get("entry"), f"annotations[{i}].entry")
        out.append(Annotation(entry=entry, description=description))

    return out


# ---------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------

def task_to_dict(task: Task) -> dict[str, Any]:
    """
    Build the wire mapping for a task.

    project, tags and annotations are always present (project may be null,
    tags and annotations may be empty); modified is omitted when unset.
    """
    data: dict[str, Any] = {
        "status": task.status.value,
        "uuid": str(task.uuid),
        "entry": format_timestamp(task.entry),
        "description": task.description,
        "project": task.project,
        "tags": sorted(task.tags),
        "annotations": [
            {"entry": format_timestamp(a.entry), "description": a.description}
            for a in task.annotations
        ],
    }

    if task.modified is not None:
        data["modified"] = format_timestamp(task.modified)

    for key, value in task.unknown_fields.items():
        if key not in data:
            data[key] = value

    return data


def encode_task(task: Task) -> str:
    """Render a task as a single JSON line."""
    try:
        return json.dumps(task_to_dict(task), ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Cannot encode task {task.uuid}: {e}") from e
