# src/taskwiki/engine/model.py

"""
Core domain models.

This module defines the in-memory representations of Taskwarrior tasks
and their annotations.

No filesystem access and no JSON handling should happen here
(see codec.py for the wire format).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4


# Description prefix of annotations that link a task to its notes file.
NOTE_ANNOTATION_PREFIX = "taskw:note"


def _utcnow() -> datetime:
    """Return the current UTC instant in whole seconds (isolated for testability)."""
    return datetime.now(timezone.utc).replace(microsecond=0)


# ---------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------

class Status(str, Enum):
    """
    Taskwarrior task status.

    The values are the lowercase tokens used on the wire.
    """

    PENDING = "pending"
    DELETED = "deleted"
    COMPLETED = "completed"
    WAITING = "waiting"
    RECURRING = "recurring"


# ---------------------------------------------------------------------
# Annotation
# ---------------------------------------------------------------------

@dataclass(slots=True)
class Annotation:
    """
    A timestamped note attached to a task.
    """

    entry: datetime
    description: str

    @property
    def is_note_link(self) -> bool:
        """True if this annotation was created to point at a notes file."""
        return self.description.startswith(f"{NOTE_ANNOTATION_PREFIX} ")


def new_annotation(description: str) -> Annotation:
    return Annotation(entry=_utcnow(), description=description)


def note_annotation(path: str) -> Annotation:
    """Build the annotation recording the location of a task's notes file."""
    return new_annotation(f"{NOTE_ANNOTATION_PREFIX} {path}")


# ---------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------

@dataclass(slots=True)
class Task:
    """
    In-memory representation of a Taskwarrior task.

    Notes:
    - entry and modified are timezone-aware UTC datetimes.
    - project is opaque; dotted hierarchies are not interpreted.
    - unknown_fields keeps every wire attribute not modelled here
      (UDAs, due, end, urgency, ...) so it can be written back unchanged.
    """

    status: Status
    uuid: UUID
    entry: datetime
    description: str

    project: Optional[str] = None
    tags: set[str] = field(default_factory=set)
    annotations: list[Annotation] = field(default_factory=list)
    modified: Optional[datetime] = None

    unknown_fields: dict[str, Any] = field(default_factory=dict)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def with_tag(self, tag: str) -> "Task":
        self.tags.add(tag)
        return self

    @property
    def note_annotations(self) -> list[Annotation]:
        return [a for a in self.annotations if a.is_note_link]


def new_task(description: str) -> Task:
    """
    Create a fresh pending task, the way Taskwarrior would on `task add`.
    """
    now = _utcnow()
    return Task(
        status=Status.PENDING,
        uuid=uuid4(),
        entry=now,
        description=description,
        modified=now,
    )
