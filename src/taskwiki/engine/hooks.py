# src/taskwiki/engine/hooks.py

"""
Taskwarrior hook handlers.

This module decides, for an added or modified task, whether a notes file
should be created or removed, and keeps the task's annotations in sync:

- a task that gains the notes tag gets a notes file and an annotation
  pointing at it,
- a task that loses the notes tag has that annotation and file removed.

Design principles:
- Configuration is passed in; there is no global state.
- The annotation is only appended after the notes file has been written.
- Only failures while removing a notes file are recovered; everything else
  propagates to the caller.
"""

import logging
from pathlib import Path

from taskwiki.config import Config

from .model import Task, note_annotation
from .notes import NotesDocument, NotesHeader


logger = logging.getLogger(__name__)

Feedback = str

PLACEHOLDER_CONTENT = "%% Add your notes here"


class Hooks:
    """
    Entry points for the on-add and on-modify hooks.
    """

    def __init__(self, config: Config) -> None:
        self.config = config

    # -----------------------------------------------------------------
    # Public hooks
    # -----------------------------------------------------------------

    def on_add(self, task: Task) -> tuple[Task, Feedback]:
        logger.debug("added = %r", task)

        if self._is_ignored(task) or not task.has_tag(self.config.notes_tag):
            return task, ""

        path = self._create_notes_file(task)
        return task, f"Created notes file at {path}"

    def on_modify(self, original: Task, modified: Task) -> tuple[Task, Feedback]:
        logger.debug("original = %r", original)
        logger.debug("modified = %r", modified)

        if self._is_ignored(modified):
            return modified, ""

        tag = self.config.notes_tag
        had_tag = original.has_tag(tag)
        has_tag = modified.has_tag(tag)

        if not had_tag and has_tag:
            path = self._create_notes_file(modified)
            return modified, f"Created notes file at {path}"

        if had_tag and not has_tag:
            self._remove_path_annotations(modified)
            path = self.note_file_path(modified)
            if self._remove_notes_file(path):
                return modified, f"Removed notes file at {path}"
            return modified, f"No notes file found at {path}"

        return modified, ""

    # -----------------------------------------------------------------
    # Paths
    # -----------------------------------------------------------------

    def note_file_path(self, task: Task) -> Path:
        """<notes_dir>/<uuid>.<ext>"""
        notes_dir = Path(self.config.notes_dir).expanduser()
        return notes_dir / f"{task.uuid}.{self.config.notes_ext}"

    # -----------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------

    def _is_ignored(self, task: Task) -> bool:
        if task.status in self.config.ignored_statuses:
            logger.debug("Skipping task %s with status %s", task.uuid, task.status.value)
            return True
        return False

    def _create_notes_file(self, task: Task) -> Path:
        """
        Write a fresh notes file for `task`, then annotate the task with its path.

        OSError from the write is propagated and leaves the task untouched.
        """
        path = self.note_file_path(task)

        document = NotesDocument(
            path=path,
            header=NotesHeader(title=task.description, date=task.entry.date()),
            content=PLACEHOLDER_CONTENT,
        )

        logger.debug("Creating notes file at %s", path)
        document.write()

        task.annotations.append(note_annotation(str(path)))
        return path

    def _remove_notes_file(self, path: Path) -> bool:
        """
        Delete a notes file. Returns False if nothing was removed.
        """
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("No notes file at %s", path)
            return False
        except OSError as e:
            logger.warning("Cannot remove notes file %s: %s", path, e)
            return False

        logger.debug("Removed notes file at %s", path)
        return True

    def _remove_path_annotations(self, task: Task) -> None:
        task.annotations[:] = [a for a in task.annotations if not a.is_note_link]
