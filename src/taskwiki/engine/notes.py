# src/taskwiki/engine/notes.py

"""
Notes files attached to tasks.

A notes file is free text with an optional YAML header at the top:

    ---
    title: Plan trip
    date: 2022-01-10
    keywords: []
    ---

    %% Add your notes here

Reading never rejects a document. If the header block is present but cannot
be interpreted, the document is loaded without a header and the block stays
part of the content, so a hand-edited file is never lost.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Final, Optional

import yaml


logger = logging.getLogger(__name__)

HEADER_DELIMITER: Final[str] = "---"

_HEADER_KEYS: Final[tuple[str, ...]] = ("title", "date", "keywords")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class HeaderError(ValueError):
    """
    Raised when a header block is not a valid notes header.
    """


# ---------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------

@dataclass(slots=True)
class NotesHeader:
    """
    Structured metadata of a notes file.

    `extra` keeps keys other than title/date/keywords (author, tags, ...)
    in their original order.
    """

    title: str
    date: date
    keywords: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, text: str) -> "NotesHeader":
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise HeaderError(f"Invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise HeaderError("Header must be a mapping")

        title = data.get("title")
        if not isinstance(title, str):
            raise HeaderError("Header key 'title' must be a string")

        return cls(
            title=title,
            date=_parse_date(data.get("date")),
            keywords=_parse_keywords(data.get("keywords")),
            extra={k: v for k, v in data.items() if k not in _HEADER_KEYS},
        )

    def to_yaml(self) -> str:
        data: dict[str, Any] = {
            "title": self.title,
            "date": self.date,
            "keywords": list(self.keywords),
        }
        for key, value in self.extra.items():
            data.setdefault(key, value)

        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as e:
            raise HeaderError(f"Invalid ISO date for 'date': '{value}'") from e

    raise HeaderError("Header key 'date' must be an ISO date")


def _parse_keywords(value: Any) -> list[str]:
    if value is None:
        return []

    if not isinstance(value, list):
        raise HeaderError("Header key 'keywords' must be a list")

    out: list[str] = []
    for item in value:
        if isinstance(item, (dict, list)):
            raise HeaderError("Header key 'keywords' must contain plain values")
        out.append(str(item))
    return out


# ---------------------------------------------------------------------
# Header splitting
# ---------------------------------------------------------------------

def split_header(text: str) -> Optional[tuple[str, str]]:
    """
    Split a document into (header_text, body), both trimmed.

    A header is recognised only when the trimmed document starts with a
    `---` line and a second `---` line closes it. Returns None otherwise.
    """
    lines = text.strip().splitlines()
    if not lines or lines[0].strip() != HEADER_DELIMITER:
        return None

    for i in range(1, len(lines)):
        if lines[i].strip() == HEADER_DELIMITER:
            header = "\n".join(lines[1:i]).strip()
            body = "\n".join(lines[i + 1:]).strip()
            return header, body

    return None


# ---------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------

@dataclass(slots=True)
class NotesDocument:
    """
    A notes file on disk: location, optional header and body text.
    """

    path: Path
    header: Optional[NotesHeader] = None
    content: str = ""

    def render(self) -> str:
        if self.header is None:
            return self.content
        return f"{HEADER_DELIMITER}\n{self.header.to_yaml()}{HEADER_DELIMITER}\n\n{self.content}"

    def write(self) -> None:
        """
        Create or truncate the file at `path` with the rendered document.

        The parent directory must already exist; OSError is propagated.
        """
        logger.debug("Writing notes file %s", self.path)
        Path(self.path).write_text(self.render(), encoding="utf-8")


def parse_document(text: str, path: str | Path) -> NotesDocument:
    """
    Build a NotesDocument from file contents. Never fails.
    """
    p = Path(path)

    parts = split_header(text)
    if parts is None:
        return NotesDocument(path=p, header=None, content=text.strip())

    header_text, body = parts
    try:
        header = NotesHeader.from_yaml(header_text)
    except HeaderError as e:
        logger.debug("Ignoring header of %s: %s", p, e)
        return NotesDocument(path=p, header=None, content=text.strip())

    return NotesDocument(path=p, header=header, content=body)


def open_document(path: str | Path) -> NotesDocument:
    """
    Read and parse a notes file.

    Raises OSError if the file cannot be read as UTF-8 text.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise OSError(f"Cannot read notes file {p}: {e}") from e

    return parse_document(text, p)
