# src/taskwiki/config.py

"""Hook settings loaded from environment variables.

A Config is built once by the CLI and handed to the hook engine explicitly;
there is no module-level instance.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from taskwiki.engine.model import Status

ENV_PREFIX = "TASKWIKI"

DEFAULT_NOTES_TAG = "wiki"
DEFAULT_NOTES_DIR = Path("~/vimwiki/tasks")
DEFAULT_NOTES_EXT = "md"
DEFAULT_LOG_LEVEL = "ERROR"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(environ: Mapping[str, str], name: str, default: str) -> str:
    v = environ.get(name)
    if v is None or v.strip() == "":
        return default
    return v.strip()


def _env_list(environ: Mapping[str, str], name: str) -> list[str]:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return []
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(environ: Mapping[str, str], name: str) -> Optional[Path]:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw.strip()).expanduser()


def _parse_statuses(names: list[str]) -> frozenset[Status]:
    out: set[Status] = set()
    for name in names:
        try:
            out.add(Status(name.lower()))
        except ValueError as e:
            allowed = ", ".join([s.value for s in Status])
            raise ValueError(f"Unknown status '{name}' in {_k('IGNORED_STATUSES')} (allowed: {allowed})") from e
    return frozenset(out)


@dataclass(frozen=True, slots=True)
class Config:
    # Tag marking a task as having a notes file
    notes_tag: str = DEFAULT_NOTES_TAG
    # Directory holding notes files
    notes_dir: Path = DEFAULT_NOTES_DIR
    # Extension of notes files, without the dot
    notes_ext: str = DEFAULT_NOTES_EXT

    # Statuses for which the hooks leave notes and annotations alone
    ignored_statuses: frozenset[Status] = field(default_factory=frozenset)

    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[Path] = None

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "Config":
        env = os.environ if environ is None else environ

        return Config(
            notes_tag=_env(env, _k("NOTES_TAG"), DEFAULT_NOTES_TAG),
            notes_dir=_env_path(env, _k("NOTES_DIR")) or DEFAULT_NOTES_DIR.expanduser(),
            notes_ext=_env(env, _k("NOTES_EXT"), DEFAULT_NOTES_EXT).lstrip("."),
            ignored_statuses=_parse_statuses(_env_list(env, _k("IGNORED_STATUSES"))),
            log_level=_env(env, _k("LOG_LEVEL"), DEFAULT_LOG_LEVEL).upper(),
            log_file=_env_path(env, _k("LOG_FILE")),
        )
