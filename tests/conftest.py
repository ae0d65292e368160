# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskwiki.config import Config
from taskwiki.engine.hooks import Hooks

TASK_UUID = "dde3720b-003f-4776-8e15-61e5d90376af"

TASK_JSON = """
{
    "description": "Dummy Task",
    "entry": "20220110T171619Z",
    "modified": "20220111T074112Z",
    "project": "dummy",
    "status": "pending",
    "uuid": "dde3720b-003f-4776-8e15-61e5d90376af",
    "annotations": [
        {"entry": "20220111T074112Z", "description": "note:dp"}
    ],
    "tags": ["wiki"],
    "user_defined": "custom_field"
}
"""


@pytest.fixture()
def task_json() -> str:
    return TASK_JSON


@pytest.fixture()
def notes_dir(tmp_path: Path) -> Path:
    d = tmp_path / "notes"
    d.mkdir()
    return d


@pytest.fixture()
def config(notes_dir: Path) -> Config:
    """
    Config pointing at a per-test notes directory.

    Built directly rather than from the environment to keep tests isolated.
    """
    return Config(notes_tag="wiki", notes_dir=notes_dir, notes_ext="md")


@pytest.fixture()
def hooks(config: Config) -> Hooks:
    return Hooks(config)
