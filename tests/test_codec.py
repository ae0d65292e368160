# tests/test_codec.py

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from taskwiki.engine.codec import (
    DecodeError,
    EncodeError,
    decode_task,
    encode_task,
    format_timestamp,
    parse_timestamp,
)
from taskwiki.engine.model import Annotation, Status, new_task

from .conftest import TASK_UUID


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_decode_all_fields(task_json: str) -> None:
    task = decode_task(task_json)

    assert task.uuid == UUID(TASK_UUID)
    assert task.description == "Dummy Task"
    assert task.project == "dummy"
    assert task.status is Status.PENDING
    assert task.entry == _utc(2022, 1, 10, 17, 16, 19)
    assert task.modified == _utc(2022, 1, 11, 7, 41, 12)
    assert task.tags == {"wiki"}
    assert task.annotations == [
        Annotation(entry=_utc(2022, 1, 11, 7, 41, 12), description="note:dp"),
    ]
    assert task.unknown_fields == {"user_defined": "custom_field"}


def test_decode_accepts_bytes(task_json: str) -> None:
    task = decode_task(task_json.encode("utf-8"))
    assert task.description == "Dummy Task"


def test_round_trip_reproduces_every_field(task_json: str) -> None:
    original = json.loads(task_json)
    original["urgency"] = 4.2
    original["due"] = "20220301T000000Z"
    original["depends"] = ["a", "b"]
    original["meta"] = {"nested": [1, None, True]}

    encoded = encode_task(decode_task(json.dumps(original)))

    assert json.loads(encoded) == original


def test_encode_uses_taskwarrior_formats(task_json: str) -> None:
    encoded = encode_task(decode_task(task_json))

    assert '"entry":"20220110T171619Z"' in encoded
    assert '"modified":"20220111T074112Z"' in encoded
    assert f'"uuid":"{TASK_UUID}"' in encoded
    assert '"status":"pending"' in encoded
    assert "\n" not in encoded


def test_uppercase_uuid_is_encoded_lowercase(task_json: str) -> None:
    data = json.loads(task_json)
    data["uuid"] = TASK_UUID.upper()

    encoded = json.loads(encode_task(decode_task(json.dumps(data))))

    assert encoded["uuid"] == TASK_UUID


def test_tags_are_encoded_as_array() -> None:
    task = new_task("Tagged").with_tag("b").with_tag("a")

    encoded = json.loads(encode_task(task))

    assert sorted(encoded["tags"]) == ["a", "b"]


def test_empty_collections_and_null_project_are_encoded() -> None:
    encoded = json.loads(encode_task(new_task("Bare")))

    assert encoded["project"] is None
    assert encoded["tags"] == []
    assert encoded["annotations"] == []
    assert set(encoded) == {"status", "uuid", "entry", "description", "project", "tags", "annotations", "modified"}


def test_round_trip_keeps_explicit_null_and_empty_fields() -> None:
    payload = {
        "uuid": "0b5c3a76-51e6-4e2b-a7de-3b9f0fd81c41",
        "description": "Plan trip",
        "status": "pending",
        "entry": "20220110T171619Z",
        "project": None,
        "tags": [],
        "annotations": [],
    }

    encoded = encode_task(decode_task(json.dumps(payload)))

    assert json.loads(encoded) == payload



def test_missing_optional_fields_decode_to_defaults() -> None:
    task = decode_task(
        json.dumps(
            {
                "status": "waiting",
                "uuid": TASK_UUID,
                "entry": "20220110T171619Z",
                "description": "Minimal",
            }
        )
    )

    assert task.status is Status.WAITING
    assert task.project is None
    assert task.tags == set()
    assert task.annotations == []
    assert task.modified is None
    assert task.unknown_fields == {}


@pytest.mark.parametrize("status", [s.value for s in Status])
def test_every_status_token_decodes(task_json: str, status: str) -> None:
    data = json.loads(task_json)
    data["status"] = status
    assert decode_task(json.dumps(data)).status.value == status


@pytest.mark.parametrize(
    "key, value",
    [
        ("status", "Pending"),
        ("status", "open"),
        ("uuid", "u1"),
        ("uuid", "dde3720b003f47768e1561e5d90376af"),
        ("uuid", "{dde3720b-003f-4776-8e15-61e5d90376af}"),
        ("entry", "2022-01-10T17:16:19Z"),
        ("entry", "20220110T171619"),
        ("entry", "20220110T171619+0100"),
        ("entry", "20221310T171619Z"),
        ("entry", "٢٠٢٢0110T171619Z"),
        ("modified", "20220111"),
        ("description", 42),
        ("tags", "wiki"),
        ("tags", [1, 2]),
        ("annotations", [{"description": "no entry"}]),
        ("annotations", ["plain"]),
        ("project", 7),
    ],
)
def test_invalid_fields_raise_decode_error(task_json: str, key: str, value: object) -> None:
    data = json.loads(task_json)
    data[key] = value

    with pytest.raises(DecodeError):
        decode_task(json.dumps(data))


@pytest.mark.parametrize("key", ["status", "uuid", "entry", "description"])
def test_missing_required_field_raises_decode_error(task_json: str, key: str) -> None:
    data = json.loads(task_json)
    del data[key]

    with pytest.raises(DecodeError, match=key):
        decode_task(json.dumps(data))


@pytest.mark.parametrize("payload", ["", "not json", "[1, 2]", '"task"', "{"])
def test_malformed_payload_raises_decode_error(payload: str) -> None:
    with pytest.raises(DecodeError):
        decode_task(payload)


def test_parse_and_format_timestamp() -> None:
    ts = parse_timestamp("20220110T171619Z")

    assert ts == _utc(2022, 1, 10, 17, 16, 19)
    assert format_timestamp(ts) == "20220110T171619Z"


def test_format_timestamp_converts_to_utc() -> None:
    cet = timezone(timedelta(hours=1))
    assert format_timestamp(datetime(2022, 1, 10, 18, 16, 19, tzinfo=cet)) == "20220110T171619Z"


def test_non_json_unknown_field_raises_encode_error() -> None:
    task = new_task("Broken")
    task.unknown_fields["bad"] = object()

    with pytest.raises(EncodeError):
        encode_task(task)
