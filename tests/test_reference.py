from __future__ import annotations

import json
from pathlib import Path

import pytest

from helmschema.schema.errors import PointerNotFound, ReferenceResolutionError
from helmschema.schema.reference import extract_pointer, resolve_reference


@pytest.fixture
def values_path(tmp_path: Path) -> Path:
    (tmp_path / "defs.json").write_text(
        json.dumps(
            {
                "type": "object",
                "definitions": {
                    "port": {"type": "integer", "minimum": 1},
                    "a/b": {"type": "string"},
                },
            }
        ),
        encoding="utf-8",
    )
    return tmp_path / "values.yaml"


def test_resolve_whole_file(values_path: Path) -> None:
    schema = resolve_reference("defs.json", values_path)

    assert schema is not None
    assert schema.has_data is True
    assert schema.type.names == ["object"]


def test_resolve_with_pointer(values_path: Path) -> None:
    schema = resolve_reference("defs.json#/definitions/port", values_path)

    assert schema is not None
    assert schema.to_dict() == {"type": "integer", "minimum": 1}


def test_resolve_escaped_pointer(values_path: Path) -> None:
    schema = resolve_reference("defs.json#/definitions/a~1b", values_path)

    assert schema is not None
    assert schema.to_dict() == {"type": "string"}


def test_missing_pointer_target(values_path: Path) -> None:
    with pytest.raises(PointerNotFound, match="Key not found: nope"):
        resolve_reference("defs.json#/definitions/nope", values_path)


def test_missing_file_is_left_alone(values_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    assert resolve_reference("missing.json", values_path) is None
    assert "not found" in caplog.text


def test_local_reference_is_left_alone(values_path: Path) -> None:
    assert resolve_reference("#/definitions/port", values_path) is None


def test_invalid_json(values_path: Path) -> None:
    (values_path.parent / "broken.json").write_text("{", encoding="utf-8")

    with pytest.raises(ReferenceResolutionError, match="Invalid JSON"):
        resolve_reference("broken.json", values_path)


def test_pointer_must_reach_an_object(values_path: Path) -> None:
    with pytest.raises(ReferenceResolutionError, match="does not point at a schema object"):
        resolve_reference("defs.json#/type", values_path)


def test_extract_pointer_into_lists() -> None:
    data = {"items": [{"a": 1}, {"a": 2}]}

    assert extract_pointer(data, "/items/1/a") == 2
    assert extract_pointer(data, "") is data
    with pytest.raises(PointerNotFound, match="Index out of range"):
        extract_pointer(data, "/items/5")
    with pytest.raises(PointerNotFound, match="must start with"):
        extract_pointer(data, "items")


def test_extract_pointer_addresses_empty_keys() -> None:
    data = {"": {"": 1, "a": 2}}

    assert extract_pointer(data, "/") == {"": 1, "a": 2}
    assert extract_pointer(data, "//") == 1
