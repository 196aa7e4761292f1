from __future__ import annotations

import json
from pathlib import Path

import pytest

from helmschema.schema.errors import (
    MalformedAnnotation,
    SchemaInconsistency,
    UnsupportedTag,
    ValuesDocumentError,
)
from helmschema.schema.model import DRAFT_07
from helmschema.schema.options import SkipAutoGeneration, SynthesisOptions
from helmschema.schema.synth import cast_value, synthesize
from helmschema.schema.types import TypeOrTypeList
from helmschema.schema.values import parse_values


def schema_of(tmp_path: Path, text: str, options: SynthesisOptions | None = None) -> dict:
    document = parse_values(text.strip() + "\n", tmp_path / "values.yaml")
    return synthesize(document, options).to_dict()


def test_inline_comment_becomes_description(tmp_path: Path) -> None:
    schema = schema_of(tmp_path, "replicaCount: 1 # number of pods")

    assert schema == {
        "$schema": DRAFT_07,
        "type": "object",
        "properties": {
            "replicaCount": {
                "type": "integer",
                "title": "replicaCount",
                "description": "number of pods",
                "default": 1,
            }
        },
        "additionalProperties": False,
        "required": ["replicaCount"],
    }
    assert list(schema["properties"]["replicaCount"]) == ["type", "title", "description", "default"]


def test_empty_document_yields_bare_object(tmp_path: Path) -> None:
    schema = schema_of(tmp_path, "")

    assert schema == {"$schema": DRAFT_07, "type": "object", "additionalProperties": False}


def test_top_level_sequence_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValuesDocumentError, match="YAML mapping"):
        schema_of(tmp_path, "- a\n- b")


def test_nested_mapping_gets_properties_and_head_comments(tmp_path: Path) -> None:
    schema = schema_of(
        tmp_path,
        """
image:
  # image repository
  repository: nginx
  tag: "1.25"
""",
    )

    image = schema["properties"]["image"]
    assert image["type"] == "object"
    assert image["additionalProperties"] is False
    assert image["required"] == ["repository", "tag"]
    assert image["properties"]["repository"] == {
        "type": "string",
        "title": "repository",
        "description": "image repository",
        "default": "nginx",
    }
    assert image["properties"]["tag"]["default"] == "1.25"


def test_sequence_items_dedupe_scalar_types(tmp_path: Path) -> None:
    schema = schema_of(
        tmp_path,
        """
hosts:
  - a
  - b
  - 1
  - name: x
""",
    )

    hosts = schema["properties"]["hosts"]
    assert hosts["type"] == "array"
    assert "default" not in hosts
    assert hosts["items"]["anyOf"] == [
        {"type": "string"},
        {"type": "integer"},
        {
            "type": "object",
            "properties": {"name": {"type": "string", "title": "name", "default": "x"}},
            "additionalProperties": False,
            "required": ["name"],
        },
    ]


def test_nested_sequence_gets_array_alternative(tmp_path: Path) -> None:
    schema = schema_of(tmp_path, "matrix:\n  - [1, 2]\n")

    items = schema["properties"]["matrix"]["items"]
    assert items == {"anyOf": [{"type": "array", "items": {"anyOf": [{"type": "integer"}]}}]}


def test_empty_sequence_has_empty_items(tmp_path: Path) -> None:
    schema = schema_of(tmp_path, "tolerations: []")

    assert schema["properties"]["tolerations"]["items"] == {}


def test_annotation_type_casts_default(tmp_path: Path) -> None:
    schema = schema_of(
        tmp_path,
        """
# @schema
# type: boolean
# @schema
enabled: "true"
""",
    )

    assert schema["properties"]["enabled"] == {"type": "boolean", "title": "enabled", "default": True}
    # annotated keys are only required when they say so
    assert "required" not in schema


def test_required_flag_is_folded_into_parent_once(tmp_path: Path) -> None:
    schema = schema_of(
        tmp_path,
        """
# @schema
# type: string
# required: true
# @schema
name: foo
""",
    )

    assert schema["required"] == ["name"]
    assert "required" not in schema["properties"]["name"]


def test_null_value_gets_null_type_without_default(tmp_path: Path) -> None:
    schema = schema_of(tmp_path, "nodeSelector:")

    assert schema["properties"]["nodeSelector"] == {"type": "null", "title": "nodeSelector"}


def test_timestamp_is_a_string(tmp_path: Path) -> None:
    schema = schema_of(tmp_path, "since: 2024-01-01")

    assert schema["properties"]["since"]["type"] == "string"
    assert schema["properties"]["since"]["default"] == "2024-01-01"


def test_unknown_tag_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(UnsupportedTag, match="!custom"):
        schema_of(tmp_path, "value: !custom foo")


def test_merge_keys_are_expanded(tmp_path: Path) -> None:
    schema = schema_of(
        tmp_path,
        """
base: &base
  a: 1
  b: old
derived:
  <<: *base
  b: 2
""",
    )

    derived = schema["properties"]["derived"]
    assert list(derived["properties"]) == ["a", "b"]
    assert derived["properties"]["b"]["type"] == "integer"
    assert derived["required"] == ["a", "b"]


def test_missing_reference_is_kept(tmp_path: Path) -> None:
    schema = schema_of(
        tmp_path,
        """
# @schema
# $ref: missing.json
# @schema
foo: bar
""",
    )

    assert schema["properties"]["foo"] == {"$ref": "missing.json"}
    assert "required" not in schema


def test_resolved_reference_gets_title_and_default(tmp_path: Path) -> None:
    (tmp_path / "defs.json").write_text(
        json.dumps({"definitions": {"port": {"type": "integer", "minimum": 1}}}),
        encoding="utf-8",
    )
    schema = schema_of(
        tmp_path,
        """
# @schema
# $ref: defs.json#/definitions/port
# @schema
port: 8080
""",
    )

    assert schema["properties"]["port"] == {
        "type": "integer",
        "title": "port",
        "default": 8080,
        "minimum": 1,
    }


def test_skip_auto_generation(tmp_path: Path) -> None:
    options = SynthesisOptions(
        skip=SkipAutoGeneration.from_fields(["title", "default", "required", "additionalProperties"])
    )
    schema = schema_of(tmp_path, "replicaCount: 1", options)

    assert schema == {
        "$schema": DRAFT_07,
        "type": "object",
        "properties": {"replicaCount": {"type": "integer"}},
    }


def test_leading_paragraphs_are_trimmed_unless_kept(tmp_path: Path) -> None:
    text = """
# Section header

# the port
port: 80
"""
    trimmed = schema_of(tmp_path, text)
    kept = schema_of(tmp_path, text, SynthesisOptions(keep_full_comment=True))

    assert trimmed["properties"]["port"]["description"] == "the port"
    assert kept["properties"]["port"]["description"] == "Section header\n\nthe port"


def test_helm_docs_comment_fills_unset_fields(tmp_path: Path) -> None:
    schema = schema_of(
        tmp_path,
        """
# -- (int) Number of replicas
# @default -- 3
replicas:
""",
        SynthesisOptions(helm_docs_compatibility_mode=True),
    )

    assert schema["properties"]["replicas"] == {
        "type": "integer",
        "title": "replicas",
        "description": "Number of replicas",
        "default": "3",
    }


def test_helm_docs_prefix_is_stripped_by_default(tmp_path: Path) -> None:
    schema = schema_of(tmp_path, "# -- Number of replicas\nreplicas: 2")

    assert schema["properties"]["replicas"]["description"] == "Number of replicas"


def test_malformed_annotation_names_the_key(tmp_path: Path) -> None:
    with pytest.raises(MalformedAnnotation, match="key name"):
        schema_of(tmp_path, "# @schema\n# type: string\nname: foo")


def test_inconsistent_annotation_names_the_key(tmp_path: Path) -> None:
    text = """
# @schema
# type: integer
# pattern: ^a
# @schema
count: 1
"""
    with pytest.raises(SchemaInconsistency, match="key count"):
        schema_of(tmp_path, text)


@pytest.mark.parametrize(
    ("raw", "types", "expected"),
    [
        ("True", ("boolean",), True),
        ("0x1f", ("integer",), 31),
        ("1_000", ("integer",), 1000),
        ("1.5", ("integer", "number"), 1.5),
        (".inf", ("number",), ".inf"),
        ("abc", ("integer",), "abc"),
    ],
)
def test_cast_value(raw: str, types: tuple[str, ...], expected: object) -> None:
    assert cast_value(raw, TypeOrTypeList.of(*types)) == expected


def test_required_flag_and_required_list_do_not_duplicate(tmp_path: Path) -> None:
    schema = schema_of(
        tmp_path,
        """
# @schema
# type: object
# required: [port]
# @schema
server:
  # @schema
  # type: integer
  # required: true
  # @schema
  port: 80
""",
    )

    server = schema["properties"]["server"]
    assert server["required"] == ["port"]
    assert server["additionalProperties"] is False
    assert server["properties"]["port"] == {"type": "integer", "title": "port", "default": 80}


def test_cast_value_keeps_oversized_integer_text() -> None:
    digits = "9" * 5000

    assert cast_value(digits, TypeOrTypeList.of("integer")) == digits
