from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from helmschema.schema.errors import SchemaDecodeError, TypeMismatch
from helmschema.schema.types import RequiredFlagOrList, TypeOrTypeList

DRAFT_07 = "http://json-schema.org/draft-07/schema#"
EXTENSION_PREFIX = "x-"


@dataclass
class Schema:
    """A JSON Schema node as read from annotations and written to values.schema.json.

    Attribute order is the order keys are emitted in. ``None`` marks an unset
    value for ``const``, ``default``, numeric constraints and child schemas, so
    an annotation cannot set them to JSON ``null``.
    """

    schema: str = ""
    id: str = ""
    ref: str = ""
    type: TypeOrTypeList = field(default_factory=TypeOrTypeList)
    title: str = ""
    description: str = ""
    const: Any = None
    enum: list[Any] | None = None
    default: Any = None
    pattern: str = ""
    format: str = ""
    min_length: int | None = None
    max_length: int | None = None
    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: int | float | None = None
    exclusive_maximum: int | float | None = None
    multiple_of: int | float | None = None
    properties: dict[str, "Schema"] | None = None
    pattern_properties: dict[str, "Schema"] | None = None
    additional_properties: "bool | Schema | None" = None
    required: RequiredFlagOrList = field(default_factory=RequiredFlagOrList)
    items: "Schema | None" = None
    min_items: int | None = None
    max_items: int | None = None
    any_of: list["Schema"] | None = None
    all_of: list["Schema"] | None = None
    one_of: list["Schema"] | None = None
    not_: "Schema | None" = None
    if_: "Schema | None" = None
    then: "Schema | None" = None
    else_: "Schema | None" = None
    deprecated: bool = False
    read_only: bool = False
    write_only: bool = False
    examples: list[Any] | None = None
    extensions: dict[str, Any] = field(default_factory=dict)
    has_data: bool = field(default=False, repr=False)

    @classmethod
    def of_type(cls, *names: str) -> "Schema":
        return cls(type=TypeOrTypeList.of(*names))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Schema":
        if not isinstance(data, Mapping):
            raise SchemaDecodeError(f"schema must be a mapping, got {type(data).__name__}")
        schema = cls()
        for key, attr, decode in FIELDS:
            if key not in data:
                continue
            value = data[key]
            if value is None:
                continue
            setattr(schema, attr, decode(key, value))
        for key, value in data.items():
            if not isinstance(key, str) or key in FIELD_NAMES:
                continue
            if key.startswith(EXTENSION_PREFIX):
                schema.extensions[key] = value
        return schema

    def mark(self) -> None:
        self.has_data = True

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, attr, _ in FIELDS:
            value = getattr(self, attr)
            if _is_unset(attr, value):
                continue
            result[key] = _encode(value)
        for key, value in self.extensions.items():
            result[key] = value
        return result

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False, default=str)

    def children(self) -> list["Schema"]:
        found: list[Schema] = []
        for mapping in (self.properties, self.pattern_properties):
            if mapping:
                found.extend(mapping.values())
        if isinstance(self.additional_properties, Schema):
            found.append(self.additional_properties)
        for single in (self.items, self.not_, self.if_, self.then, self.else_):
            if single is not None:
                found.append(single)
        for group in (self.any_of, self.all_of, self.one_of):
            if group:
                found.extend(group)
        return found


def _is_unset(attr: str, value: Any) -> bool:
    if value is None:
        return True
    if attr in _NULLABLE_ONLY:
        return False
    if isinstance(value, TypeOrTypeList):
        return not value.names
    if isinstance(value, RequiredFlagOrList):
        return not value.names
    if isinstance(value, (str, list, dict)):
        return not value
    if attr in _FLAGS:
        return value is False
    return False


def _encode(value: Any) -> Any:
    if isinstance(value, Schema):
        return value.to_dict()
    if isinstance(value, (TypeOrTypeList, RequiredFlagOrList)):
        return value.encode()
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_encode(item) for item in value]
    return value


def _string(key: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise SchemaDecodeError(f"{key} must be a string, got {value!r}")


def _integer(key: str, value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise SchemaDecodeError(f"{key} must be an integer, got {value!r}")


def _number(key: str, value: Any) -> int | float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    raise SchemaDecodeError(f"{key} must be a number, got {value!r}")


def _boolean(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise SchemaDecodeError(f"{key} must be a boolean, got {value!r}")


def _any(key: str, value: Any) -> Any:
    return value


def _list(key: str, value: Any) -> list[Any]:
    if isinstance(value, list):
        return list(value)
    raise SchemaDecodeError(f"{key} must be a list, got {value!r}")


def _schema(key: str, value: Any) -> Schema:
    if not isinstance(value, Mapping):
        raise SchemaDecodeError(f"{key} must be a schema mapping, got {value!r}")
    return Schema.from_mapping(value)


def _schema_map(key: str, value: Any) -> dict[str, Schema]:
    if not isinstance(value, Mapping):
        raise SchemaDecodeError(f"{key} must be a mapping of schemas, got {value!r}")
    return {str(name): _schema(f"{key}.{name}", item or {}) for name, item in value.items()}


def _schema_list(key: str, value: Any) -> list[Schema]:
    if not isinstance(value, list):
        raise SchemaDecodeError(f"{key} must be a list of schemas, got {value!r}")
    return [_schema(f"{key}[{index}]", item) for index, item in enumerate(value)]


def _types(key: str, value: Any) -> TypeOrTypeList:
    return TypeOrTypeList.decode(value)


def _required(key: str, value: Any) -> RequiredFlagOrList:
    return RequiredFlagOrList.decode(value)


def _bool_or_schema(key: str, value: Any) -> bool | Schema:
    if isinstance(value, bool):
        return value
    if isinstance(value, Mapping):
        return Schema.from_mapping(value)
    raise TypeMismatch(f"{key} must be a boolean or a schema, got {value!r}")


Decoder = Callable[[str, Any], Any]

FIELDS: tuple[tuple[str, str, Decoder], ...] = (
    ("$schema", "schema", _string),
    ("$id", "id", _string),
    ("$ref", "ref", _string),
    ("type", "type", _types),
    ("title", "title", _string),
    ("description", "description", _string),
    ("const", "const", _any),
    ("enum", "enum", _list),
    ("default", "default", _any),
    ("pattern", "pattern", _string),
    ("format", "format", _string),
    ("minLength", "min_length", _integer),
    ("maxLength", "max_length", _integer),
    ("minimum", "minimum", _number),
    ("maximum", "maximum", _number),
    ("exclusiveMinimum", "exclusive_minimum", _number),
    ("exclusiveMaximum", "exclusive_maximum", _number),
    ("multipleOf", "multiple_of", _number),
    ("properties", "properties", _schema_map),
    ("patternProperties", "pattern_properties", _schema_map),
    ("additionalProperties", "additional_properties", _bool_or_schema),
    ("required", "required", _required),
    ("items", "items", _schema),
    ("minItems", "min_items", _integer),
    ("maxItems", "max_items", _integer),
    ("anyOf", "any_of", _schema_list),
    ("allOf", "all_of", _schema_list),
    ("oneOf", "one_of", _schema_list),
    ("not", "not_", _schema),
    ("if", "if_", _schema),
    ("then", "then", _schema),
    ("else", "else_", _schema),
    ("deprecated", "deprecated", _boolean),
    ("readOnly", "read_only", _boolean),
    ("writeOnly", "write_only", _boolean),
    ("examples", "examples", _list),
)

FIELD_NAMES = frozenset(key for key, _, _ in FIELDS)

_NULLABLE_ONLY = {"const", "default", "additional_properties"}
_FLAGS = {"deprecated", "read_only", "write_only"}
