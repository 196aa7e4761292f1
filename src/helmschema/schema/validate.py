from __future__ import annotations

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError

from helmschema.schema.errors import SchemaInconsistency
from helmschema.schema.model import Schema

# https://json-schema.org/understanding-json-schema/reference/string.html#built-in-formats
STRING_FORMATS = {
    "date-time",
    "time",
    "date",
    "duration",
    "email",
    "idn-email",
    "hostname",
    "idn-hostname",
    "ipv4",
    "ipv6",
    "uuid",
    "uri",
    "uri-reference",
    "iri",
    "iri-reference",
    "uri-template",
    "json-pointer",
    "relative-json-pointer",
    "regex",
}


def validate_schema(schema: Schema) -> None:
    """Check an annotated schema for consistency.

    The encoded node is first checked against the draft-07 meta-schema, then
    the local rules run on the node and all of its children. The first
    violation is raised as :class:`SchemaInconsistency`.
    """
    document = schema.to_dict()
    try:
        Draft7Validator.check_schema(document)
    except SchemaError as exc:
        raise SchemaInconsistency(f"invalid jsonschema: {exc.message}") from exc
    _check(schema)


def _check(schema: Schema) -> None:
    schema.type.validate()
    kind = schema.type
    typed = not kind.is_empty()

    if schema.properties and typed and not kind.matches("object"):
        raise SchemaInconsistency(f"cant use properties if type is {kind}. Use type=object")

    if schema.pattern and typed and not kind.matches("string"):
        raise SchemaInconsistency(f"cant use pattern if type is {kind}. Use type=string")
    if schema.format and typed and not kind.matches("string"):
        raise SchemaInconsistency(f"cant use format if type is {kind}. Use type=string")
    if (schema.min_length is not None or schema.max_length is not None) and typed and not kind.matches(
        "string"
    ):
        raise SchemaInconsistency(
            f"cant use minLength or maxLength if type is {kind}. Use type=string"
        )
    if (
        schema.min_length is not None
        and schema.max_length is not None
        and schema.min_length > schema.max_length
    ):
        raise SchemaInconsistency("cant use minLength > maxLength")
    if schema.format and schema.pattern:
        raise SchemaInconsistency("cant use format and pattern option at the same time")

    if schema.items is not None:
        _check(schema.items)
        if typed and not kind.matches("array"):
            raise SchemaInconsistency(f"cant use items if type is {kind}. Use type=array")
    if (schema.min_items is not None or schema.max_items is not None) and typed and not kind.matches(
        "array"
    ):
        raise SchemaInconsistency(
            f"cant use minItems or maxItems if type is {kind}. Use type=array"
        )
    if (
        schema.min_items is not None
        and schema.max_items is not None
        and schema.max_items < schema.min_items
    ):
        raise SchemaInconsistency("minItems cant be greater than maxItems")

    if schema.const is not None and typed:
        raise SchemaInconsistency("if you are using const, you cant use type")
    if schema.enum is not None and typed:
        raise SchemaInconsistency("if you are using enum, you cant use type")

    if schema.format and schema.format not in STRING_FORMATS:
        raise SchemaInconsistency(f"the format {schema.format} is not supported")

    numeric = {
        "minimum": schema.minimum,
        "maximum": schema.maximum,
        "exclusiveMinimum": schema.exclusive_minimum,
        "exclusiveMaximum": schema.exclusive_maximum,
        "multipleOf": schema.multiple_of,
    }
    for keyword, value in numeric.items():
        if value is None or not typed:
            continue
        if not kind.matches("number") and not kind.matches("integer"):
            raise SchemaInconsistency(f"if you use {keyword}, you cant use type={kind}")
    if schema.multiple_of is not None and schema.multiple_of <= 0:
        raise SchemaInconsistency("multipleOf must be greater than 0")
    if schema.minimum is not None and schema.exclusive_minimum is not None:
        raise SchemaInconsistency("you cant set minimum and exclusiveMinimum")
    if schema.maximum is not None and schema.exclusive_maximum is not None:
        raise SchemaInconsistency("you cant set maximum and exclusiveMaximum")

    for child in schema.children():
        if child is not schema.items:
            _check(child)
