from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Any

from ruamel.yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from helmschema.schema.annotation import parse_comment, strip_helm_docs_tags, trim_leading_paragraphs
from helmschema.schema.errors import (
    MalformedAnnotation,
    SchemaInconsistency,
    UnknownLegacyType,
    UnsupportedTag,
    ValuesDocumentError,
)
from helmschema.schema.helm_docs import helm_docs_type_to_schema_type, parse_helm_docs_comment
from helmschema.schema.model import DRAFT_07, Schema
from helmschema.schema.normalize import normalize_required
from helmschema.schema.options import SynthesisOptions
from helmschema.schema.reference import is_local_reference, resolve_reference
from helmschema.schema.types import TypeOrTypeList
from helmschema.schema.validate import validate_schema
from helmschema.schema.values import (
    BOOL_TAG,
    FLOAT_TAG,
    INT_TAG,
    MAP_TAG,
    NULL_TAG,
    SEQ_TAG,
    STR_TAG,
    TIMESTAMP_TAG,
    ValuesDocument,
    key_comment,
    load_values,
    mapping_pairs,
    node_tag,
)

logger = logging.getLogger(__name__)

_TAG_TYPES = {
    NULL_TAG: "null",
    BOOL_TAG: "boolean",
    STR_TAG: "string",
    INT_TAG: "integer",
    FLOAT_TAG: "number",
    TIMESTAMP_TAG: "string",
    SEQ_TAG: "array",
    MAP_TAG: "object",
}

_DECIMAL = re.compile(r"^[+-]?\d+$")


def values_to_schema(path: Path, options: SynthesisOptions | None = None) -> Schema:
    return synthesize(load_values(path), options)


def synthesize(document: ValuesDocument, options: SynthesisOptions | None = None) -> Schema:
    """Build the JSON Schema of a whole values document."""
    options = options or SynthesisOptions()
    schema = Schema.of_type("object")
    schema.schema = DRAFT_07

    root = document.root
    if root is not None:
        if not isinstance(root, MappingNode):
            raise ValuesDocumentError(
                f"{document.path} must be a YAML mapping at the top level, got {node_tag(root)}"
            )
        properties, required = _mapping_properties(document, root, options)
        schema.properties = properties
        for name in required:
            schema.required.add(name)

    # only ever forced on the top level
    if not options.skip.additional_properties:
        schema.additional_properties = False
    return normalize_required(schema)


def type_from_tag(node: Node) -> TypeOrTypeList:
    tag = node_tag(node)
    try:
        return TypeOrTypeList.of(_TAG_TYPES[tag])
    except KeyError:
        raise UnsupportedTag(f"unsupported yaml tag found: {tag}") from None


def cast_value(raw: str, types: TypeOrTypeList) -> Any:
    """Convert a scalar's source text to the first of ``types`` it parses as."""
    for name in types:
        if name == "boolean":
            if raw.lower() == "true":
                return True
            if raw.lower() == "false":
                return False
        elif name == "integer":
            try:
                if _DECIMAL.match(raw):
                    return int(raw)
                return int(raw, 0)
            except ValueError:
                continue
        elif name == "number":
            try:
                number = float(raw)
            except ValueError:
                continue
            if math.isfinite(number):
                return number
    return raw


def _mapping_properties(
    document: ValuesDocument,
    node: MappingNode,
    options: SynthesisOptions,
) -> tuple[dict[str, Schema], list[str]]:
    properties: dict[str, Schema] = {}
    required: list[str] = []
    for key, value in mapping_pairs(node):
        schema, is_required = _key_schema(document, key, value, options)
        properties[key.value] = schema
        if is_required and key.value not in required:
            required.append(key.value)
    return properties, required


def _key_schema(
    document: ValuesDocument,
    key: ScalarNode,
    value: Node,
    options: SynthesisOptions,
) -> tuple[Schema, bool]:
    name = key.value
    skip = options.skip

    comment = key_comment(document, key, value)
    annotated = comment if options.keep_full_comment else trim_leading_paragraphs(comment)
    try:
        schema, description = parse_comment(annotated)
    except MalformedAnnotation as exc:
        raise MalformedAnnotation(f"Error while parsing comment of key {name}: {exc}") from exc

    if options.helm_docs_compatibility_mode:
        _apply_helm_docs(schema, comment)
    if not options.dont_strip_helm_docs_prefix:
        description = strip_helm_docs_tags(description)

    if schema.ref and not is_local_reference(schema.ref):
        resolved = resolve_reference(schema.ref, document.path)
        if resolved is not None:
            schema = resolved

    if schema.has_data:
        try:
            validate_schema(schema)
        except SchemaInconsistency as exc:
            raise SchemaInconsistency(
                f"Error while validating jsonschema of key {name}: {exc}"
            ) from exc
    elif schema.type.is_empty():
        schema.type = type_from_tag(value)

    if schema.ref:
        return schema, False

    is_required = schema.required.flag or (
        not schema.required.names and not skip.required and not schema.has_data
    )

    if (
        not skip.additional_properties
        and isinstance(value, MappingNode)
        and schema.additional_properties is None
    ):
        schema.additional_properties = False
    if not schema.title and not skip.title:
        schema.title = name
    if not schema.description and not skip.description:
        schema.description = description
    if (
        not skip.default
        and schema.default is None
        and isinstance(value, ScalarNode)
        # null scalars carry no default, unlike an explicit empty string
        and node_tag(value) != NULL_TAG
    ):
        schema.default = cast_value(value.value, schema.type)

    if isinstance(value, MappingNode) and schema.properties is None:
        properties, required = _mapping_properties(document, value, options)
        schema.properties = properties
        for child in required:
            schema.required.add(child)
    elif isinstance(value, SequenceNode) and schema.items is None:
        schema.items = _sequence_items(document, value, options)
        normalize_required(schema)

    return schema, is_required


def _sequence_items(
    document: ValuesDocument,
    node: SequenceNode,
    options: SynthesisOptions,
) -> Schema:
    alternatives: list[Schema] = []
    scalar_types: set[str] = set()
    for element in node.value:
        if isinstance(element, ScalarNode):
            element_type = type_from_tag(element)
            if str(element_type) in scalar_types:
                continue
            scalar_types.add(str(element_type))
            alternatives.append(Schema(type=element_type))
        elif isinstance(element, MappingNode):
            properties, required = _mapping_properties(document, element, options)
            item = Schema.of_type("object")
            item.properties = properties
            for name in required:
                item.required.add(name)
            if not options.skip.additional_properties:
                item.additional_properties = False
            alternatives.append(item)
        else:
            item = Schema.of_type("array")
            item.items = _sequence_items(document, element, options)
            alternatives.append(item)

    items = Schema()
    if alternatives:
        items.any_of = alternatives
    return items


def _apply_helm_docs(schema: Schema, comment: str) -> None:
    value = parse_helm_docs_comment(comment)
    if value.default and schema.default is None:
        schema.default = value.default
    if value.description and not schema.description:
        schema.description = value.description
    if value.value_type and schema.type.is_empty():
        try:
            schema.type = TypeOrTypeList.of(helm_docs_type_to_schema_type(value.value_type))
        except UnknownLegacyType as exc:
            logger.warning("%s", exc)
