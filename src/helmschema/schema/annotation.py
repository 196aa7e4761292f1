from __future__ import annotations

import re

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from helmschema.schema.errors import MalformedAnnotation, SchemaDecodeError
from helmschema.schema.model import Schema

SCHEMA_DELIMITER = "# @schema"
COMMENT_PREFIX = "#"

_LEADING_PARAGRAPHS = re.compile(r"(?:.*\n{2,})+", re.DOTALL)
# helm-docs tags such as @ignored or @default -- value
# https://github.com/norwoodj/helm-docs/blob/v1.14.2/pkg/helm/chart_info.go#L18-L24
_HELM_DOCS_TAG = re.compile(r"(\r\n|\r|\n)?\s*@\w+(\s+--\s)?[^\n\r]*", re.MULTILINE | re.DOTALL)
_HELM_DOCS_PREFIX = re.compile(r"^--\s?", re.MULTILINE)


def parse_comment(comment: str) -> tuple[Schema, str]:
    """Split a key comment into its ``@schema`` block and the free-text description.

    ::

        # @schema
        # type: integer
        # minimum: 1
        # @schema
        # number of pods

    Lines between the delimiters are YAML; a second ``#`` is tolerated so that
    commented-out annotations (``## type: integer``) still parse.
    """
    description: list[str] = []
    raw_schema: list[str] = []
    inside = False
    has_data = False

    for line in comment.splitlines():
        if line.rstrip() == SCHEMA_DELIMITER:
            inside = not inside
            continue
        if inside:
            content = _strip_prefix(line, COMMENT_PREFIX)
            content = _strip_prefix(_strip_prefix(content, COMMENT_PREFIX), " ")
            raw_schema.append(content)
            has_data = True
        else:
            description.append(_strip_prefix(_strip_prefix(line, COMMENT_PREFIX), " "))

    if inside:
        raise MalformedAnnotation(f"unclosed schema block found in comment: {comment}")

    schema = _decode_block("\n".join(raw_schema), comment)
    if has_data:
        schema.mark()
    return schema, "\n".join(description)


def trim_leading_paragraphs(comment: str) -> str:
    return _LEADING_PARAGRAPHS.sub("", comment)


def strip_helm_docs_tags(description: str) -> str:
    description = _HELM_DOCS_TAG.sub("", description)
    return _HELM_DOCS_PREFIX.sub("", description)


def _decode_block(text: str, comment: str) -> Schema:
    if not text.strip():
        return Schema()
    try:
        document = YAML(typ="safe", pure=True).load(text)
    except YAMLError as exc:
        raise MalformedAnnotation(f"invalid schema block in comment: {comment}: {exc}") from exc
    if document is None:
        return Schema()
    if not isinstance(document, dict):
        raise MalformedAnnotation(f"schema block must be a mapping in comment: {comment}")
    try:
        return Schema.from_mapping(document)
    except SchemaDecodeError as exc:
        raise MalformedAnnotation(f"invalid schema block in comment: {comment}: {exc}") from exc


def _strip_prefix(value: str, prefix: str) -> str:
    if value.startswith(prefix):
        return value[len(prefix) :]
    return value
