"""Compatibility with the helm-docs comment convention.

helm-docs documents values with comments such as::

    # -- (int) Number of replicas
    # continued description
    # @default -- 3
    replicaCount: 3

Only the last ``# --`` group of a comment counts, the same as helm-docs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from helmschema.schema.errors import UnknownLegacyType

_VALUE_DESCRIPTION = re.compile(r"^\s*#\s*([^@\s]\S*)\s+--\s*(.*)$")
_RAW_DESCRIPTION = re.compile(r"^\s*#\s+--\s*(.*)$")
_CONTINUATION = re.compile(r"^\s*#(\s?)(.*)$")
_DEFAULT_VALUE = re.compile(r"^\s*# @default -- (.*)$")
_VALUE_TYPE = re.compile(r"^\((.*?)\)\s*(.*)$")
_OTHER_TAG = re.compile(r"^\s*#\s+@\w+")

_TYPE_MAP = {
    "int": "integer",
    "bool": "boolean",
    "float": "number",
    "list": "array",
    "map": "object",
    "string": "string",
    "object": "object",
}


@dataclass
class HelmDocsValue:
    description: str = ""
    default: str = ""
    value_type: str = ""


def parse_helm_docs_comment(comment: str) -> HelmDocsValue:
    lines = comment.splitlines()
    start = None
    for index, line in enumerate(lines):
        if _RAW_DESCRIPTION.match(line) or _VALUE_DESCRIPTION.match(line):
            start = index
    if start is None:
        return HelmDocsValue()

    first = lines[start]
    match = _RAW_DESCRIPTION.match(first)
    description = match.group(1) if match else _VALUE_DESCRIPTION.match(first).group(2)

    result = HelmDocsValue()
    type_match = _VALUE_TYPE.match(description)
    if type_match:
        result.value_type = type_match.group(1)
        description = type_match.group(2)

    parts = [description.strip()] if description.strip() else []
    for line in lines[start + 1 :]:
        default_match = _DEFAULT_VALUE.match(line)
        if default_match:
            result.default = default_match.group(1).strip()
            continue
        if _OTHER_TAG.match(line):
            continue
        continuation = _CONTINUATION.match(line)
        if continuation and continuation.group(2).strip():
            parts.append(continuation.group(2).strip())
    result.description = " ".join(parts)
    return result


def helm_docs_type_to_schema_type(value_type: str) -> str:
    try:
        return _TYPE_MAP[value_type]
    except KeyError:
        raise UnknownLegacyType(
            f"cant translate helm-docs type ({value_type}) to helm-schema type"
        ) from None
