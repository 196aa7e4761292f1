from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from helmschema.schema.errors import PointerNotFound, ReferenceResolutionError, SchemaDecodeError
from helmschema.schema.model import Schema

logger = logging.getLogger(__name__)


def is_local_reference(ref: str) -> bool:
    return ref.startswith("#")


def resolve_reference(ref: str, values_path: Path) -> Schema | None:
    """Load the schema a ``$ref`` annotation points at.

    ``ref`` is ``<file>[#<pointer>]`` with ``<file>`` relative to the directory
    of ``values_path``. Returns ``None`` for document-local references and for
    files that do not exist, leaving the reference for the consumer.
    """
    if is_local_reference(ref):
        return None

    file_part, _, pointer = ref.partition("#")
    target = Path(values_path).parent / file_part
    if not target.is_file():
        logger.warning("Referenced schema %s not found (from %s), keeping $ref", target, values_path)
        return None

    try:
        document = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ReferenceResolutionError(f"Failed to read referenced schema: {target}") from exc
    except json.JSONDecodeError as exc:
        raise ReferenceResolutionError(f"Invalid JSON in referenced schema: {target}") from exc

    if pointer:
        document = extract_pointer(document, pointer)
    if not isinstance(document, dict):
        raise ReferenceResolutionError(f"Reference {ref} does not point at a schema object.")

    try:
        schema = Schema.from_mapping(document)
    except SchemaDecodeError as exc:
        raise ReferenceResolutionError(f"Failed to decode referenced schema {ref}: {exc}") from exc
    schema.mark()
    return schema


def extract_pointer(data: Any, pointer: str) -> Any:
    if pointer == "":
        return data
    if not pointer.startswith("/"):
        raise PointerNotFound(f"Pointer must start with '/': {pointer}")
    parts = pointer[1:].split("/")
    current = data
    for part in parts:
        part = part.replace("~1", "/").replace("~0", "~")
        if isinstance(current, list):
            if not part.isdigit():
                raise PointerNotFound(f"Expected list index at '{part}' in {pointer}.")
            index = int(part)
            if index >= len(current):
                raise PointerNotFound(f"Index out of range at '{part}' in {pointer}.")
            current = current[index]
        elif isinstance(current, dict):
            if part not in current:
                raise PointerNotFound(f"Key not found: {part} in {pointer}.")
            current = current[part]
        else:
            raise PointerNotFound(f"Cannot traverse into {type(current).__name__} at '{part}'.")
    return current
