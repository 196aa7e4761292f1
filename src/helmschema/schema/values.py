"""Values files as a node graph with the comments attached to each key.

The synthesizer needs both the resolved YAML tag of every value and the
comment written above (or beside) its key. Nodes come from the ruamel.yaml
composer, which already resolves aliases to their anchored node; comments are
recovered from the source lines using the node marks.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from helmschema.schema.errors import ValuesDocumentError

NULL_TAG = "tag:yaml.org,2002:null"
BOOL_TAG = "tag:yaml.org,2002:bool"
STR_TAG = "tag:yaml.org,2002:str"
INT_TAG = "tag:yaml.org,2002:int"
FLOAT_TAG = "tag:yaml.org,2002:float"
TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
SEQ_TAG = "tag:yaml.org,2002:seq"
MAP_TAG = "tag:yaml.org,2002:map"
MERGE_TAG = "tag:yaml.org,2002:merge"


@dataclass
class ValuesDocument:
    path: Path
    root: Node | None
    lines: list[str]


def load_values(path: Path) -> ValuesDocument:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ValuesDocumentError(f"Failed to read values file: {path}") from exc
    return parse_values(text, path)


def parse_values(text: str, path: Path) -> ValuesDocument:
    text = text.replace("\r\n", "\n")
    try:
        # YAML instances hold parser state; never share one across threads
        root = YAML(typ="safe", pure=True).compose(text)
    except YAMLError as exc:
        raise ValuesDocumentError(f"Failed to parse YAML: {path}: {exc}") from exc
    return ValuesDocument(path=Path(path), root=root, lines=text.split("\n"))


def node_tag(node: Node) -> str:
    return str(node.tag)


def mapping_pairs(node: MappingNode) -> Iterator[tuple[ScalarNode, Node]]:
    """Yield the key/value pairs of a mapping with ``<<`` merge keys expanded.

    Keys written in the mapping itself win over merged ones; among merged
    mappings the first one listed wins.
    """
    explicit = {
        key.value for key, _ in node.value if node_tag(key) != MERGE_TAG and isinstance(key, ScalarNode)
    }
    seen: set[str] = set()
    for key, value in node.value:
        if node_tag(key) == MERGE_TAG:
            sources = value.value if isinstance(value, SequenceNode) else [value]
            for source in sources:
                if not isinstance(source, MappingNode):
                    continue
                for merged_key, merged_value in mapping_pairs(source):
                    if merged_key.value in explicit or merged_key.value in seen:
                        continue
                    seen.add(merged_key.value)
                    yield merged_key, merged_value
            continue
        if not isinstance(key, ScalarNode) or key.value in seen:
            continue
        seen.add(key.value)
        yield key, value


def key_comment(document: ValuesDocument, key: Node, value: Node) -> str:
    """Return the head comment of ``key`` followed by its inline comment."""
    parts = [head_comment(document.lines, key), inline_comment(document.lines, key, value)]
    return "\n".join(part for part in parts if part)


def head_comment(lines: list[str], key: Node) -> str:
    line_no = key.start_mark.line
    if line_no >= len(lines):
        return ""
    if lines[line_no][: key.start_mark.column].strip(" -"):
        return ""
    if line_no == 0 or not lines[line_no - 1].strip():
        return ""

    collected: list[str] = []
    for raw in reversed(lines[:line_no]):
        text = raw.strip()
        if text and not text.startswith("#"):
            break
        collected.append(text)
    collected.reverse()
    while collected and not collected[0]:
        collected.pop(0)
    return "\n".join(collected)


def inline_comment(lines: list[str], key: Node, value: Node) -> str:
    if isinstance(value, ScalarNode) and (value.value != "" or value.style is not None):
        if value.style not in (None, "'", '"'):
            return ""
        start, end = value.start_mark, value.end_mark
        if start.line != key.start_mark.line or end.line != start.line:
            return ""
        rest = _rest_of_line(lines, end.line, end.column)
    else:
        end = key.end_mark
        rest = _rest_of_line(lines, end.line, end.column).lstrip()
        if not rest.startswith(":"):
            return ""
        rest = rest[1:]
        if not isinstance(value, ScalarNode) and value.start_mark.line == end.line:
            return ""
    rest = rest.strip()
    if rest.startswith("#"):
        return rest
    return ""


def _rest_of_line(lines: list[str], line_no: int, column: int) -> str:
    if line_no >= len(lines):
        return ""
    return lines[line_no][column:]
