from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from helmschema.schema.errors import SchemaInconsistency, TypeMismatch

PRIMITIVE_TYPES = ("object", "string", "integer", "number", "array", "null", "boolean")


@dataclass
class TypeOrTypeList:
    """The ``type`` keyword: a single type name or an ordered list of names."""

    names: list[str] = field(default_factory=list)

    @classmethod
    def of(cls, *names: str) -> "TypeOrTypeList":
        return cls(list(names))

    @classmethod
    def decode(cls, value: Any) -> "TypeOrTypeList":
        if isinstance(value, str):
            return cls([value])
        if isinstance(value, list):
            names: list[str] = []
            for item in value:
                if item is None:
                    names.append("null")
                elif isinstance(item, str):
                    names.append(item)
                else:
                    raise TypeMismatch(f"type list entries must be strings, got {item!r}")
            return cls(names)
        raise TypeMismatch(f"type must be a string or a list of strings, got {value!r}")

    def encode(self) -> str | list[str]:
        if len(self.names) == 1:
            return self.names[0]
        return list(self.names)

    def is_empty(self) -> bool:
        return not self.names or any(name == "" for name in self.names)

    def matches(self, name: str) -> bool:
        return name in self.names

    def validate(self) -> None:
        for name in self.names:
            if name and name not in PRIMITIVE_TYPES:
                raise SchemaInconsistency(f"unsupported type {name!r}")

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __str__(self) -> str:
        if len(self.names) == 1:
            return self.names[0]
        return "[" + ", ".join(self.names) + "]"


@dataclass
class RequiredFlagOrList:
    """The ``required`` keyword.

    Annotations may use ``required: true`` on a property as a shorthand; the
    flag is folded into the parent's name list and never emitted.
    """

    flag: bool = False
    names: list[str] = field(default_factory=list)

    @classmethod
    def decode(cls, value: Any) -> "RequiredFlagOrList":
        if isinstance(value, bool):
            return cls(flag=value)
        if isinstance(value, list):
            if not all(isinstance(item, str) for item in value):
                raise TypeMismatch(f"required list entries must be strings, got {value!r}")
            return cls(names=list(value))
        raise TypeMismatch(f"required must be a boolean or a list of strings, got {value!r}")

    def encode(self) -> list[str]:
        return list(self.names)

    def add(self, name: str) -> None:
        if name not in self.names:
            self.names.append(name)

    def is_explicit(self) -> bool:
        return self.flag or bool(self.names)
