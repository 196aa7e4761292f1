from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from helmschema.schema.errors import InvalidSuppressionField

SKIPPABLE_FIELDS = ("title", "description", "required", "default", "additionalProperties")


@dataclass(frozen=True)
class SkipAutoGeneration:
    """Keywords the synthesizer must not fill in on its own."""

    title: bool = False
    description: bool = False
    required: bool = False
    default: bool = False
    additional_properties: bool = False

    @classmethod
    def from_fields(cls, names: Iterable[str]) -> "SkipAutoGeneration":
        names = list(names)
        invalid = [name for name in names if name not in SKIPPABLE_FIELDS]
        if invalid:
            joined = "', '".join(invalid)
            raise InvalidSuppressionField(
                f"unsupported field names '{joined}' for skipping auto-generation"
            )
        return cls(
            title="title" in names,
            description="description" in names,
            required="required" in names,
            default="default" in names,
            additional_properties="additionalProperties" in names,
        )


@dataclass(frozen=True)
class SynthesisOptions:
    keep_full_comment: bool = False
    helm_docs_compatibility_mode: bool = False
    dont_strip_helm_docs_prefix: bool = False
    skip: SkipAutoGeneration = field(default_factory=SkipAutoGeneration)
