from .annotation import parse_comment
from .errors import (
    HelmSchemaError,
    InvalidSuppressionField,
    MalformedAnnotation,
    PointerNotFound,
    ReferenceResolutionError,
    SchemaDecodeError,
    SchemaInconsistency,
    TypeMismatch,
    UnknownLegacyType,
    UnsupportedTag,
    ValuesDocumentError,
)
from .model import Schema
from .normalize import normalize_required
from .options import SkipAutoGeneration, SynthesisOptions
from .reference import resolve_reference
from .synth import synthesize, values_to_schema
from .types import RequiredFlagOrList, TypeOrTypeList
from .validate import validate_schema

__all__ = [
    "HelmSchemaError",
    "InvalidSuppressionField",
    "MalformedAnnotation",
    "PointerNotFound",
    "ReferenceResolutionError",
    "RequiredFlagOrList",
    "Schema",
    "SchemaDecodeError",
    "SchemaInconsistency",
    "SkipAutoGeneration",
    "SynthesisOptions",
    "TypeMismatch",
    "TypeOrTypeList",
    "UnknownLegacyType",
    "UnsupportedTag",
    "ValuesDocumentError",
    "normalize_required",
    "parse_comment",
    "resolve_reference",
    "synthesize",
    "validate_schema",
    "values_to_schema",
]
