from __future__ import annotations


class HelmSchemaError(RuntimeError):
    pass


class MalformedAnnotation(HelmSchemaError):
    pass


class SchemaDecodeError(HelmSchemaError):
    pass


class TypeMismatch(SchemaDecodeError):
    pass


class SchemaInconsistency(HelmSchemaError):
    pass


class UnsupportedTag(HelmSchemaError):
    pass


class PointerNotFound(HelmSchemaError):
    pass


class ReferenceResolutionError(HelmSchemaError):
    pass


class ValuesDocumentError(HelmSchemaError):
    pass


class UnknownLegacyType(HelmSchemaError):
    pass


class InvalidSuppressionField(HelmSchemaError, ValueError):
    pass
