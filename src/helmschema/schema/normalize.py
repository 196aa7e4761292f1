from __future__ import annotations

from helmschema.schema.model import Schema


def normalize_required(schema: Schema) -> Schema:
    """Fold ``required: true`` shorthands into the parents' ``required`` lists.

    ``required: true`` on a property is not valid JSON Schema, so every
    flagged property name is appended to the list of the schema that holds it.
    Safe to run more than once.
    """
    for child in schema.children():
        normalize_required(child)

    if schema.properties:
        for name, prop in schema.properties.items():
            if prop.required.flag:
                schema.required.add(name)
        # properties only apply to objects
        if schema.type.is_empty():
            schema.type.names = ["object"]
    return schema
