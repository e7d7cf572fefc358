"""Classification of schema nodes into the shapes the engine knows about."""

from enum import Enum

from .resolver import is_reference


class SchemaKind(str, Enum):
    REFERENCE = "reference"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ALL_OF = "allOf"
    ANY_OF = "anyOf"
    ONE_OF = "oneOf"
    UNKNOWN = "unknown"


def declared_type(node: dict) -> str | None:
    """The node's ``type``; for a list-valued type, its first non-null member."""
    value = node.get("type")
    if isinstance(value, list):
        value = next((t for t in value if t != "null"), None)
    return value if isinstance(value, str) and value else None


def schema_kind(node) -> SchemaKind:
    """Explicit ``type`` first, then anyOf, oneOf, allOf, then object."""
    if is_reference(node):
        return SchemaKind.REFERENCE
    if not isinstance(node, dict):
        return SchemaKind.UNKNOWN

    type_name = declared_type(node)
    if type_name is None:
        for key in ("anyOf", "oneOf", "allOf"):
            if node.get(key) is not None:
                return SchemaKind(key)
        return SchemaKind.OBJECT
    try:
        kind = SchemaKind(type_name)
    except ValueError:
        return SchemaKind.UNKNOWN
    return SchemaKind.UNKNOWN if kind is SchemaKind.REFERENCE else kind
