"""Example value synthesis for schema nodes.

Produces a representative JSON value for any schema shape. The output is a
pure function of (node, document): object keys follow property declaration
order and every format literal is fixed.
"""

import copy
import logging

from .kinds import SchemaKind, schema_kind
from .resolver import resolve

logger = logging.getLogger(__name__)

# Returned in place of a reference that is already being expanded on the
# current path.
CYCLE_SENTINEL = None

FORMAT_EXAMPLES = {
    "date": "2024-01-01",
    "date-time": "2024-01-01T00:00:00Z",
    "email": "example@example.com",
    "uri": "https://example.com",
    "uuid": "123e4567-e89b-12d3-a456-426614174000",
}


def synthesize(node, doc: dict, visited: frozenset[str] = frozenset()):
    """Return an example JSON value for ``node``.

    ``visited`` holds the pointers expanded on the current recursion path
    only, so sibling branches may expand the same reference independently.
    """
    if not isinstance(node, dict):
        return None

    kind = schema_kind(node)
    if kind is SchemaKind.REFERENCE:
        pointer = node["$ref"]
        if pointer in visited:
            logger.debug("Cycle at %s, emitting sentinel", pointer)
            return CYCLE_SENTINEL
        target = resolve(pointer, doc)
        if not isinstance(target, dict):
            return None
        return synthesize(target, doc, visited | {pointer})

    if "example" in node:
        return node["example"]

    enum = node.get("enum")
    if isinstance(enum, list) and enum:
        return enum[0]

    if kind is SchemaKind.STRING:
        fmt = node.get("format")
        if fmt in FORMAT_EXAMPLES:
            return FORMAT_EXAMPLES[fmt]
        return node.get("default", "string")

    if kind is SchemaKind.INTEGER:
        return node.get("default", 0)

    if kind is SchemaKind.NUMBER:
        return node.get("default", 0.0)

    if kind is SchemaKind.BOOLEAN:
        return node.get("default", False)

    if kind is SchemaKind.ARRAY:
        return _synthesize_array(node, doc, visited)

    if kind is SchemaKind.OBJECT:
        return _synthesize_object(node, doc, visited)

    if kind in (SchemaKind.ANY_OF, SchemaKind.ONE_OF):
        members = node.get(kind.value) or []
        if not members:
            return {}
        return synthesize(members[0], doc, visited)

    if kind is SchemaKind.ALL_OF:
        merged = {}
        for member in node.get("allOf") or []:
            value = synthesize(member, doc, visited)
            if isinstance(value, dict):
                merged.update(value)
        return merged

    return None


def _synthesize_array(node: dict, doc: dict, visited: frozenset[str]) -> list:
    items = node.get("items")
    if not isinstance(items, dict):
        return []
    item = synthesize(items, doc, visited)
    min_items = node.get("minItems") or 0
    if isinstance(min_items, int) and min_items > 0:
        return [copy.deepcopy(item) for _ in range(min_items)]
    return [item]


def _synthesize_object(node: dict, doc: dict, visited: frozenset[str]) -> dict:
    # A declared ``required`` list (even an empty one) limits the example to
    # those properties; with no ``required`` key every property is included.
    properties = node.get("properties") or {}
    has_required = "required" in node
    required = set(node.get("required") or [])

    result = {}
    for name, prop in properties.items():
        if has_required and name not in required:
            continue
        result[name] = synthesize(prop, doc, visited)
    return result
