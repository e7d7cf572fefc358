"""Indented text rendering of a schema's shape.

Example output for a ``Pet`` reference::

    → Pet
    {
      id*: integer(int64)
      name*: string
          (minLength: 1)
      tag: string  // optional label
    }
"""

import json
import logging

from .kinds import declared_type
from .resolver import is_reference, ref_name, resolve

logger = logging.getLogger(__name__)

INDENT = "  "
CIRCULAR_MARKER = "⚠ circular"

# (schema key, label) pairs shown under a property line
CONSTRAINT_KEYS = (
    ("pattern", "pattern"),
    ("default", "default"),
    ("minLength", "minLength"),
    ("maxLength", "maxLength"),
    ("minimum", "min"),
    ("maximum", "max"),
)


def type_string(node) -> str:
    """Short type label: ``Array<string>``, ``string(email)``, ``string | "a" | "b"``."""
    if is_reference(node):
        return ref_name(node["$ref"])
    if not isinstance(node, dict):
        return "object"

    type_name = declared_type(node)
    if type_name == "array" and node.get("items"):
        return f"Array<{type_string(node['items'])}>"
    if type_name:
        label = type_name
        if node.get("format"):
            label = f"{type_name}({node['format']})"
        if node.get("enum"):
            label = " | ".join([label] + [json.dumps(v) for v in node["enum"]])
        return label
    for key in ("allOf", "anyOf", "oneOf"):
        if node.get(key):
            return key
    return "object"


def format_schema(
    node,
    doc: dict,
    visited: set[str] | None = None,
    level: int = 0,
    property_name: str | None = None,
    required: bool = False,
) -> str:
    """Render ``node`` as multi-line indented text.

    A reference already being expanded on the current path renders as one
    line carrying ``CIRCULAR_MARKER``. Pointers are removed from ``visited``
    on the way back out, so a schema reached through two separate branches
    is rendered in full on both.
    """
    if not isinstance(node, dict):
        return ""
    if visited is None:
        visited = set()

    indent = INDENT * level

    if is_reference(node):
        pointer = node["$ref"]
        name = ref_name(pointer)
        if pointer in visited:
            logger.debug("Cycle at %s while formatting", pointer)
            return f"{indent}{property_name or ''} → {name} {CIRCULAR_MARKER}\n"

        target = resolve(pointer, doc)
        if not isinstance(target, dict):
            return f"{indent}{property_name or ''} → {name} (invalid)\n"

        visited.add(pointer)
        try:
            if property_name is not None:
                head = f"{indent}{property_name}{'*' if required else ''} → {name}\n"
            else:
                head = f"{indent}→ {name}\n"
            return head + format_schema(target, doc, visited, level)
        finally:
            visited.discard(pointer)

    lines = []
    properties = node.get("properties")
    opened = False

    if property_name is not None:
        line = f"{indent}{property_name}{'*' if required else ''}: {type_string(node)}"
        if node.get("description"):
            line += f"  // {node['description']}"
        lines.append(line + "\n")
    elif level == 0 and properties:
        lines.append(f"{indent}{{\n")
        opened = True

    if properties:
        required_names = set(node.get("required") or [])
        for name, prop in properties.items():
            lines.append(format_schema(prop, doc, visited, level + 1, name, name in required_names))
        if opened:
            lines.append(f"{indent}}}\n")

    items = node.get("items")
    if declared_type(node) == "array" and isinstance(items, dict):
        if is_reference(items) or any(k in items for k in ("properties", "allOf", "anyOf", "oneOf")):
            lines.append(f"{indent}{INDENT}items:\n")
            lines.append(format_schema(items, doc, visited, level + 2))

    for key in ("allOf", "anyOf", "oneOf"):
        for i, member in enumerate(node.get(key) or []):
            lines.append(f"{indent}{INDENT}{key}[{i}]:\n")
            lines.append(format_schema(member, doc, visited, level + 2))

    if property_name:
        constraints = []
        for key, title in CONSTRAINT_KEYS:
            if key == "default":
                if key in node:
                    constraints.append(f"default: {json.dumps(node[key])}")
            elif node.get(key) not in (None, ""):
                constraints.append(f"{title}: {node[key]}")
        if constraints:
            lines.append(f"{indent}{INDENT}{INDENT}({', '.join(constraints)})\n")

    if not lines and level == 0 and property_name is None:
        lines.append(f"{type_string(node)}\n")

    return "".join(lines)
