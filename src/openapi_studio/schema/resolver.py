"""Local ``$ref`` pointer resolution.

Resolution is stateless: every call walks the document again and nothing is
cached. Cycle protection is the caller's job.
"""

import logging
from urllib.parse import unquote

logger = logging.getLogger(__name__)


def is_reference(node) -> bool:
    """True if ``node`` is a ``{"$ref": "..."}`` reference object."""
    return isinstance(node, dict) and isinstance(node.get("$ref"), str) and bool(node["$ref"])


def ref_name(pointer: str) -> str:
    """Last segment of a pointer, e.g. ``Pet`` for ``#/components/schemas/Pet``."""
    return pointer.rstrip("/").split("/")[-1] or "Unknown"


def _split_pointer(pointer: str) -> list[str] | None:
    if not pointer.startswith("#"):
        return None
    path = pointer[1:].lstrip("/")
    if not path:
        return []
    return [unquote(part).replace("~1", "/").replace("~0", "~") for part in path.split("/")]


def resolve(pointer, doc: dict):
    """Resolve a pointer (or a reference object) against ``doc``.

    Returns the designated node, or ``None`` when any segment is missing or
    not traversable. Only document-local pointers (``#/...``) are supported.
    """
    if is_reference(pointer):
        pointer = pointer["$ref"]
    if not isinstance(pointer, str):
        return None

    parts = _split_pointer(pointer)
    if parts is None:
        logger.debug("Skipping non-local reference %s", pointer)
        return None

    node = doc
    for part in parts:
        if isinstance(node, dict) and part in node:
            node = node[part]
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            logger.debug("Reference %s did not resolve at segment %r", pointer, part)
            return None
    return node


def dereference(node, doc: dict):
    """Follow a chain of references to the first non-reference node.

    Returns ``None`` on a miss or when the chain loops back on itself.
    """
    seen: set[str] = set()
    while is_reference(node):
        pointer = node["$ref"]
        if pointer in seen:
            logger.debug("Reference loop detected at %s", pointer)
            return None
        seen.add(pointer)
        node = resolve(pointer, doc)
    return node
