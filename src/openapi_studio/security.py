"""Security requirement resolution for operations.

A security list is a disjunction of requirement sets, and each set is a
conjunction of scheme names. An operation-level ``security`` key, even an
empty list, replaces the document-level list for that operation.
"""

from openapi_studio.parser.base import SecuritySchemeBinding


def declared_schemes(doc: dict) -> list[SecuritySchemeBinding]:
    """Schemes under ``components.securitySchemes`` in declaration order."""
    schemes = ((doc.get("components") or {}).get("securitySchemes")) or {}
    return [
        SecuritySchemeBinding(name=name, scheme=scheme)
        for name, scheme in schemes.items()
        if isinstance(scheme, dict) and "$ref" not in scheme
    ]


def effective_requirements(operation: dict, doc: dict) -> list[dict]:
    """The requirement sets in force for ``operation``."""
    if "security" in operation:
        return list(operation.get("security") or [])
    return list(doc.get("security") or [])


def available_schemes(operation: dict | None, doc: dict) -> list[SecuritySchemeBinding]:
    """Declared schemes usable for ``operation``, de-duplicated by name."""
    if operation is None:
        return []

    by_name = {binding.name: binding for binding in declared_schemes(doc)}
    seen: set[str] = set()
    result = []
    for requirement in effective_requirements(operation, doc):
        if not isinstance(requirement, dict):
            continue
        for name in requirement:
            if name in seen:
                continue
            seen.add(name)
            if name in by_name:
                result.append(by_name[name])
    return result


def requires_security(operation: dict | None, doc: dict) -> bool:
    """True if either the operation or the document lists any requirement."""
    if operation is None:
        return False
    return bool(operation.get("security")) or bool(doc.get("security"))
