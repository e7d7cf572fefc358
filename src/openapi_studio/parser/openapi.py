"""OpenAPI 3.x document views.

Flattens a document into ``ApiEndpoint`` models and extracts the request
body and response schemas of an operation.
"""

from pathlib import Path

from openapi_studio.schema.example import synthesize
from openapi_studio.schema.resolver import is_reference, ref_name, resolve
from openapi_studio.security import requires_security

from .base import HTTP_METHODS, ApiEndpoint, Document, Param, ResponseExample
from .detect import parse_document_text

JSON_CONTENT_TYPE = "application/json"
SUCCESS_CODES = ("200", "201", "202", "204")


def parse_openapi(file_path: Path) -> Document:
    """Read an OpenAPI JSON/YAML file into a Document."""
    text = file_path.read_text(encoding="utf-8")
    return Document(raw=parse_document_text(text), source=str(file_path))


def list_endpoints(doc: dict) -> list[ApiEndpoint]:
    """All operations in ``doc``, ordered by path then upper-cased method."""
    endpoints = []
    for path, path_item in (doc.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue

        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue

            params = _parse_parameters(
                _merge_parameters(path_item.get("parameters") or [], operation.get("parameters") or [], doc)
            )
            endpoints.append(
                ApiEndpoint(
                    method=method.upper(),
                    path=path,
                    summary=operation.get("summary", ""),
                    parameters=params,
                    request_body=get_request_body_schema(operation, doc),
                    responses=_parse_responses(operation.get("responses") or {}, doc),
                    auth_required=requires_security(operation, doc),
                    tags=operation.get("tags", []),
                    content_type=_detect_content_type(operation.get("requestBody"), doc),
                    operation=operation,
                )
            )

    return sorted(endpoints, key=lambda e: (e.path, e.method))


def get_operation(doc: dict, path: str | None, method: str | None) -> dict | None:
    if not path or not method:
        return None
    path_item = (doc.get("paths") or {}).get(path)
    if not isinstance(path_item, dict):
        return None
    operation = path_item.get(method.lower())
    return operation if isinstance(operation, dict) else None


def find_endpoint(doc: dict, path: str, method: str) -> ApiEndpoint | None:
    for endpoint in list_endpoints(doc):
        if endpoint.path == path and endpoint.method == method.upper():
            return endpoint
    return None


def resolve_parameter(param, doc: dict) -> dict | None:
    """Return the parameter object for ``param`` (following a ``$ref``)."""
    if is_reference(param):
        param = resolve(param["$ref"], doc)
    if isinstance(param, dict) and "name" in param and "in" in param:
        return param
    return None


def _merge_parameters(path_level: list, operation_level: list, doc: dict) -> list[dict]:
    merged: dict[tuple[str, str], dict] = {}
    for raw in list(path_level) + list(operation_level):
        param = resolve_parameter(raw, doc)
        if param is not None:
            merged[(param["name"], param["in"])] = param
    return list(merged.values())


def _parse_parameters(params: list[dict]) -> list[Param]:
    result = []
    for p in params:
        schema = p.get("schema") or {}
        constraints = {}
        for key in ("minimum", "maximum", "minLength", "maxLength", "pattern", "enum"):
            if key in schema:
                constraints[key] = schema[key]

        result.append(
            Param(
                name=p["name"],
                location=p.get("in", "query"),
                required=p.get("required", False),
                param_type=schema.get("type", "string") if isinstance(schema.get("type"), str) else "string",
                description=p.get("description", ""),
                constraints=constraints,
                param_schema=schema,
            )
        )
    return result


def _resolve_object(node, doc: dict) -> dict | None:
    if is_reference(node):
        node = resolve(node["$ref"], doc)
    return node if isinstance(node, dict) else None


def get_request_body_schema(operation: dict | None, doc: dict) -> dict | None:
    """The ``application/json`` schema of the operation's request body."""
    if not operation:
        return None
    body = _resolve_object(operation.get("requestBody"), doc)
    if body is None:
        return None
    content = (body.get("content") or {}).get(JSON_CONTENT_TYPE) or {}
    return content.get("schema") or None


def get_example_from_request_body(operation: dict | None, doc: dict):
    schema = get_request_body_schema(operation, doc)
    if not schema:
        return None
    return synthesize(schema, doc)


def _detect_content_type(body, doc: dict) -> str:
    body = _resolve_object(body, doc)
    if body is None:
        return JSON_CONTENT_TYPE
    content = body.get("content") or {}
    if JSON_CONTENT_TYPE not in content and "multipart/form-data" in content:
        return "multipart/form-data"
    return JSON_CONTENT_TYPE


def _parse_responses(responses: dict, doc: dict) -> dict:
    result = {}
    for status_code, resp in responses.items():
        resp = _resolve_object(resp, doc) or {}
        result[str(status_code)] = {"description": resp.get("description", "")}
    return result


def _response_schema(response: dict) -> dict | None:
    content = (response.get("content") or {}).get(JSON_CONTENT_TYPE) or {}
    return content.get("schema") or None


def get_example_from_response(operation: dict | None, doc: dict, prefer_success: bool = True):
    """Example body of the first success response (or first response declared)."""
    if not operation:
        return None
    responses = operation.get("responses")
    if not isinstance(responses, dict) or not responses:
        return None

    response = None
    if prefer_success:
        for code in SUCCESS_CODES:
            if code in responses:
                response = responses[code]
                break
    if response is None:
        response = next(iter(responses.values()))

    response = _resolve_object(response, doc)
    if response is None:
        return None
    schema = _response_schema(response)
    return synthesize(schema, doc) if schema else None


def _response_sort_key(item: ResponseExample):
    code = item.code
    numeric = int(code) if code.isdigit() else None
    return (not item.is_success, numeric is None, numeric or 0, code)


def get_all_response_examples(operation: dict | None, doc: dict) -> list[ResponseExample]:
    """One example per declared response, success codes first."""
    if not operation:
        return []
    responses = operation.get("responses")
    if not isinstance(responses, dict):
        return []

    result = []
    for code, response in responses.items():
        response = _resolve_object(response, doc)
        if response is None:
            continue

        schema = _response_schema(response)
        code = str(code)
        is_success = code.isdigit() and 200 <= int(code) < 300
        result.append(
            ResponseExample(
                code=code,
                description=response.get("description") or "No description",
                example=synthesize(schema, doc) if schema else None,
                schema_node=schema,
                is_success=is_success,
            )
        )
    return sorted(result, key=_response_sort_key)


def collect_schema_references(schema, doc: dict, refs: dict | None = None, visited: set | None = None) -> dict:
    """Collect every named schema reachable from ``schema``.

    Returns ``{pointer: (name, resolved_schema)}``.
    """
    if refs is None:
        refs = {}
    if visited is None:
        visited = set()
    if not isinstance(schema, dict):
        return refs

    if is_reference(schema):
        pointer = schema["$ref"]
        if pointer in visited:
            return refs
        target = resolve(pointer, doc)
        if not isinstance(target, dict):
            return refs
        visited.add(pointer)
        refs.setdefault(pointer, (ref_name(pointer), target))
        collect_schema_references(target, doc, refs, visited)
        visited.discard(pointer)
        return refs

    for prop in (schema.get("properties") or {}).values():
        collect_schema_references(prop, doc, refs, visited)
    if schema.get("items"):
        collect_schema_references(schema["items"], doc, refs, visited)
    for key in ("allOf", "anyOf", "oneOf"):
        for member in schema.get(key) or []:
            collect_schema_references(member, doc, refs, visited)
    return refs


def get_endpoint_schema_references(operation: dict | None, doc: dict) -> list[tuple[str, dict]]:
    """Named schemas used by an operation, as ``(name, schema)`` sorted by name."""
    if not operation:
        return []

    refs: dict = {}
    body_schema = get_request_body_schema(operation, doc)
    if body_schema:
        collect_schema_references(body_schema, doc, refs)

    for response in (operation.get("responses") or {}).values():
        response = _resolve_object(response, doc)
        schema = _response_schema(response) if response else None
        if schema:
            collect_schema_references(schema, doc, refs)

    for raw in operation.get("parameters") or []:
        param = resolve_parameter(raw, doc)
        if param and param.get("schema"):
            collect_schema_references(param["schema"], doc, refs)

    return sorted(refs.values(), key=lambda item: item[0])
