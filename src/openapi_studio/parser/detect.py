"""Parse raw API document text and detect its flavour."""

import json

import yaml

from openapi_studio.errors import LoadFailure


def parse_document_text(text: str) -> dict:
    """Parse JSON or YAML text into a document mapping.

    Raises LoadFailure when the text is neither, or is not a mapping.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise LoadFailure(f"Failed to parse OpenAPI document: {e}") from e

    if not isinstance(data, dict):
        raise LoadFailure("Failed to parse OpenAPI document: top level is not an object")
    return data


def detect_format(doc: dict) -> str:
    """Detect the document flavour.

    Returns: 'openapi', 'swagger', or 'unknown'.
    """
    if "openapi" in doc:
        return "openapi"
    if "swagger" in doc:
        return "swagger"
    return "unknown"
