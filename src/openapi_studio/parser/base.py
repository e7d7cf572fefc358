"""Data models for a loaded API document and the views derived from it.

The document itself stays a plain mapping (``Document.raw``); endpoints and
parameters are flattened views recomputed from it on demand.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict

HTTP_METHODS = ("get", "post", "put", "patch", "delete")


class Param(BaseModel):
    """A single API parameter (query, path, header, or cookie)."""

    name: str
    location: str  # query / path / header / cookie
    required: bool
    param_type: str  # string / integer / boolean / array / object
    description: str = ""
    constraints: dict = {}  # min, max, pattern, enum, etc.
    param_schema: dict = {}


class ApiEndpoint(BaseModel):
    """One (path, method) pair together with its operation object."""

    method: str  # GET / POST / PUT / DELETE / PATCH
    path: str  # /api/users/{id}
    summary: str
    parameters: list[Param]
    request_body: dict | None
    responses: dict  # {status_code: {description}}
    auth_required: bool
    tags: list[str]
    content_type: str = "application/json"
    operation: dict = {}

    @property
    def key(self) -> str:
        return f"{self.method}:{self.path}"


class SecuritySchemeBinding(BaseModel):
    """A named security scheme declared under ``components.securitySchemes``."""

    name: str
    scheme: dict

    @property
    def type(self) -> str:
        return self.scheme.get("type", "")


class ResponseExample(BaseModel):
    code: str
    description: str
    example: Any = None
    schema_node: dict | None = None
    is_success: bool


class Document(BaseModel):
    """A parsed API description.

    Loads never patch an existing Document; each successful load produces a
    new one.
    """

    model_config = ConfigDict(frozen=True)

    raw: dict
    source: str = ""

    @property
    def info(self) -> dict:
        return self.raw.get("info") or {}

    @property
    def title(self) -> str:
        return self.info.get("title") or "OpenAPI Studio"

    @property
    def description(self) -> str | None:
        return self.info.get("description") or None

    @property
    def version(self) -> str | None:
        return self.info.get("version") or None
