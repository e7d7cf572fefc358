"""Per-session log of dispatched test requests."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

BODY_METHODS = ("POST", "PUT", "PATCH")


class RecordedResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: int
    status_text: str = ""
    headers: dict[str, str] = {}
    body: Any = None  # parsed JSON or raw text


class HistoryEntry(BaseModel):
    """One dispatched request and its outcome.

    Exactly one of ``response`` and ``response_error`` is set once the
    attempt has finished.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    method: str
    path: str
    url: str
    headers: dict[str, str] = {}
    request_body: Any = None
    request_query: dict[str, Any] = {}
    request_url_params: dict[str, Any] = {}
    response: RecordedResponse | None = None
    response_error: str | None = None
    auth_scheme: str | None = None

    @property
    def status(self) -> int | None:
        return self.response.status if self.response else None


class RequestHistory:
    """Newest-first, in-memory request log."""

    def __init__(self):
        self._entries: list[HistoryEntry] = []

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, entry: HistoryEntry) -> None:
        self._entries.insert(0, entry)

    def filter_by_endpoint(self, path: str, method: str) -> list[HistoryEntry]:
        method = method.upper()
        return [e for e in self._entries if e.path == path and e.method == method]

    def clear_endpoint(self, path: str, method: str) -> None:
        method = method.upper()
        self._entries = [e for e in self._entries if not (e.path == path and e.method == method)]

    def clear(self) -> None:
        self._entries = []


def _body_text(body) -> str:
    if isinstance(body, str):
        return body
    return json.dumps(body)


def format_as_curl(entry: HistoryEntry) -> str:
    """Render ``entry`` as a curl command line."""
    parts = ["curl"]
    if entry.method != "GET":
        parts.append(f"-X {entry.method}")

    for name, value in entry.headers.items():
        escaped = value.replace('"', '\\"')
        parts.append(f'-H "{name}: {escaped}"')

    if entry.method in BODY_METHODS and entry.request_body is not None:
        body = _body_text(entry.request_body).replace("'", "'\\''").replace("\n", "\\n")
        parts.append(f"-d '{body}'")

    parts.append(f'"{entry.url}"')
    return " \\\n  ".join(parts)
