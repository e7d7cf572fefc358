"""Document fetching with a single-flight guard."""

import logging
import threading
from pathlib import Path

import requests
from pydantic import BaseModel

from openapi_studio.errors import LoadFailure
from openapi_studio.parser.base import Document
from openapi_studio.parser.detect import detect_format, parse_document_text

logger = logging.getLogger(__name__)


class LoadResult(BaseModel):
    """Outcome of one load: a document, an error message, or neither if skipped."""

    document: Document | None = None
    error: str | None = None
    skipped: bool = False


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class DocumentLoader:
    """Fetches documents from URLs or local files.

    At most one load runs at a time; a call made while another is in flight
    returns ``LoadResult(skipped=True)`` instead of starting a second fetch.
    """

    def __init__(self, session: requests.Session | None = None, timeout: float | None = None):
        self.session = session or requests.Session()
        self.timeout = timeout
        self._lock = threading.Lock()

    @property
    def loading(self) -> bool:
        return self._lock.locked()

    def load(self, source: str) -> LoadResult:
        if not self._lock.acquire(blocking=False):
            logger.info("Load already in progress, ignoring request for %s", source)
            return LoadResult(skipped=True)
        try:
            document = self._fetch(source)
        except LoadFailure as e:
            logger.warning("%s", e.detail)
            return LoadResult(error=e.detail)
        finally:
            self._lock.release()

        if detect_format(document.raw) == "unknown":
            logger.warning("%s declares neither an openapi nor a swagger version", source)
        logger.info("Loaded %s (%s)", document.title, source)
        return LoadResult(document=document)

    def _fetch(self, source: str) -> Document:
        if not source:
            raise LoadFailure("Failed to load OpenAPI spec: no document URL configured")
        if not _is_url(source):
            try:
                text = Path(source).read_text(encoding="utf-8")
            except OSError as e:
                raise LoadFailure(f"Failed to load OpenAPI spec: {e}") from e
            return Document(raw=parse_document_text(text), source=source)

        try:
            response = self.session.get(source, timeout=self.timeout)
        except requests.RequestException as e:
            raise LoadFailure(f"Failed to fetch OpenAPI spec: {e}") from e
        if not response.ok:
            raise LoadFailure(f"Failed to fetch OpenAPI spec: {response.reason or response.status_code}")
        return Document(raw=parse_document_text(response.text), source=source)
