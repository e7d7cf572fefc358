"""The hosting session: one user's document, selections, credentials and history."""

import logging
from urllib.parse import urljoin

import requests
from pydantic import BaseModel

from openapi_studio.config import (
    RuntimeConfig,
    ServiceHostRegistry,
    StudioSettings,
    fetch_runtime_config,
    merge_config,
)
from openapi_studio.history import HistoryEntry, RequestHistory
from openapi_studio.loader import DocumentLoader, LoadResult
from openapi_studio.parser.base import ApiEndpoint, Document, SecuritySchemeBinding
from openapi_studio.parser.openapi import find_endpoint, list_endpoints
from openapi_studio.request import Credential, RequestSynthesizer
from openapi_studio.security import available_schemes
from openapi_studio.storage import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)


class EndpointFormState(BaseModel):
    """Unsent user input for one endpoint."""

    request_query: dict = {}
    request_url_params: dict = {}
    request_body: str = ""
    selected_auth_scheme: str | None = None


def endpoint_key(path: str | None, method: str | None) -> str | None:
    if not path or not method:
        return None
    return f"{method.upper()}:{path}"


class StudioSession:
    """State for one user of the studio.

    The document is only ever replaced, never modified; views such as the
    endpoint list are recomputed from whichever document is current.
    """

    def __init__(
        self,
        settings: StudioSettings | None = None,
        store: KeyValueStore | None = None,
        http: requests.Session | None = None,
        window_origin: str | None = None,
    ):
        self.settings = settings or StudioSettings()
        self.store = store if store is not None else MemoryStore()
        self.hosts = ServiceHostRegistry(self.store)
        self.http = http or requests.Session()
        self.loader = DocumentLoader(self.http)
        self.window_origin = window_origin

        self.runtime_config: RuntimeConfig | None = None
        self.document: Document | None = None
        self.error: str | None = None
        self.history = RequestHistory()
        self.credentials: dict[str, Credential] = {}

        self.selected_path: str | None = None
        self.selected_method: str | None = None
        self.selected_auth_scheme: str | None = None
        self._form_state: dict[str, EndpointFormState] = {}

    @property
    def config(self) -> RuntimeConfig:
        return merge_config(self.settings, self.runtime_config, self.hosts.selected(), self.window_origin)

    def _config_json_url(self) -> str | None:
        path = self.settings.config_json_path
        if path.startswith(("http://", "https://")):
            return path
        if self.window_origin:
            return urljoin(self.window_origin, path)
        return None

    def initialize(self) -> LoadResult:
        """Fetch the runtime configuration (optional), then load the document."""
        if self.settings.disable_config_json:
            logger.info("Runtime config loading is disabled")
        else:
            url = self._config_json_url()
            if url:
                self.runtime_config = fetch_runtime_config(url, self.http)
        return self.reload()

    def reload(self) -> LoadResult:
        url = self.config.openapi_spec_url
        if not url:
            self.document = None
            self.error = None
            return LoadResult()

        result = self.loader.load(url)
        if result.skipped:
            return result
        if result.document is not None:
            self.document = result.document
            self.error = None
        else:
            self.error = result.error
        return result

    def select_host(self, host_id: str | None) -> LoadResult:
        self.hosts.select(host_id)
        return self.reload()

    def endpoints(self) -> list[ApiEndpoint]:
        if self.document is None:
            return []
        return list_endpoints(self.document.raw)

    def selected_endpoint(self) -> ApiEndpoint | None:
        if self.document is None or not self.selected_path or not self.selected_method:
            return None
        return find_endpoint(self.document.raw, self.selected_path, self.selected_method)

    def available_schemes(self, endpoint: ApiEndpoint | None = None) -> list[SecuritySchemeBinding]:
        endpoint = endpoint or self.selected_endpoint()
        if endpoint is None or self.document is None:
            return []
        return available_schemes(endpoint.operation, self.document.raw)

    def select_endpoint(self, path: str | None, method: str | None) -> None:
        self.selected_path = path
        self.selected_method = method.upper() if method else None

    def set_auth_scheme(self, name: str | None) -> None:
        self.selected_auth_scheme = name

    def toggle_auth_scheme(self, name: str | None) -> None:
        if name is None or self.selected_auth_scheme == name:
            self.selected_auth_scheme = None
        else:
            self.selected_auth_scheme = name

    def set_credential(self, scheme_name: str, credential: Credential) -> None:
        self.credentials[scheme_name] = credential

    def save_form_state(self, path: str, method: str, state: EndpointFormState) -> None:
        key = endpoint_key(path, method)
        if key:
            self._form_state[key] = state.model_copy(deep=True)

    def get_form_state(self, path: str, method: str) -> EndpointFormState | None:
        key = endpoint_key(path, method)
        return self._form_state.get(key) if key else None

    def clear_form_state(self, path: str, method: str) -> None:
        key = endpoint_key(path, method)
        if key:
            self._form_state.pop(key, None)

    def send(
        self,
        param_values: dict,
        body_text: str | None = None,
        endpoint: ApiEndpoint | None = None,
    ) -> HistoryEntry:
        """Send a test request for ``endpoint`` (default: the selected one)."""
        endpoint = endpoint or self.selected_endpoint()
        if endpoint is None or self.document is None:
            raise ValueError("No endpoint selected")

        synthesizer = RequestSynthesizer(self.document.raw, self.http)
        entry = synthesizer.build_and_send(
            endpoint,
            param_values,
            scheme_name=self.selected_auth_scheme,
            credentials=self.credentials,
            base_host=self.config.service_host or "",
            body_text=body_text,
        )
        self.history.add(entry)
        return entry

    def endpoint_history(self) -> list[HistoryEntry]:
        if not self.selected_path or not self.selected_method:
            return []
        return self.history.filter_by_endpoint(self.selected_path, self.selected_method)
