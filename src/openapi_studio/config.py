"""Configuration management.

Three layers, later wins: environment defaults (``StudioSettings``), the
runtime configuration JSON served next to the studio, and the service host
profile the user selected.
"""

import logging
import uuid
from urllib.parse import urljoin

import requests
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings

from openapi_studio.storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_JSON_PATH = "/openapi-studio-config.json"
SERVICE_HOSTS_KEY = "service-hosts"
SELECTED_SERVICE_HOST_KEY = "selected-service-host-id"


class StudioSettings(BaseSettings):
    """Static defaults read from the environment."""

    service_host: str | None = Field(default=None, validation_alias="OPENAPI_STUDIO_SERVICE_HOST")
    openapi_spec_url: str | None = Field(default=None, validation_alias="OPENAPI_STUDIO_OPENAPI_SPEC_URL")
    clerk_publishable_key: str | None = Field(
        default=None, validation_alias="OPENAPI_STUDIO_CLERK_PUBLISHABLE_KEY"
    )
    default_service_host_to_window_origin: bool = Field(
        default=False, validation_alias="OPENAPI_STUDIO_DEFAULT_SERVICE_HOST_TO_WINDOW_ORIGIN"
    )
    config_json_path: str = Field(
        default=DEFAULT_CONFIG_JSON_PATH, validation_alias="OPENAPI_STUDIO_CONFIG_JSON_PATH"
    )
    disable_config_json: bool = Field(default=False, validation_alias="OPENAPI_STUDIO_DISABLE_CONFIG_JSON")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class RuntimeConfig(BaseModel):
    """The small JSON object served at the configuration route."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    service_host: str | None = Field(default=None, alias="serviceHost")
    openapi_spec_url: str | None = Field(default=None, alias="openApiSpecUrl")
    clerk_publishable_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("clerkPublishableKey", "clerkKey", "clerk_publishable_key"),
        serialization_alias="clerkPublishableKey",
    )
    default_service_host_to_window_origin: bool = Field(default=False, alias="defaultServiceHostToWindowOrigin")


class ServiceHost(BaseModel):
    """A user-saved API host profile."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    base_url: str = Field(alias="baseUrl")
    open_api_path: str | None = Field(default=None, alias="openApiPath")
    label: str | None = None
    clerk_publishable_key: str | None = Field(default=None, alias="clerkPublishableKey")


def fetch_runtime_config(
    url: str, session: requests.Session | None = None, timeout: float | None = None
) -> RuntimeConfig | None:
    """Fetch the runtime configuration; any failure yields None."""
    http = session or requests.Session()
    try:
        response = http.get(url, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("Failed to load config from %s: %s", url, e)
        return None
    if not response.ok:
        logger.warning("Failed to load config from %s: HTTP %s", url, response.status_code)
        return None
    try:
        config = RuntimeConfig.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        logger.warning("Ignoring invalid config from %s: %s", url, e)
        return None
    logger.info("Loaded config from %s", url)
    return config


def merge_config(
    settings: StudioSettings,
    runtime: RuntimeConfig | None = None,
    host: ServiceHost | None = None,
    window_origin: str | None = None,
) -> RuntimeConfig:
    """Merge the three configuration layers into one resolved config."""
    merged = {
        "service_host": settings.service_host,
        "openapi_spec_url": settings.openapi_spec_url,
        "clerk_publishable_key": settings.clerk_publishable_key,
        "default_service_host_to_window_origin": settings.default_service_host_to_window_origin,
    }

    layers = []
    if runtime is not None:
        layers.append(runtime.model_dump(exclude_unset=True))
    if host is not None:
        layers.append({
            "service_host": host.base_url,
            "openapi_spec_url": host.open_api_path,
            "clerk_publishable_key": host.clerk_publishable_key,
        })
    for layer in layers:
        for key, value in layer.items():
            if value not in (None, ""):
                merged[key] = value

    if merged["default_service_host_to_window_origin"] and window_origin:
        merged["service_host"] = window_origin

    if merged["service_host"] and not merged["openapi_spec_url"]:
        merged["openapi_spec_url"] = urljoin(merged["service_host"], "openapi.json")

    return RuntimeConfig(**merged)


class ServiceHostRegistry:
    """Saved service hosts and the current selection, kept in a KeyValueStore."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def hosts(self) -> list[ServiceHost]:
        result = []
        for raw in self.store.get(SERVICE_HOSTS_KEY, []) or []:
            try:
                result.append(ServiceHost.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping invalid stored service host: %s", e)
        return result

    def _save(self, hosts: list[ServiceHost]) -> None:
        self.store.set(SERVICE_HOSTS_KEY, [h.model_dump(by_alias=True, exclude_none=True) for h in hosts])

    def add(
        self,
        base_url: str,
        label: str | None = None,
        open_api_path: str | None = None,
        clerk_publishable_key: str | None = None,
    ) -> ServiceHost:
        host = ServiceHost(
            id=str(uuid.uuid4()),
            base_url=base_url,
            label=label,
            open_api_path=open_api_path,
            clerk_publishable_key=clerk_publishable_key,
        )
        self._save(self.hosts() + [host])
        return host

    def remove(self, host_id: str) -> None:
        self._save([h for h in self.hosts() if h.id != host_id])
        if self.store.get(SELECTED_SERVICE_HOST_KEY) == host_id:
            self.store.remove(SELECTED_SERVICE_HOST_KEY)

    def select(self, host_id: str | None) -> ServiceHost | None:
        """Select a saved host by id; an unknown id or None clears the selection."""
        host = next((h for h in self.hosts() if h.id == host_id), None)
        if host is None:
            self.store.remove(SELECTED_SERVICE_HOST_KEY)
        else:
            self.store.set(SELECTED_SERVICE_HOST_KEY, host.id)
        return host

    def selected(self) -> ServiceHost | None:
        host_id = self.store.get(SELECTED_SERVICE_HOST_KEY)
        if not host_id:
            return None
        return next((h for h in self.hosts() if h.id == host_id), None)
