"""Route layout for embedding the studio in a host web application.

Pure path computations only; registering the routes is up to the host
framework.
"""

from pydantic import BaseModel

DEFAULT_JSON_DOCUMENT_URL = "/openapi.json"
DEFAULT_CONFIG_JSON_PATH = "/openapi-studio-config.json"


class MountPaths(BaseModel):
    studio_path: str  # entry page
    json_document_url: str  # the document as JSON
    config_json_path: str  # runtime config as JSON
    catch_all: str  # any sub-path serves the entry page


def validate_path(path: str) -> str:
    """Leading ``/`` always, trailing ``/`` only for the root path."""
    if not isinstance(path, str):
        raise TypeError("Path must be a string")
    if not path.startswith("/"):
        path = f"/{path}"
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    return path


def validate_global_prefix(global_prefix: str | None) -> bool:
    return bool(global_prefix) and global_prefix.startswith("/")


def normalize_rel_path(path: str | None) -> str:
    """Relative asset path, e.g. ``assets`` -> ``./assets/``."""
    if not path:
        return "./"
    if path.startswith("/"):
        path = path[1:]
    if not path.endswith("/") and "." not in path:
        path = f"{path}/"
    if not path.startswith(("./", "../")):
        path = f"./{path}"
    return path


def build_mount_paths(
    path: str,
    global_prefix: str = "",
    use_global_prefix: bool = True,
    json_document_url: str | None = None,
    config_json_path: str | None = None,
) -> MountPaths:
    with_prefix = use_global_prefix and validate_global_prefix(global_prefix)
    prefix = validate_path(global_prefix) if with_prefix else ""
    studio_path = validate_path(f"{global_prefix}{validate_path(path)}" if with_prefix else path)

    return MountPaths(
        studio_path=studio_path,
        json_document_url=f"{prefix}{validate_path(json_document_url or DEFAULT_JSON_DOCUMENT_URL)}",
        config_json_path=f"{prefix}{validate_path(config_json_path or DEFAULT_CONFIG_JSON_PATH)}",
        catch_all=f"{studio_path.rstrip('/')}/*",
    )


def runtime_config_payload(
    service_host: str | None = None,
    clerk_publishable_key: str | None = None,
    openapi_spec_url: str | None = None,
) -> dict:
    """Config JSON served to the client; empty values are left out."""
    payload = {}
    if service_host:
        payload["serviceHost"] = service_host
    if clerk_publishable_key:
        payload["clerkKey"] = clerk_publishable_key
    if openapi_spec_url:
        payload["openApiSpecUrl"] = openapi_spec_url
    return payload
