import pytest

from openapi_studio.mount import (
    build_mount_paths,
    normalize_rel_path,
    runtime_config_payload,
    validate_global_prefix,
    validate_path,
)


class TestValidatePath:
    @pytest.mark.parametrize(
        "raw, expected",
        [("docs", "/docs"), ("/docs/", "/docs"), ("/", "/"), ("", "/"), ("/a/b", "/a/b")],
    )
    def test_normalization(self, raw, expected):
        assert validate_path(raw) == expected

    def test_non_string(self):
        with pytest.raises(TypeError):
            validate_path(None)


class TestGlobalPrefix:
    def test_validate(self):
        assert validate_global_prefix("/api") is True
        assert validate_global_prefix("api") is False
        assert validate_global_prefix("") is False
        assert validate_global_prefix(None) is False


class TestNormalizeRelPath:
    @pytest.mark.parametrize(
        "raw, expected",
        [(None, "./"), ("/assets", "./assets/"), ("index.html", "./index.html"), ("../up/", "../up/")],
    )
    def test_normalization(self, raw, expected):
        assert normalize_rel_path(raw) == expected


class TestBuildMountPaths:
    def test_defaults(self):
        paths = build_mount_paths("studio")
        assert paths.studio_path == "/studio"
        assert paths.json_document_url == "/openapi.json"
        assert paths.config_json_path == "/openapi-studio-config.json"
        assert paths.catch_all == "/studio/*"

    def test_global_prefix(self):
        paths = build_mount_paths("/studio/", global_prefix="/api", json_document_url="docs.json")
        assert paths.studio_path == "/api/studio"
        assert paths.json_document_url == "/api/docs.json"
        assert paths.config_json_path == "/api/openapi-studio-config.json"

    def test_global_prefix_disabled(self):
        paths = build_mount_paths("/studio", global_prefix="/api", use_global_prefix=False)
        assert paths.studio_path == "/studio"
        assert paths.json_document_url == "/openapi.json"

    def test_invalid_global_prefix_ignored(self):
        assert build_mount_paths("/studio", global_prefix="api").studio_path == "/studio"

    def test_root_mount(self):
        assert build_mount_paths("/").catch_all == "/*"


class TestRuntimeConfigPayload:
    def test_omits_empty(self):
        assert runtime_config_payload(service_host="https://api", clerk_publishable_key="") == {
            "serviceHost": "https://api"
        }

    def test_all_keys(self):
        assert runtime_config_payload("https://api", "pk", "https://api/openapi.json") == {
            "serviceHost": "https://api",
            "clerkKey": "pk",
            "openApiSpecUrl": "https://api/openapi.json",
        }
