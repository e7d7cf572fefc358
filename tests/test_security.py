from pathlib import Path

import yaml

from openapi_studio.security import (
    available_schemes,
    declared_schemes,
    effective_requirements,
    requires_security,
)

FIXTURES = Path(__file__).parent / "fixtures"

SCHEMES = {
    "apiKeyAuth": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
    "bearerAuth": {"type": "http", "scheme": "bearer"},
    "basicAuth": {"type": "http", "scheme": "basic"},
    "shared": {"$ref": "#/components/securitySchemes/bearerAuth"},
}


def _doc(security=None) -> dict:
    doc = {"components": {"securitySchemes": SCHEMES}}
    if security is not None:
        doc["security"] = security
    return doc


def _names(bindings) -> list[str]:
    return [b.name for b in bindings]


class TestDeclaredSchemes:
    def test_skips_reference_entries(self):
        assert _names(declared_schemes(_doc())) == ["apiKeyAuth", "bearerAuth", "basicAuth"]

    def test_no_components(self):
        assert declared_schemes({}) == []


class TestAvailableSchemes:
    def test_operation_overrides_global(self):
        doc = _doc(security=[{"bearerAuth": []}])
        op = {"security": [{"apiKeyAuth": []}]}
        assert _names(available_schemes(op, doc)) == ["apiKeyAuth"]

    def test_explicit_empty_security_disables_global(self):
        doc = _doc(security=[{"bearerAuth": []}])
        assert available_schemes({"security": []}, doc) == []

    def test_falls_back_to_global(self):
        doc = _doc(security=[{"bearerAuth": []}])
        assert _names(available_schemes({}, doc)) == ["bearerAuth"]

    def test_or_of_ands_deduplicated_in_first_seen_order(self):
        op = {
            "security": [
                {"basicAuth": [], "apiKeyAuth": []},
                {"apiKeyAuth": []},
                {"bearerAuth": ["read"]},
            ]
        }
        assert _names(available_schemes(op, _doc())) == ["basicAuth", "apiKeyAuth", "bearerAuth"]

    def test_undeclared_names_are_skipped(self):
        op = {"security": [{"unknownAuth": []}, {"bearerAuth": []}]}
        assert _names(available_schemes(op, _doc())) == ["bearerAuth"]

    def test_binding_carries_definition(self):
        binding = available_schemes({"security": [{"apiKeyAuth": []}]}, _doc())[0]
        assert binding.type == "apiKey"
        assert binding.scheme["name"] == "X-API-Key"

    def test_none_operation(self):
        assert available_schemes(None, _doc()) == []

    def test_empty_operation_uses_global(self):
        doc = _doc(security=[{"bearerAuth": []}])
        assert _names(available_schemes({}, doc)) == ["bearerAuth"]
        assert requires_security({}, doc) is True
        assert requires_security(None, doc) is False

    def test_petstore_delete_has_no_schemes(self):
        doc = yaml.safe_load((FIXTURES / "petstore.yaml").read_text(encoding="utf-8"))
        op = doc["paths"]["/pets/{petId}"]["delete"]
        assert available_schemes(op, doc) == []
        assert _names(available_schemes(doc["paths"]["/pets"]["get"], doc)) == ["bearerAuth"]


class TestRequiresSecurity:
    def test_operation_level(self):
        assert requires_security({"security": [{"apiKeyAuth": []}]}, _doc()) is True

    def test_global_level(self):
        assert requires_security({}, _doc(security=[{"bearerAuth": []}])) is True

    def test_neither(self):
        assert requires_security({}, _doc()) is False
        assert requires_security({"security": []}, _doc(security=[])) is False


class TestEffectiveRequirements:
    def test_present_key_wins(self):
        doc = _doc(security=[{"bearerAuth": []}])
        assert effective_requirements({"security": []}, doc) == []
        assert effective_requirements({}, doc) == [{"bearerAuth": []}]
