from pathlib import Path

import yaml

from openapi_studio.schema.example import CYCLE_SENTINEL, synthesize

FIXTURES = Path(__file__).parent / "fixtures"


def _petstore() -> dict:
    return yaml.safe_load((FIXTURES / "petstore.yaml").read_text(encoding="utf-8"))


class TestObjectRequiredPolicy:
    def test_required_declared_includes_only_required(self):
        schema = {
            "type": "object",
            "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
            "required": ["id"],
        }
        assert synthesize(schema, {}) == {"id": 0}

    def test_no_required_includes_all(self):
        schema = {
            "type": "object",
            "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
        }
        assert synthesize(schema, {}) == {"id": 0, "name": "string"}

    def test_empty_required_includes_nothing(self):
        schema = {"type": "object", "properties": {"id": {"type": "integer"}}, "required": []}
        assert synthesize(schema, {}) == {}

    def test_keys_follow_declaration_order(self):
        schema = {"properties": {"z": {"type": "string"}, "a": {"type": "string"}, "m": {"type": "string"}}}
        assert list(synthesize(schema, {})) == ["z", "a", "m"]


class TestPrimitives:
    def test_string_formats(self):
        assert synthesize({"type": "string", "format": "date"}, {}) == "2024-01-01"
        assert synthesize({"type": "string", "format": "date-time"}, {}) == "2024-01-01T00:00:00Z"
        assert synthesize({"type": "string", "format": "email"}, {}) == "example@example.com"
        assert synthesize({"type": "string", "format": "uri"}, {}) == "https://example.com"
        assert synthesize({"type": "string", "format": "uuid"}, {}) == "123e4567-e89b-12d3-a456-426614174000"

    def test_string_default_and_fallback(self):
        assert synthesize({"type": "string", "default": "abc"}, {}) == "abc"
        assert synthesize({"type": "string", "format": "hostname"}, {}) == "string"

    def test_numbers(self):
        assert synthesize({"type": "integer"}, {}) == 0
        assert isinstance(synthesize({"type": "number"}, {}), float)
        assert synthesize({"type": "number", "default": 2.5}, {}) == 2.5

    def test_boolean(self):
        assert synthesize({"type": "boolean"}, {}) is False
        assert synthesize({"type": "boolean", "default": True}, {}) is True

    def test_example_overrides_everything(self):
        schema = {"type": "string", "format": "email", "enum": ["a"], "example": "me@x.io"}
        assert synthesize(schema, {}) == "me@x.io"

    def test_enum_first_value(self):
        assert synthesize({"type": "string", "enum": ["available", "sold"]}, {}) == "available"

    def test_unknown_type_is_none(self):
        assert synthesize({"type": "file"}, {}) is None

    def test_nullable_list_type(self):
        assert synthesize({"type": ["null", "integer"]}, {}) == 0


class TestArraysAndComposites:
    def test_array_single_item(self):
        assert synthesize({"type": "array", "items": {"type": "string"}}, {}) == ["string"]

    def test_array_min_items(self):
        result = synthesize({"type": "array", "minItems": 3, "items": {"properties": {"a": {"type": "integer"}}}}, {})
        assert result == [{"a": 0}, {"a": 0}, {"a": 0}]
        assert result[0] is not result[1]

    def test_array_without_items(self):
        assert synthesize({"type": "array"}, {}) == []

    def test_array_of_any_items(self):
        assert synthesize({"type": "array", "items": {}}, {}) == [{}]
        assert synthesize({"type": "array", "items": {}, "minItems": 2}, {}) == [{}, {}]

    def test_any_of_and_one_of_take_first(self):
        assert synthesize({"anyOf": [{"type": "integer"}, {"type": "string"}]}, {}) == 0
        assert synthesize({"oneOf": [{"type": "boolean"}]}, {}) is False
        assert synthesize({"oneOf": []}, {}) == {}

    def test_all_of_merges_objects(self):
        schema = {
            "allOf": [
                {"properties": {"a": {"type": "integer"}, "b": {"type": "string"}}},
                {"type": "string"},
                {"properties": {"b": {"type": "boolean"}}},
            ]
        }
        assert synthesize(schema, {}) == {"a": 0, "b": False}


class TestReferences:
    def test_reference_is_resolved(self):
        doc = _petstore()
        assert synthesize({"$ref": "#/components/schemas/NewPet"}, doc) == {"name": "string"}

    def test_all_of_with_reference(self):
        doc = _petstore()
        assert synthesize({"$ref": "#/components/schemas/Pet"}, doc) == {"name": "string", "id": 0}

    def test_missing_reference_is_none(self):
        assert synthesize({"$ref": "#/components/schemas/Nope"}, _petstore()) is None

    def test_self_reference_terminates(self):
        doc = _petstore()
        result = synthesize({"$ref": "#/components/schemas/Node"}, doc)
        assert result == {"value": "string", "children": [CYCLE_SENTINEL]}

    def test_siblings_do_not_share_cycle_state(self):
        doc = {"components": {"schemas": {"Tag": {"type": "object", "properties": {"label": {"type": "string"}}}}}}
        schema = {
            "properties": {
                "first": {"$ref": "#/components/schemas/Tag"},
                "second": {"$ref": "#/components/schemas/Tag"},
            }
        }
        assert synthesize(schema, doc) == {"first": {"label": "string"}, "second": {"label": "string"}}

    def test_deterministic(self):
        doc = _petstore()
        node = {"$ref": "#/components/schemas/Pet"}
        assert synthesize(node, doc) == synthesize(node, doc)
