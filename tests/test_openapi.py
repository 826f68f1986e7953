"""Tests for loading the API description and extracting operations."""

import json

import pytest

from openapi_adapter.openapi import OpenAPILoader, SpecLoadError


class TestLoadSpec:
    def test_loads_json(self, tmp_path, spec):
        path = tmp_path / "openapi.json"
        path.write_text(json.dumps(spec))
        loaded = OpenAPILoader().load_spec(path)
        assert set(loaded["paths"]) == {"/items", "/items/{id}", "/items/{id}/tags"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(SpecLoadError, match="not found"):
            OpenAPILoader().load_spec(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "openapi.json"
        path.write_text("{not json")
        with pytest.raises(SpecLoadError, match="Failed to read"):
            OpenAPILoader().load_spec(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "openapi.json"
        path.write_text("[1, 2]")
        with pytest.raises(SpecLoadError, match="not a JSON object"):
            OpenAPILoader().load_spec(str(path))


class TestExtractOperations:
    def test_operation_names_and_order(self, spec):
        operations = OpenAPILoader().extract_operations(spec)
        assert [op.operation_id for op in operations] == [
            "listItems",
            "createItem",
            "getItem",
            "delete_items__id_",
            "replaceItem",
            "addTags",
        ]

    def test_descriptions(self, spec):
        operations = {op.operation_id: op for op in OpenAPILoader().extract_operations(spec)}
        assert operations["listItems"].description == "List items"
        assert operations["createItem"].description == "Create an item"
        assert operations["getItem"].description == "Execute GET /items/{id}"
        assert operations["delete_items__id_"].description == "Delete an item"

    def test_shared_parameters_are_inherited(self, spec):
        operations = {op.operation_id: op for op in OpenAPILoader().extract_operations(spec)}
        get_item = operations["getItem"]
        assert get_item.method == "get"
        assert get_item.path == "/items/{id}"
        assert [p["name"] for p in get_item.parameters] == ["id"]

    def test_request_body_ref_resolved(self, spec):
        operations = {op.operation_id: op for op in OpenAPILoader().extract_operations(spec)}
        body = operations["replaceItem"].request_body
        assert body["required"] is True
        assert "application/json" in body["content"]

    def test_non_method_keys_skipped(self):
        spec = {
            "paths": {
                "/ping": {
                    "summary": "Ping",
                    "servers": [{"url": "https://other"}],
                    "parameters": [],
                    "get": {"operationId": "ping"},
                }
            }
        }
        operations = OpenAPILoader().extract_operations(spec)
        assert [op.operation_id for op in operations] == ["ping"]

    def test_fallback_name(self):
        spec = {"paths": {"/users/{user-id}/posts.json": {"post": {}}}}
        operations = OpenAPILoader().extract_operations(spec)
        assert operations[0].operation_id == "post_users__user_id__posts_json"

    def test_empty_paths(self):
        assert OpenAPILoader().extract_operations({}) == []
