"""Shared fixtures for the OpenAPI adapter tests.

The sample description covers the shapes the generator has to cope with:
shared path-level parameters, parameter and request-body $refs, flattened and
wrapped bodies, allOf composition, a self-referential schema and values that
strict validators reject (``maximum: 1e400``, vendor formats).
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

import httpx
import pytest

from openapi_adapter.config import Settings
from openapi_adapter.executors import RestExecutor
from openapi_adapter.models import ToolCatalog
from openapi_adapter.service import AdapterService
from openapi_adapter.tool_registry import ToolRegistry


BASE_URL = "https://api.example.test"


def build_spec() -> Dict[str, Any]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Items", "version": "1.0.0"},
        "paths": {
            "/items": {
                "get": {
                    "operationId": "listItems",
                    "summary": "List items",
                    "parameters": [
                        {
                            "name": "limit",
                            "in": "query",
                            "description": "Page size",
                            "schema": {"type": "integer", "minimum": 1, "maximum": float("inf")},
                        },
                        {"name": "X-Trace-Id", "in": "header", "schema": {"type": "string"}},
                        {"name": "session", "in": "cookie", "schema": {"type": "string"}},
                    ],
                },
                "post": {
                    "operationId": "createItem",
                    "description": "Create an item",
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/NewItem"}
                            }
                        },
                    },
                },
            },
            "/items/{id}": {
                "parameters": [{"$ref": "#/components/parameters/ItemId"}],
                "get": {"operationId": "getItem"},
                "delete": {"summary": "Delete an item"},
                "put": {
                    "operationId": "replaceItem",
                    "requestBody": {"$ref": "#/components/requestBodies/ItemBody"},
                },
            },
            "/items/{id}/tags": {
                "post": {
                    "operationId": "addTags",
                    "parameters": [{"$ref": "#/components/parameters/ItemId"}],
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "array",
                                    "items": {"$ref": "#/components/schemas/Tag"},
                                }
                            }
                        },
                    },
                },
            },
        },
        "components": {
            "parameters": {
                "ItemId": {
                    "name": "id",
                    "in": "path",
                    "required": True,
                    "description": "Item identifier",
                    "schema": {"type": "integer", "format": "int64"},
                }
            },
            "requestBodies": {
                "ItemBody": {
                    "required": True,
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/Item"}}
                    },
                }
            },
            "schemas": {
                "NewItem": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {
                        "name": {"type": "string"},
                        "qty": {"type": "integer"},
                    },
                },
                "Item": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {
                        "name": {"type": "string", "description": "Display name"},
                        "qty": {"type": "integer"},
                        "tags": {"type": "array", "items": {"$ref": "#/components/schemas/Tag"}},
                    },
                },
                "Tag": {"type": "string", "enum": ["red", "blue"]},
                "Owned": {
                    "allOf": [
                        {"$ref": "#/components/schemas/Item"},
                        {
                            "type": "object",
                            "properties": {"owner": {"type": "string", "format": "email"}},
                            "required": ["owner"],
                        },
                    ]
                },
                "Node": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "children": {
                            "type": "array",
                            "items": {"$ref": "#/components/schemas/Node"},
                        },
                    },
                },
            },
        },
    }


@pytest.fixture
def spec() -> Dict[str, Any]:
    return build_spec()


@pytest.fixture
def catalog(spec) -> ToolCatalog:
    return ToolRegistry(spec).build(BASE_URL)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=BASE_URL, api_token=None, adapter_transport="stdio")


@pytest.fixture
def captured() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_service(captured) -> Callable[..., AdapterService]:
    """Build a service whose HTTP calls are answered by ``handler``."""

    def _make(catalog: ToolCatalog, handler: Callable[[httpx.Request], httpx.Response]):
        def _record(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return handler(request)

        executor = RestExecutor(transport=httpx.MockTransport(_record))
        return AdapterService(catalog, executor)

    return _make
