"""Tool registry for the OpenAPI Adapter."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .models import (
    PARAMETER_LOCATIONS,
    JsonSchema,
    RoutingRecord,
    ToolCatalog,
    ToolDefinition,
)
from .openapi import OpenAPILoader, OpenAPIOperation
from .resolver import SchemaResolver
from .schema import prepare_schema


logger = logging.getLogger(__name__)

REQUEST_BODY_ARGUMENT = "requestBody"


class ToolNameCollisionError(Exception):
    pass


class ToolRegistry:
    def __init__(
        self,
        spec: Dict[str, Any],
        openapi_loader: Optional[OpenAPILoader] = None,
    ) -> None:
        self.spec = spec
        self.openapi_loader = openapi_loader or OpenAPILoader()
        self.resolver = SchemaResolver(spec)

    def build(self, base_url: str, api_token: Optional[str] = None) -> ToolCatalog:
        tools: List[ToolDefinition] = []
        routes: Dict[str, RoutingRecord] = {}
        origins: Dict[str, str] = {}

        for operation in self.openapi_loader.extract_operations(self.spec):
            tool, route = self._build_tool(operation)
            origin = f"{operation.method.upper()} {operation.path}"
            if tool.name in routes:
                raise ToolNameCollisionError(
                    f"Tool name {tool.name!r} is produced by both {origins[tool.name]} and {origin}"
                )
            origins[tool.name] = origin
            tools.append(tool)
            routes[tool.name] = route
            logger.debug("Generated tool %s for %s", tool.name, origin)

        logger.info("Generated %s tools", len(tools))
        return ToolCatalog(
            tools=tuple(tools),
            routes=routes,
            base_url=base_url,
            api_token=api_token,
        )

    def _build_tool(self, operation: OpenAPIOperation) -> tuple[ToolDefinition, RoutingRecord]:
        properties: Dict[str, JsonSchema] = {}
        required: List[str] = []
        locations: Dict[str, str] = {}

        for parameter in operation.parameters:
            name = parameter.get("name")
            location = parameter.get("in")
            if not name or location not in PARAMETER_LOCATIONS:
                continue
            schema = prepare_schema(self.resolver, self._parameter_schema(parameter))
            description = parameter.get("description") or schema.get("description")
            if description:
                schema = {**schema, "description": description}
            properties[name] = schema
            locations[name] = location
            if parameter.get("required"):
                required.append(name)
            elif name in required:
                required.remove(name)

        body_params: List[str] = []
        is_body_flattened = False
        body_schema = self._body_schema(operation.request_body)
        if body_schema is not None:
            body = prepare_schema(self.resolver, body_schema)
            if body.get("type") == "object" and body.get("properties"):
                is_body_flattened = True
                for key, value in body["properties"].items():
                    if key in properties:
                        logger.warning(
                            "Body field %r of %s shadows a parameter; skipping it",
                            key,
                            operation.operation_id,
                        )
                        continue
                    properties[key] = value
                    body_params.append(key)
                required.extend(name for name in body.get("required") or [] if name in body_params)
            elif REQUEST_BODY_ARGUMENT in properties:
                logger.warning(
                    "Request body of %s shadows parameter %r; skipping it",
                    operation.operation_id,
                    REQUEST_BODY_ARGUMENT,
                )
            else:
                properties[REQUEST_BODY_ARGUMENT] = body
                body_params.append(REQUEST_BODY_ARGUMENT)
                if (operation.request_body or {}).get("required"):
                    required.append(REQUEST_BODY_ARGUMENT)

        required_names = [name for name in dict.fromkeys(required) if name in properties]
        input_schema: JsonSchema = {"type": "object", "properties": properties}
        if required_names:
            input_schema["required"] = required_names

        route = RoutingRecord(
            method=operation.method,
            path=operation.path,
            path_params=self._bucket(locations, "path"),
            query_params=self._bucket(locations, "query"),
            header_params=self._bucket(locations, "header"),
            body_params=tuple(body_params),
            is_body_flattened=is_body_flattened,
            required=tuple(required_names),
        )
        tool = ToolDefinition(
            name=operation.operation_id,
            description=operation.description,
            input_schema=input_schema,
        )
        return tool, route

    def _parameter_schema(self, parameter: Dict[str, Any]) -> Optional[JsonSchema]:
        if "schema" in parameter:
            return parameter["schema"]
        for media in (parameter.get("content") or {}).values():
            if isinstance(media, dict) and "schema" in media:
                return media["schema"]
        return None

    def _body_schema(self, request_body: Optional[Dict[str, Any]]) -> Optional[JsonSchema]:
        content = (request_body or {}).get("content") or {}
        json_body = content.get("application/json") or {}
        return json_body.get("schema")

    def _bucket(self, locations: Dict[str, str], location: str) -> tuple[str, ...]:
        return tuple(name for name, where in locations.items() if where == location)
