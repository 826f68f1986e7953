"""MCP server setup for the OpenAPI Adapter."""

import logging
from typing import Any, Dict

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult

from .config import Settings
from .executors import RestExecutor
from .models import ToolCatalog, ToolDefinition
from .openapi import OpenAPILoader
from .service import AdapterService
from .tool_registry import ToolRegistry

logger = logging.getLogger(__name__)


class OpenAPITool(Tool):
    """A tool whose input schema comes straight from the API description."""

    def __init__(self, service: AdapterService, definition: ToolDefinition) -> None:
        super().__init__(
            name=definition.name,
            description=definition.description,
            parameters=definition.input_schema,
        )
        self._service = service

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        result = await self._service.dispatch(self.name, arguments)
        if result.is_error:
            raise ToolError(result.to_text())
        return ToolResult(content=result.to_text())


def build_catalog(settings: Settings) -> ToolCatalog:
    loader = OpenAPILoader()
    spec = loader.load_spec(settings.api_spec_path)
    registry = ToolRegistry(spec, loader)
    return registry.build(settings.api_base_url, settings.api_token)


def create_mcp(settings: Settings, service: AdapterService) -> FastMCP:
    mcp = FastMCP(settings.service_name, instructions=_instructions(service.catalog))
    for definition in service.catalog.tools:
        mcp.add_tool(OpenAPITool(service, definition))
        logger.debug("Registered tool: %s", definition.name)
    logger.info("Registered %s tools", len(service.catalog.tools))
    return mcp


async def build_server(settings: Settings) -> tuple[FastMCP, object | None]:
    catalog = build_catalog(settings)
    executor = RestExecutor(timeout_seconds=settings.api_timeout_seconds)
    service = AdapterService(catalog, executor)

    mcp = create_mcp(settings, service)
    app = _get_http_app(mcp, settings)
    _attach_healthcheck(app)
    return mcp, app


def _attach_healthcheck(app) -> None:  # type: ignore[no-untyped-def]
    if not app:
        return

    async def healthcheck(_request):  # type: ignore[no-untyped-def]
        from starlette.responses import JSONResponse

        return JSONResponse({"status": "ok"})

    app.add_route("/health", healthcheck, methods=["GET"])


def _instructions(catalog: ToolCatalog) -> str:
    return (
        f"Exposes the HTTP API at {catalog.base_url} as tools. "
        "Each tool performs one HTTP request and returns the response body."
    )


def _get_http_app(mcp: FastMCP, settings: Settings):  # type: ignore[no-untyped-def]
    transport = settings.adapter_transport.lower()
    if transport in {"http"}:
        app = mcp.http_app(transport="http", stateless_http=True, json_response=True)
        _attach_cors(app)
        return app
    if transport in {"streamable-http", "streamablehttp"}:
        app = mcp.http_app(
            transport="streamable-http", stateless_http=True, json_response=True
        )
        _attach_cors(app)
        return app
    if transport in {"sse"}:
        app = mcp.http_app(transport="sse")
        _attach_cors(app)
        return app
    return None


def _attach_cors(app) -> None:  # type: ignore[no-untyped-def]
    if not app:
        return
    from starlette.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
