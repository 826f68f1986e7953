"""Internal models for generated tools and their HTTP routing."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


JsonSchema = Dict[str, Any]

PARAMETER_LOCATIONS = ("path", "query", "header")


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: JsonSchema


@dataclass(frozen=True)
class RoutingRecord:
    """Maps a tool's flat arguments back onto an HTTP request."""

    method: str
    path: str
    path_params: Tuple[str, ...] = ()
    query_params: Tuple[str, ...] = ()
    header_params: Tuple[str, ...] = ()
    body_params: Tuple[str, ...] = ()
    is_body_flattened: bool = False
    required: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ToolCatalog:
    """Everything derived from the API description, built once at startup."""

    tools: Tuple[ToolDefinition, ...]
    routes: Mapping[str, RoutingRecord]
    base_url: str
    api_token: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.routes, MappingProxyType):
            object.__setattr__(self, "routes", MappingProxyType(dict(self.routes)))

    def get_route(self, tool_name: str) -> Optional[RoutingRecord]:
        return self.routes.get(tool_name)


@dataclass(frozen=True)
class InvocationResult:
    payload: Any = field(default=None)
    is_error: bool = False

    @classmethod
    def success(cls, payload: Any) -> "InvocationResult":
        return cls(payload=payload)

    @classmethod
    def error(cls, payload: Any) -> "InvocationResult":
        return cls(payload=payload, is_error=True)

    def to_text(self) -> str:
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload, indent=2, ensure_ascii=False)
