"""Execution layer that turns tool arguments into REST calls."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import httpx

from .models import RoutingRecord
from .tool_registry import REQUEST_BODY_ARGUMENT

logger = logging.getLogger(__name__)

_NO_BODY = object()


class ExecutionError(Exception):
    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload if payload is not None else message


class InvalidArgumentsError(ExecutionError):
    pass


class UpstreamCallError(ExecutionError):
    pass


def stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


class RestExecutor:
    def __init__(
        self,
        timeout_seconds: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def execute(
        self,
        route: RoutingRecord,
        arguments: Dict[str, Any],
        base_url: str,
        api_token: Optional[str] = None,
    ) -> Any:
        url = base_url.rstrip("/") + self._build_path(route, arguments)
        headers, query = self._build_headers_and_query(route, arguments, api_token)
        body = self._build_body(route, arguments)

        request_kwargs: Dict[str, Any] = {"headers": headers, "params": query}
        if body is not _NO_BODY:
            request_kwargs["json"] = body

        method = route.method.upper()
        logger.debug("%s %s params=%s", method, url, query)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.request(method, url, **request_kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            payload = self._error_payload(exc.response)
            if payload is None:
                payload = str(exc)
            raise UpstreamCallError(str(exc), payload) from exc
        except httpx.HTTPError as exc:
            raise UpstreamCallError(str(exc) or exc.__class__.__name__) from exc

        return self._response_payload(response)

    def _build_path(self, route: RoutingRecord, arguments: Dict[str, Any]) -> str:
        path = route.path
        missing = [
            name
            for name in route.path_params
            if arguments.get(name) is None and name in route.required
        ]
        if missing:
            raise InvalidArgumentsError(
                f"Missing required path parameter(s): {', '.join(missing)}"
            )

        for name in route.path_params:
            value = arguments.get(name)
            token = f"{{{name}}}"
            if value is not None:
                path = path.replace(token, quote(stringify(value), safe=""))
            else:
                path = path.replace(f"/{token}", "").replace(token, "")
        return path

    def _build_headers_and_query(
        self, route: RoutingRecord, arguments: Dict[str, Any], api_token: Optional[str]
    ) -> Tuple[Dict[str, str], Dict[str, Any]]:
        headers: Dict[str, str] = {}
        query: Dict[str, Any] = {}

        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"

        for name in route.query_params:
            value = arguments.get(name)
            if value is None:
                continue
            query[name] = json.dumps(value) if isinstance(value, dict) else value

        for name in route.header_params:
            value = arguments.get(name)
            if value is not None:
                headers[name] = stringify(value)

        return headers, query

    def _build_body(self, route: RoutingRecord, arguments: Dict[str, Any]) -> Any:
        if not route.body_params:
            return _NO_BODY
        if route.is_body_flattened:
            return {
                name: arguments[name]
                for name in route.body_params
                if arguments.get(name) is not None
            }
        if arguments.get(REQUEST_BODY_ARGUMENT) is None:
            return _NO_BODY
        return arguments[REQUEST_BODY_ARGUMENT]

    def _response_payload(self, response: httpx.Response) -> Any:
        if not response.content:
            return {"status": "ok"}
        try:
            return response.json()
        except ValueError:
            return response.text

    def _error_payload(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text or None
