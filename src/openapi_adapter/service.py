"""Dispatches tool invocations onto the origin API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .executors import ExecutionError, InvalidArgumentsError, RestExecutor
from .logging import redact_arguments
from .models import InvocationResult, ToolCatalog

logger = logging.getLogger(__name__)


class AdapterService:
    """
    Maps a tool name and flat arguments back onto an HTTP call.

    The catalog is read-only after startup, so a single service instance can
    serve concurrent invocations. ``dispatch`` never raises: every failure is
    returned as an error-flagged ``InvocationResult``.
    """

    def __init__(
        self,
        catalog: ToolCatalog,
        executor: Optional[RestExecutor] = None,
    ) -> None:
        self.catalog = catalog
        self.executor = executor or RestExecutor()

    async def dispatch(
        self,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> InvocationResult:
        route = self.catalog.get_route(tool_name)
        if route is None:
            logger.warning("Tool not found: %s", tool_name)
            return InvocationResult.error(f"Tool not found: {tool_name}")

        arguments = arguments or {}
        logger.info(
            "Executing tool=%s arguments=%s",
            tool_name,
            redact_arguments(arguments, route.header_params),
        )

        try:
            payload = await self.executor.execute(
                route,
                arguments,
                base_url=self.catalog.base_url,
                api_token=self.catalog.api_token,
            )
        except InvalidArgumentsError as exc:
            logger.warning("Rejected call to %s: %s", tool_name, exc)
            return InvocationResult.error(exc.payload)
        except ExecutionError as exc:
            logger.error("Tool execution failed: tool=%s error=%s", tool_name, exc)
            return InvocationResult.error(exc.payload)
        except Exception as exc:
            logger.exception("Unexpected error executing tool=%s", tool_name)
            return InvocationResult.error(str(exc) or exc.__class__.__name__)

        return InvocationResult.success(payload)
