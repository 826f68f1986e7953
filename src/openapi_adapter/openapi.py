"""OpenAPI spec loader and operation parser."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .resolver import SchemaResolver


logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset({"get", "put", "post", "delete", "options", "head", "patch", "trace"})


class SpecLoadError(Exception):
    pass


@dataclass(frozen=True)
class OpenAPIOperation:
    operation_id: str
    method: str
    path: str
    description: str
    parameters: Tuple[Dict[str, Any], ...]
    request_body: Optional[Dict[str, Any]] = None


class OpenAPILoader:
    def load_spec(self, path: Union[str, Path]) -> Dict[str, Any]:
        spec_file = Path(path)
        try:
            with spec_file.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise SpecLoadError(f"API description not found: {spec_file}") from exc
        except (OSError, ValueError) as exc:
            raise SpecLoadError(f"Failed to read API description {spec_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise SpecLoadError(f"API description {spec_file} is not a JSON object")
        logger.info("Loaded API description %s (%s paths)", spec_file, len(data.get("paths") or {}))
        return data

    def extract_operations(self, spec: Dict[str, Any]) -> List[OpenAPIOperation]:
        resolver = SchemaResolver(spec)
        operations: List[OpenAPIOperation] = []
        paths = spec.get("paths") or {}

        for path, path_item in paths.items():
            path_item = resolver.resolve_object(path_item)
            if not isinstance(path_item, dict):
                logger.warning("Skipping malformed path item: %s", path)
                continue
            shared_parameters = path_item.get("parameters") or []
            for method, operation in path_item.items():
                if method == "parameters":
                    continue
                if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                    continue
                operation_id = operation.get("operationId") or self._fallback_operation_id(
                    method, path
                )
                description = (
                    operation.get("description")
                    or operation.get("summary")
                    or f"Execute {method.upper()} {path}"
                )
                parameters = [
                    resolver.resolve_object(parameter)
                    for parameter in [*shared_parameters, *(operation.get("parameters") or [])]
                ]
                request_body = resolver.resolve_object(operation.get("requestBody"))

                operations.append(
                    OpenAPIOperation(
                        operation_id=operation_id,
                        method=method.lower(),
                        path=path,
                        description=description,
                        parameters=tuple(p for p in parameters if isinstance(p, dict)),
                        request_body=request_body if isinstance(request_body, dict) else None,
                    )
                )

        return operations

    def _fallback_operation_id(self, method: str, path: str) -> str:
        return method.lower() + re.sub(r"[^A-Za-z0-9]", "_", path)
