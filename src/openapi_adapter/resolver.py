"""$ref and allOf resolution for OpenAPI schemas."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .models import JsonSchema


logger = logging.getLogger(__name__)

_MISSING = object()


def placeholder_schema() -> JsonSchema:
    return {"type": "string"}


class SchemaResolver:
    """Expands schema nodes against the document they came from.

    Resolution degrades instead of failing: an unresolvable or cyclic
    reference becomes a plain string schema and a warning is logged.
    """

    def __init__(self, spec: Dict[str, Any], max_depth: int = 64) -> None:
        self.spec = spec
        self.max_depth = max_depth

    def resolve(self, node: Optional[JsonSchema]) -> JsonSchema:
        return self._resolve(node, (), 0)

    def resolve_object(self, node: Any) -> Any:
        """Follow a $ref chain on a non-schema object (parameter, request body)."""
        seen: List[str] = []
        while isinstance(node, dict) and isinstance(node.get("$ref"), str):
            ref = node["$ref"]
            if ref in seen:
                logger.warning("Circular ref: %s", ref)
                return None
            seen.append(ref)
            target = self.lookup(ref)
            if target is _MISSING:
                logger.warning("Could not resolve ref: %s", ref)
                return None
            node = target
        return node

    def lookup(self, ref: str) -> Any:
        if not ref.startswith("#"):
            return _MISSING
        current: Any = self.spec
        for segment in ref.lstrip("#").strip("/").split("/"):
            if not segment:
                continue
            segment = segment.replace("~1", "/").replace("~0", "~")
            if isinstance(current, dict) and segment in current:
                current = current[segment]
            elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                return _MISSING
        return current

    def _resolve(self, node: Any, stack: Tuple[str, ...], depth: int) -> JsonSchema:
        if not node or not isinstance(node, dict):
            return placeholder_schema()
        if depth > self.max_depth:
            logger.warning("Schema nesting exceeds %s levels; truncating", self.max_depth)
            return placeholder_schema()

        ref = node.get("$ref")
        if isinstance(ref, str):
            if ref in stack:
                logger.warning("Circular ref: %s", ref)
                return placeholder_schema()
            target = self.lookup(ref)
            if target is _MISSING or not isinstance(target, dict):
                logger.warning("Could not resolve ref: %s", ref)
                return placeholder_schema()
            resolved = self._resolve(target, stack + (ref,), depth + 1)
            siblings = {key: value for key, value in node.items() if key != "$ref"}
            if siblings:
                resolved = {**resolved, **siblings}
            return resolved

        if isinstance(node.get("allOf"), list):
            return self._merge_all_of(node, stack, depth)

        resolved = dict(node)
        properties = node.get("properties")
        if isinstance(properties, dict):
            resolved["properties"] = {
                key: self._resolve(value, stack, depth + 1) for key, value in properties.items()
            }
        items = node.get("items")
        if isinstance(items, dict):
            resolved["items"] = self._resolve(items, stack, depth + 1)
        for keyword in ("anyOf", "oneOf"):
            branches = node.get(keyword)
            if isinstance(branches, list):
                resolved[keyword] = [self._resolve(branch, stack, depth + 1) for branch in branches]
        additional = node.get("additionalProperties")
        if isinstance(additional, dict):
            resolved["additionalProperties"] = self._resolve(additional, stack, depth + 1)
        patterns = node.get("patternProperties")
        if isinstance(patterns, dict):
            resolved["patternProperties"] = {
                key: self._resolve(value, stack, depth + 1) for key, value in patterns.items()
            }
        return resolved

    def _merge_all_of(
        self, node: JsonSchema, stack: Tuple[str, ...], depth: int
    ) -> JsonSchema:
        siblings = {key: value for key, value in node.items() if key != "allOf"}
        own = self._resolve(siblings, stack, depth + 1) if siblings else {}
        branches = [self._resolve(branch, stack, depth + 1) for branch in node["allOf"]]

        properties: Dict[str, Any] = dict(own.get("properties") or {})
        required: List[str] = list(own.get("required") or [])
        for branch in branches:
            properties.update(branch.get("properties") or {})
            for name in branch.get("required") or []:
                if name not in required:
                    required.append(name)

        if not properties and len(branches) == 1:
            # allOf: [{$ref}] used only to attach a description to a reference
            return {**branches[0], **own}

        merged: JsonSchema = {**own, "type": "object", "properties": properties}
        if required:
            merged["required"] = required
        else:
            merged.pop("required", None)
        return merged
