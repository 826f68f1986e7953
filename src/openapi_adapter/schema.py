"""Sanitize and normalize resolved schemas for strict MCP clients.

Resolved OpenAPI schemas still carry things a JSON Schema validator on the
client side may reject: numeric literals outside the IEEE-754 safe integer
range, infinities from overflowing literals such as ``1e400``, annotation-only
keywords and vendor formats. ``sanitize`` removes unsafe values, ``normalize``
narrows what is left to a conservative keyword subset.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from .models import JsonSchema
from .resolver import SchemaResolver


MAX_SAFE_INTEGER = 2**53 - 1

NUMERIC_KEYWORDS = (
    "default",
    "example",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "multipleOf",
    "const",
)

ANNOTATION_KEYWORDS = frozenset(
    {"example", "examples", "deprecated", "readOnly", "writeOnly", "xml", "style", "explode", "nullable"}
)

ALLOWED_KEYWORDS = frozenset(
    {
        "type",
        "properties",
        "required",
        "description",
        "enum",
        "items",
        "anyOf",
        "oneOf",
        "allOf",
        "const",
        "default",
        "minimum",
        "maximum",
        "exclusiveMinimum",
        "exclusiveMaximum",
        "multipleOf",
        "minLength",
        "maxLength",
        "pattern",
        "minItems",
        "maxItems",
        "uniqueItems",
        "minProperties",
        "maxProperties",
        "format",
        "additionalProperties",
        "patternProperties",
        "title",
    }
)

VALID_TYPES = frozenset({"string", "number", "integer", "boolean", "object", "array", "null"})

ALLOWED_FORMATS = frozenset({"email", "uri", "uuid", "ipv4", "ipv6", "date-time", "date", "time"})

COMPOSITION_KEYWORDS = ("anyOf", "oneOf", "allOf")

CONSTRAINING_KEYWORDS = ("type", "enum", "const", "anyOf", "oneOf", "allOf", "properties", "items")


def is_unsafe_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return True
    return abs(value) > MAX_SAFE_INTEGER


def sanitize(node: Any) -> Any:
    if not isinstance(node, dict):
        return node

    sanitized: JsonSchema = {}
    for key, value in node.items():
        if key in ANNOTATION_KEYWORDS:
            continue
        if key in NUMERIC_KEYWORDS and is_unsafe_number(value):
            continue
        if key == "enum" and isinstance(value, list):
            members = [member for member in value if not is_unsafe_number(member)]
            if members:
                sanitized[key] = members
            continue
        if key in ("properties", "patternProperties") and isinstance(value, dict):
            sanitized[key] = {name: sanitize(child) for name, child in value.items()}
        elif key in ("items", "additionalProperties") and isinstance(value, dict):
            sanitized[key] = sanitize(value)
        elif key in COMPOSITION_KEYWORDS and isinstance(value, list):
            sanitized[key] = [sanitize(branch) for branch in value]
        else:
            sanitized[key] = value
    return sanitized


def _normalize_child(node: Any) -> Optional[JsonSchema]:
    if not isinstance(node, dict):
        return None
    return normalize(sanitize(node))


def _dedupe(values: List[Any]) -> List[Any]:
    # keyed on type so True and 1 stay distinct members
    seen: List[Any] = []
    unique: List[Any] = []
    for value in values:
        key = (type(value), value)
        if key not in seen:
            seen.append(key)
            unique.append(value)
    return unique


def _is_one_of(value: Any, allowed: frozenset) -> bool:
    return isinstance(value, str) and value in allowed


def normalize(node: Optional[JsonSchema]) -> Optional[JsonSchema]:
    if node is None:
        return None
    if not isinstance(node, dict):
        return {"type": "string"}

    normalized: JsonSchema = {}
    for key, value in node.items():
        if key not in ALLOWED_KEYWORDS:
            continue

        if key == "type":
            if isinstance(value, list):
                types = _dedupe([t for t in value if _is_one_of(t, VALID_TYPES)])
                if types:
                    normalized["type"] = types
            elif _is_one_of(value, VALID_TYPES):
                normalized["type"] = value
        elif key == "format":
            if _is_one_of(value, ALLOWED_FORMATS):
                normalized["format"] = value
        elif key == "required":
            if isinstance(value, list):
                names = _dedupe([name for name in value if isinstance(name, str)])
                if names:
                    normalized["required"] = names
        elif key == "enum":
            if isinstance(value, list):
                members = _dedupe(value)
                if members:
                    normalized["enum"] = members
        elif key in ("properties", "patternProperties"):
            if isinstance(value, dict):
                children = {}
                for name, child in value.items():
                    normalized_child = _normalize_child(child)
                    if normalized_child is not None:
                        children[name] = normalized_child
                if children:
                    normalized[key] = children
        elif key == "items":
            items = _normalize_child(value)
            if items is not None:
                normalized["items"] = items
        elif key == "additionalProperties":
            if isinstance(value, bool):
                normalized[key] = value
            else:
                additional = _normalize_child(value)
                if additional is not None:
                    normalized[key] = additional
        elif key in COMPOSITION_KEYWORDS:
            if isinstance(value, list):
                branches = [b for b in (_normalize_child(branch) for branch in value) if b is not None]
                if branches:
                    normalized[key] = branches
        elif key in ("description", "title"):
            if isinstance(value, str):
                normalized[key] = value
        else:
            normalized[key] = value

    if not any(keyword in normalized for keyword in CONSTRAINING_KEYWORDS):
        normalized["type"] = "string"
    return normalized


def prepare_schema(resolver: SchemaResolver, node: Optional[JsonSchema]) -> JsonSchema:
    """Resolve, sanitize and normalize a raw schema from the description."""
    return normalize(sanitize(resolver.resolve(node))) or {"type": "string"}
