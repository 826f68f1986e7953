"""Logging setup and redaction of tool arguments before they are logged."""

from __future__ import annotations

import logging
import re
from typing import Any, Collection, Dict, List


_SENSITIVE_KEYS = re.compile(
    r"(token|secret|api[_-]?key|password|authorization|cookie|credential)", re.IGNORECASE
)

REDACTED = "***REDACTED***"


def configure_logging(level: str) -> None:
    # basicConfig writes to stderr; stdout belongs to the stdio transport.
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def redact_arguments(
    arguments: Dict[str, Any], header_params: Collection[str] = ()
) -> Dict[str, Any]:
    """Mask secret-looking keys and every argument sent as an HTTP header.

    Header parameters are masked wholesale since APIs put credentials there
    under arbitrary names (``X-Session``, ``Ocp-Apim-Subscription-Key``...).
    """
    headers = {name.lower() for name in header_params}
    return {
        key: REDACTED if key.lower() in headers else value
        for key, value in _redact(arguments).items()
    }


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if _SENSITIVE_KEYS.search(str(key)) else _redact(child)
            for key, child in value.items()
        }
    if isinstance(value, list):
        redacted: List[Any] = [_redact(item) for item in value]
        return redacted
    return value
