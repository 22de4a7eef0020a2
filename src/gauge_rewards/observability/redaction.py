from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

REDACTED = "***REDACTED***"

SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "secret",
        "private_key",
        "api_key",
        "auth_token",
        "access_token",
        "password",
        "mnemonic",
    }
)

# The Graph gateway urls carry the api key as a path segment.
_GATEWAY_KEY_PATTERN = re.compile(r"(/api/)[^/\s]+(/subgraphs/)")


def _is_sensitive_key(key: str) -> bool:
    normalized = key.lower()
    return any(sensitive in normalized for sensitive in SENSITIVE_KEYS)


def redact_url(value: str) -> str:
    return _GATEWAY_KEY_PATTERN.sub(rf"\g<1>{REDACTED}\g<2>", value)


def redact_sensitive(data: Any) -> Any:
    if isinstance(data, Mapping):
        return {
            key: REDACTED if _is_sensitive_key(str(key)) else redact_sensitive(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact_sensitive(item) for item in data]
    if isinstance(data, str):
        return redact_url(data)
    return data
