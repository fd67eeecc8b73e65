"""Helpers for safe debug logging.

pyvstore handles bearer tokens and provider callback URLs that embed raw
OAuth tokens.  This module redacts those before they reach a log line.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import urlsplit

# Compared after lowercasing and dropping "_" / "-".
_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "token",
        "accesstoken",
        "idtoken",
        "refreshtoken",
        "authorization",
        "callbackurl",
        "cookie",
        "password",
    }
)


def _normalize_key(key: str) -> str:
    return key.lower().replace("_", "").replace("-", "")


def redact_url(url: str) -> str:
    """Strip the query and fragment of *url*, where provider tokens live."""
    parts = urlsplit(url.strip())
    if not parts.query and not parts.fragment:
        return url
    base = f"{parts.scheme}://{parts.netloc}{parts.path}" if parts.scheme else parts.path
    return f"{base}#<redacted>"


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if _normalize_key(key) in _SENSITIVE_VALUE_KEYS:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    # Fallback: represent unknown objects without dumping internals.
    return repr(value)
