"""Helpers for safe debug logging.

The identifier sent in the ``User-Id`` header is the only credential a user
has, so it must never reach a log record verbatim. Request headers and
bodies pass through :func:`redact_for_log` before being logged.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset({"user-id", "user_id", "userid", "authorization", "cookie"})

# Trailing characters of an identifier kept visible so log lines stay correlatable.
_VISIBLE_SUFFIX = 4


def mask_identifier(user_id: str | None) -> str:
    """Mask an identifier, keeping only its last few characters."""
    if not user_id:
        return "<none>"
    if len(user_id) <= _VISIBLE_SUFFIX * 2:
        return "<redacted>"
    return f"…{user_id[-_VISIBLE_SUFFIX:]}"


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Return a copy of *value* with identifiers masked and long strings cut."""
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, Mapping):
        return {
            str(key): (
                mask_identifier(str(item))
                if str(key).lower() in _SENSITIVE_KEYS
                else redact_for_log(item, max_string=max_string)
            )
            for key, item in value.items()
        }
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [redact_for_log(item, max_string=max_string) for item in value]
    return value
