"""Secret redaction for anything that is about to be logged or printed."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

SENSITIVE_KEYS = frozenset(
    {
        "apikey",
        "password",
        "passwd",
        "token",
        "accesstoken",
        "refreshtoken",
        "secret",
        "authorization",
    }
)

REDACTED = "REDACTED"


def is_sensitive_key(key: Any) -> bool:
    return isinstance(key, str) and key.lower() in SENSITIVE_KEYS


def redact(value: Any) -> Any:
    """Return a deep copy of ``value`` with sensitive values replaced.

    Keys are matched case-insensitively and keep their original casing.
    Pydantic models are dumped to plain data first. Primitives are
    returned as-is and the input is never mutated.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True)

    if isinstance(value, dict):
        return {
            k: REDACTED if is_sensitive_key(k) else redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact(v) for v in value]
    if isinstance(value, tuple):
        return tuple(redact(v) for v in value)
    return value
