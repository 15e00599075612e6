from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SessionId:
    value: str


def normalize_key(value: Any) -> str:
    """Trim and lowercase a lookup key; non-strings collapse to ""."""
    if not isinstance(value, str):
        return ""
    return value.strip().lower()
