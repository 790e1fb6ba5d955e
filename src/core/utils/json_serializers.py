"""Shared JSON serialization utilities for type-safe JSON encoding."""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any


def _serialize_known_type(obj: Any) -> tuple[bool, Any]:
    """Try to serialize by known type. Returns (handled, result)."""
    if isinstance(obj, (datetime, date)):
        return True, obj.isoformat()
    if isinstance(obj, Enum):
        return True, obj.value
    if isinstance(obj, Path):
        return True, str(obj)
    if isinstance(obj, (set, frozenset)):
        return True, sorted(obj)
    if isinstance(obj, (bytes, bytearray)):
        return True, f"<{len(obj)} bytes>"
    return False, None


def json_serializer(obj: Any) -> Any:
    """
    Type-safe JSON serializer used by the JSON log formatter.

    - datetime/date -> ISO 8601 string
    - Enum -> value
    - Path -> string
    - set -> sorted list
    - bytes -> length marker (payloads are never logged)
    - dataclass -> dict
    - Everything else -> string (fallback)
    """
    handled, result = _serialize_known_type(obj)
    if handled:
        return result
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    return str(obj)


__all__ = ["json_serializer"]
