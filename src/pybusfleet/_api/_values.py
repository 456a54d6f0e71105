"""Typed field value codec for the document store REST API.

The store wraps every field value in a single-key object naming its type,
e.g. ``{"stringValue": "BUS-001"}`` or ``{"nullValue": null}``. This module
converts between those wrappers and plain Python values.
"""

from __future__ import annotations

import base64
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

# RFC 3339 timestamps from the store carry up to nanosecond precision;
# datetime keeps microseconds.
_FRACTION = re.compile(r"\.(\d{6})\d+")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC datetime."""
    text = _FRACTION.sub(r".\1", value.strip())
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an RFC 3339 UTC timestamp.

    Naive datetimes are taken to be in local time.
    """
    aware = value if value.tzinfo is not None else value.astimezone()
    return aware.astimezone(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


def decode_value(wrapped: Mapping[str, Any]) -> Any:
    """Convert one typed value wrapper to a Python value."""
    if "nullValue" in wrapped:
        return None
    if "booleanValue" in wrapped:
        return bool(wrapped["booleanValue"])
    if "integerValue" in wrapped:
        return int(wrapped["integerValue"])
    if "doubleValue" in wrapped:
        return float(wrapped["doubleValue"])
    if "timestampValue" in wrapped:
        return parse_timestamp(str(wrapped["timestampValue"]))
    if "stringValue" in wrapped:
        return str(wrapped["stringValue"])
    if "bytesValue" in wrapped:
        return base64.b64decode(wrapped["bytesValue"])
    if "referenceValue" in wrapped:
        return str(wrapped["referenceValue"])
    if "geoPointValue" in wrapped:
        point = wrapped["geoPointValue"] or {}
        return {
            "latitude": float(point.get("latitude", 0.0)),
            "longitude": float(point.get("longitude", 0.0)),
        }
    if "arrayValue" in wrapped:
        values = (wrapped["arrayValue"] or {}).get("values", [])
        return [decode_value(item) for item in values]
    if "mapValue" in wrapped:
        return decode_fields((wrapped["mapValue"] or {}).get("fields", {}))
    raise ValueError(f"Unknown value type: {sorted(wrapped)}")


def decode_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


def encode_value(value: Any) -> dict[str, Any]:
    """Convert a Python value to its typed wrapper.

    Raises
    ------
    TypeError
        If the value has no store representation.
    """
    if value is None:
        return {"nullValue": None}
    # bool is a subclass of int and must be checked first.
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": format_timestamp(value)}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, (bytes, bytearray)):
        return {"bytesValue": base64.b64encode(bytes(value)).decode("ascii")}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    if isinstance(value, Mapping):
        return {"mapValue": {"fields": encode_fields(value)}}
    raise TypeError(f"Cannot encode {type(value).__name__} as a store value")


def encode_fields(values: Mapping[str, Any]) -> dict[str, Any]:
    return {str(key): encode_value(value) for key, value in values.items()}


def document_id(name: str) -> str:
    """Return the document id (last path segment) of a resource name."""
    return name.rsplit("/", 1)[-1]


def decode_document(document: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten a store document into ``{"id": ..., **fields}``.

    The document id wins over a field that happens to be called ``id``.
    """
    decoded = decode_fields(document.get("fields") or {})
    decoded["id"] = document_id(str(document.get("name", "")))
    return decoded
