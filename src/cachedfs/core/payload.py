from __future__ import annotations

"""
Write Payload Coercion.

Converts the values accepted by write and append operations into the
bytes handed to the OS.
"""

import json
import traceback
from datetime import date
from typing import Any

from cachedfs.domain.errors import InvalidArgumentError


def coerce_payload(value: Any) -> bytes:
    """
    Convert a write payload to bytes.

    - bytes / bytearray / memoryview: used as is.
    - str: UTF-8 encoded.
    - list / tuple of str, bytes or numbers: each part converted and joined.
    - exceptions: their formatted traceback.
    - date / datetime: ISO 8601 text.
    - anything else JSON-serializable: its JSON text.

    Raises:
        InvalidArgumentError: For None or unserializable values.
    """
    if value is None:
        raise InvalidArgumentError("Invalid write payload: None")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (list, tuple)) and value and all(_is_part(v) for v in value):
        return b"".join(_part_bytes(v) for v in value)
    if isinstance(value, BaseException):
        text = "".join(traceback.format_exception(type(value), value, value.__traceback__))
        return text.encode("utf-8")
    if isinstance(value, date):
        return value.isoformat().encode("utf-8")

    try:
        return json.dumps(value, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f"Unknown write payload of type {type(value).__name__}: {e}",
            details={"type": type(value).__name__},
        )


def _is_part(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    return isinstance(v, (str, bytes, bytearray, int, float))


def _part_bytes(v: Any) -> bytes:
    if isinstance(v, (bytes, bytearray)):
        return bytes(v)
    if isinstance(v, str):
        return v.encode("utf-8")
    return json.dumps(v).encode("utf-8")
