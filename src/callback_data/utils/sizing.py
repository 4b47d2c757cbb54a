"""Payload size calculation utilities.

This module provides functions to measure encoded payloads and compare them
against a plain JSON encoding of the same values.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from ..callback import CallbackData
from ..codec.encoder import encode
from ..codec.schema import Schema


def encoded_size(schema_or_callback: Schema | CallbackData, values: Mapping[str, Any]) -> int:
    """Calculate the encoded size of a value map in bytes.

    A Schema is measured by its codec body alone. A CallbackData is measured
    by its full packed payload, identifier included.

    Args:
        schema_or_callback: Schema or callback to encode with
        values: Value map to encode

    Returns:
        Size in UTF-8 bytes

    Raises:
        EncodeError: If the values cannot be encoded

    Example:
        >>> encoded_size(schema, {"id": 42, "type": "admin"})
        6  # "16;1;0"
    """
    if isinstance(schema_or_callback, CallbackData):
        payload = schema_or_callback.pack(values)
    else:
        payload = encode(schema_or_callback, values)

    return len(payload.encode("utf-8"))


def json_size(values: Mapping[str, Any]) -> int:
    """Calculate the size of a compact JSON encoding of a value map in bytes.

    Example:
        >>> json_size({"id": 42})
        9  # '{"id":42}'
    """
    return len(
        json.dumps(dict(values), separators=(",", ":"), ensure_ascii=False, default=str).encode(
            "utf-8"
        )
    )


def size_report(
    schema_or_callback: Schema | CallbackData, values: Mapping[str, Any]
) -> dict[str, int]:
    """Compare the encoded size of a value map against JSON.

    Returns:
        Dictionary with ``encoded``, ``json`` and ``saved`` byte counts

    Example:
        >>> size_report(schema, {"id": 42, "type": "admin", "name": "Alice"})
        {'encoded': 12, 'json': 39, 'saved': 27}
    """
    encoded = encoded_size(schema_or_callback, values)
    baseline = json_size(values)
    return {"encoded": encoded, "json": baseline, "saved": baseline - encoded}
