"""Compact text decoder.

This module provides the decode() function that converts a token string back
to a value map using the same Schema that encoded it.
"""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import InvalidEnumIndex, MalformedPayload, UnsupportedType
from .schema import FieldSchema, FieldType, Schema
from .tokens import TokenReader, decode_number, expand_uuid, from_base36, unescape_string

logger = logging.getLogger(__name__)


def decode(schema: Schema, payload: str) -> dict[str, Any]:
    """Decode a compact token string to a value map.

    Absent optional fields take their default when one is declared. An absent
    optional field without a default is left out of the result.

    Args:
        schema: Schema the payload was encoded with
        payload: Token string (with any identifier prefix already removed)

    Returns:
        Mapping from field key to decoded value

    Raises:
        MalformedPayload: If the token count does not match the schema or a
            token is not well formed
        InvalidEnumIndex: If an enum index is outside the declared members

    Examples:
        ```python
        decode(schema, "16;2;1")  # {"id": 42, "admin": True}
        decode(schema, "16")      # MalformedPayload: bitmask token missing
        ```
    """
    reader = TokenReader(payload)
    result: dict[str, Any] = {}

    for field_schema in schema.required:
        result[field_schema.key] = _decode_next(reader, field_schema)

    bitmask = 0
    if schema.optional:
        token = _read(reader, "presence bitmask")
        try:
            bitmask = from_base36(token)
        except ValueError as e:
            raise MalformedPayload(f"Invalid presence bitmask {token!r}") from e
        if bitmask < 0 or bitmask >> len(schema.optional):
            raise MalformedPayload(
                f"Presence bitmask {token!r} does not fit {len(schema.optional)} optional field(s)"
            )

    for index, field_schema in enumerate(schema.optional):
        if bitmask & (1 << index):
            result[field_schema.key] = _decode_next(reader, field_schema)
        elif field_schema.has_default:
            result[field_schema.key] = field_schema.default
        else:
            logger.debug("Optional field %s absent and has no default", field_schema.key)

    if reader.remaining:
        raise MalformedPayload(
            f"Payload has {len(reader)} tokens but schema consumed {reader.position}"
        )

    return result


def _read(reader: TokenReader, what: str) -> str:
    try:
        return reader.read()
    except IndexError as e:
        raise MalformedPayload(f"Truncated payload while reading {what}: {e}") from e


def _decode_next(reader: TokenReader, field_schema: FieldSchema) -> Any:
    return decode_value(field_schema, _read(reader, f"field {field_schema.key}"))


def decode_value(field_schema: FieldSchema, token: str) -> Any:
    """Decode a single token for a field.

    Args:
        field_schema: Schema information for the field
        token: Token text

    Returns:
        Decoded field value

    Raises:
        MalformedPayload: If the token is not valid for the field type
        InvalidEnumIndex: If an enum index is out of range
    """
    # Boolean
    if field_schema.type is FieldType.BOOLEAN:
        return token == "1"

    # Number
    if field_schema.type is FieldType.NUMBER:
        try:
            return decode_number(token)
        except ValueError as e:
            raise MalformedPayload(f"Field {field_schema.key}: invalid number {token!r}") from e

    # Enum
    if field_schema.type is FieldType.ENUM:
        members = field_schema.enum_values or ()
        try:
            ordinal = from_base36(token)
        except ValueError as e:
            raise MalformedPayload(f"Field {field_schema.key}: invalid enum index {token!r}") from e

        if not 0 <= ordinal < len(members):
            raise InvalidEnumIndex(
                f"Field {field_schema.key}: invalid enum index {ordinal} "
                f"(only {len(members)} values)"
            )
        return members[ordinal]

    # UUID
    if field_schema.type is FieldType.UUID:
        try:
            return expand_uuid(token)
        except ValueError as e:
            raise MalformedPayload(f"Field {field_schema.key}: {e}") from e

    # String
    if field_schema.type is FieldType.STRING:
        if not token:
            raise MalformedPayload(f"Field {field_schema.key}: empty string token")
        try:
            return unescape_string(token)
        except ValueError as e:
            raise MalformedPayload(f"Field {field_schema.key}: {e}") from e

    # Unsupported type
    raise UnsupportedType(f"Field {field_schema.key}: unsupported type {field_schema.type!r}")
