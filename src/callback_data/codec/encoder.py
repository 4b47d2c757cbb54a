"""Compact text encoder.

This module provides the encode() function that converts a value map to the
``;``-delimited token string described by a Schema.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..exceptions import (
    EmptyStringValue,
    EncodeError,
    InvalidEnumValue,
    MissingRequiredField,
    UnsupportedType,
)
from .schema import FieldSchema, FieldType, Schema
from .tokens import SEPARATOR, compress_uuid, encode_number, escape_string, to_base36


def encode(schema: Schema, values: Mapping[str, Any]) -> str:
    """Encode a value map to a compact token string.

    Required fields are written first, in order. If the schema declares any
    optional fields, a base-36 presence bitmask follows (always, even when it
    is zero), then the tokens of the optional fields that are present.
    Defaults are never written; the decoder fills them in.

    Args:
        schema: Schema describing the fields
        values: Mapping from field key to value. Optional keys may be absent.

    Returns:
        Tokens joined by ``;``

    Raises:
        MissingRequiredField: If a required key is absent
        EncodeError: If a value is invalid for its field, or a key is unknown

    Examples:
        ```python
        schema = Schema(
            required=[FieldSchema("id", FieldType.NUMBER)],
            optional=[
                FieldSchema("name", FieldType.STRING),
                FieldSchema("admin", FieldType.BOOLEAN),
            ],
        )

        encode(schema, {"id": 42, "admin": True})  # "16;2;1"
        ```
    """
    unknown = [key for key in values if key not in schema.keys]
    if unknown:
        raise EncodeError(f"Unknown field(s) for schema: {', '.join(sorted(unknown))}")

    tokens: list[str] = []

    for field_schema in schema.required:
        if field_schema.key not in values:
            raise MissingRequiredField(f"Field {field_schema.key} is required but missing")
        tokens.append(encode_value(field_schema, values[field_schema.key]))

    if schema.optional:
        bitmask = 0
        optional_tokens: list[str] = []
        for index, field_schema in enumerate(schema.optional):
            if field_schema.key in values:
                bitmask |= 1 << index
                optional_tokens.append(encode_value(field_schema, values[field_schema.key]))

        tokens.append(to_base36(bitmask))
        tokens.extend(optional_tokens)

    return SEPARATOR.join(tokens)


def encode_value(field_schema: FieldSchema, value: Any) -> str:
    """Encode a single field value to one token.

    Args:
        field_schema: Schema information for the field
        value: Field value to encode

    Returns:
        Token text (never contains ``;``)

    Raises:
        EncodeError: If value is invalid
    """
    # Boolean
    if field_schema.type is FieldType.BOOLEAN:
        if not isinstance(value, bool):
            raise EncodeError(
                f"Field {field_schema.key}: expected bool, got {type(value).__name__}"
            )
        return "1" if value else "0"

    # Number: base 36 for safe integers, shortest decimal otherwise
    if field_schema.type is FieldType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise EncodeError(
                f"Field {field_schema.key}: expected int or float, got {type(value).__name__}"
            )
        try:
            return encode_number(value)
        except ValueError as err:
            raise EncodeError(f"Field {field_schema.key}: {err}") from err

    # Enum: base-36 index of the member
    if field_schema.type is FieldType.ENUM:
        members = field_schema.enum_values or ()
        if not isinstance(value, str) or value not in members:
            raise InvalidEnumValue(
                f"Field {field_schema.key}: {value!r} not in {list(members)}"
            )
        return to_base36(members.index(value))

    # UUID: 16 raw bytes as 22 base-64 characters
    if field_schema.type is FieldType.UUID:
        try:
            return compress_uuid(value)
        except (TypeError, ValueError, AttributeError) as err:
            raise EncodeError(f"Field {field_schema.key}: invalid UUID {value!r}") from err

    # String
    if field_schema.type is FieldType.STRING:
        if not isinstance(value, str):
            raise EncodeError(
                f"Field {field_schema.key}: expected str, got {type(value).__name__}"
            )
        if not value:
            raise EmptyStringValue(
                f"Field {field_schema.key}: empty strings cannot be encoded; "
                f"omit an optional field instead"
            )
        return escape_string(value)

    # Unsupported type
    raise UnsupportedType(f"Field {field_schema.key}: unsupported type {field_schema.type!r}")
