"""Compact text codec for callback_data.

This module provides schema-driven encoding and decoding of small records to
short ``;``-delimited strings.
"""

from __future__ import annotations

from .decoder import decode, decode_value
from .encoder import encode, encode_value
from .schema import MISSING, FieldSchema, FieldType, Schema

__all__ = [
    "encode",
    "encode_value",
    "decode",
    "decode_value",
    "Schema",
    "FieldSchema",
    "FieldType",
    "MISSING",
]
