"""callback_data: Compact Callback Payload Codec

A Python library for packing small, statically-declared records into short
delimiter-based strings and back. Designed for size-constrained transport
fields, particularly chat-bot inline-button callback data (64 bytes).

Key Features:
- Schema-driven compact text encoding (base-36 numbers, 22-character UUIDs)
- Optional fields with a single presence bitmask token
- Decode-time defaults that are never written to the payload
- Pydantic-based payload modeling
- Identifier-prefixed payloads for routing many callbacks through one field

Quick Start:
    >>> from callback_data import CallbackData
    >>>
    >>> vote = (
    ...     CallbackData("vote", max_bytes=64)
    ...     .number("poll_id")
    ...     .enum("choice", ["yes", "no", "abstain"])
    ...     .string("comment", optional=True)
    ... )
    >>> payload = vote.pack({"poll_id": 42, "choice": "no"})
    >>> if vote.filter(payload):
    ...     values = vote.unpack(payload)
"""

from __future__ import annotations

from .callback import (
    TELEGRAM_CALLBACK_DATA_LIMIT,
    CallbackData,
    callback_id,
    legacy_callback_id,
)
from .codec import MISSING, FieldSchema, FieldType, Schema, decode, encode
from .exceptions import (
    CallbackDataError,
    CallbackIdMismatch,
    DecodeError,
    EmptyStringValue,
    EncodeError,
    InvalidEnumIndex,
    InvalidEnumValue,
    MalformedPayload,
    MissingRequiredField,
    SchemaError,
    UnsupportedType,
)
from .models import CallbackModel
from .routing import CallbackRouter
from .utils import encoded_size, json_size, size_report

__version__ = "0.1.0"

__all__ = [
    # Core API
    "Schema",
    "FieldSchema",
    "FieldType",
    "MISSING",
    "encode",
    "decode",
    # Callbacks
    "CallbackData",
    "CallbackModel",
    "CallbackRouter",
    "callback_id",
    "legacy_callback_id",
    "TELEGRAM_CALLBACK_DATA_LIMIT",
    # Exceptions
    "CallbackDataError",
    "SchemaError",
    "UnsupportedType",
    "EncodeError",
    "MissingRequiredField",
    "EmptyStringValue",
    "InvalidEnumValue",
    "DecodeError",
    "MalformedPayload",
    "InvalidEnumIndex",
    "CallbackIdMismatch",
    # Sizing
    "encoded_size",
    "json_size",
    "size_report",
    # Version
    "__version__",
]
