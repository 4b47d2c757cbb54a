"""Named callback schemas with identifier-prefixed payloads.

A CallbackData pairs a Schema with a short identifier derived from a name.
Packed payloads are ``<id><codec body>``. The identifier has a fixed width,
so no separator is needed between it and the body. Payloads issued in the
older ``<legacy_id>|<json>`` format are still accepted by unpack().
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import re
from typing import TYPE_CHECKING, Any, Mapping, Sequence, Type

from .codec.decoder import decode
from .codec.encoder import encode
from .codec.schema import MISSING, FieldSchema, FieldType, Schema
from .exceptions import CallbackIdMismatch, EncodeError, MalformedPayload

if TYPE_CHECKING:
    from pydantic import BaseModel

logger = logging.getLogger(__name__)

ID_LENGTH = 6
LEGACY_SEPARATOR = "|"

# Telegram rejects inline-button callback data longer than this
TELEGRAM_CALLBACK_DATA_LIMIT = 64


def callback_id(name: str) -> str:
    """Derive the identifier prefixed to packed payloads.

    Args:
        name: Callback name

    Returns:
        First 6 characters of the unpadded URL-safe base-64 SHA-256 digest
    """
    digest = hashlib.sha256(name.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii")[:ID_LENGTH]


def legacy_callback_id(name: str) -> str:
    """Derive the identifier carried by payloads in the legacy JSON format."""
    return hashlib.md5(name.encode("utf-8")).hexdigest()[:ID_LENGTH]


class CallbackData:
    """Schema plus identifier for one kind of callback payload.

    Fields are added with the fluent builder methods. Build the schema once,
    before packing or unpacking anything; after that the object is read-only
    and safe to share between threads.

    Example:
        >>> votes = (
        ...     CallbackData("vote", max_bytes=TELEGRAM_CALLBACK_DATA_LIMIT)
        ...     .number("poll_id")
        ...     .enum("choice", ["yes", "no", "abstain"])
        ...     .string("comment", optional=True)
        ... )
        >>> payload = votes.pack({"poll_id": 42, "choice": "no"})
        >>> votes.filter(payload)
        True
        >>> votes.unpack(payload)
        {'poll_id': 42, 'choice': 'no'}

    Attributes:
        name: Name the identifiers are derived from
        id: Identifier prefixed to packed payloads
        legacy_id: Identifier of legacy ``<legacy_id>|<json>`` payloads
        schema: Field layout of the payload body
        max_bytes: Maximum UTF-8 size of a packed payload, or None
    """

    def __init__(
        self, name: str, *, schema: Schema | None = None, max_bytes: int | None = None
    ) -> None:
        """Initialize a callback.

        Args:
            name: Callback name, unique among callbacks routed together
            schema: Initial schema (empty if omitted)
            max_bytes: Maximum UTF-8 size of a packed payload
        """
        if max_bytes is not None and max_bytes <= ID_LENGTH:
            raise ValueError(f"max_bytes must exceed the identifier length, got {max_bytes}")

        self.name = name
        self.id = callback_id(name)
        self.legacy_id = legacy_callback_id(name)
        self.schema = schema if schema is not None else Schema()
        self.max_bytes = max_bytes

    @classmethod
    def from_schema(
        cls, name: str, schema: Schema, *, max_bytes: int | None = None
    ) -> CallbackData:
        """Create a callback around an existing schema."""
        return cls(name, schema=schema, max_bytes=max_bytes)

    @classmethod
    def from_model(
        cls,
        model_class: Type[BaseModel],
        *,
        name: str | None = None,
        max_bytes: int | None = None,
    ) -> CallbackData:
        """Create a callback whose schema is introspected from a Pydantic model.

        Args:
            model_class: Pydantic model class
            name: Callback name (defaults to the model class name)
            max_bytes: Maximum UTF-8 size of a packed payload
        """
        return cls(
            name or model_class.__name__,
            schema=Schema.from_model(model_class),
            max_bytes=max_bytes,
        )

    def __repr__(self) -> str:
        return f"CallbackData(name={self.name!r}, id={self.id!r}, schema={self.schema!r})"

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def _add(
        self,
        key: str,
        field_type: FieldType,
        *,
        optional: bool,
        default: Any,
        enum_values: Sequence[str] | None = None,
    ) -> CallbackData:
        field = FieldSchema(
            key=key,
            type=field_type,
            enum_values=enum_values,
            default=default,
        )
        if optional or field.has_default:
            self.schema = self.schema.append_optional(field)
        else:
            self.schema = self.schema.append_required(field)
        return self

    def string(self, key: str, *, optional: bool = False, default: Any = MISSING) -> CallbackData:
        """Add a string field. A field with a default is always optional."""
        return self._add(key, FieldType.STRING, optional=optional, default=default)

    def number(self, key: str, *, optional: bool = False, default: Any = MISSING) -> CallbackData:
        """Add a number field (int or float)."""
        return self._add(key, FieldType.NUMBER, optional=optional, default=default)

    def boolean(self, key: str, *, optional: bool = False, default: Any = MISSING) -> CallbackData:
        """Add a boolean field."""
        return self._add(key, FieldType.BOOLEAN, optional=optional, default=default)

    def uuid(self, key: str, *, optional: bool = False, default: Any = MISSING) -> CallbackData:
        """Add a UUID field."""
        return self._add(key, FieldType.UUID, optional=optional, default=default)

    def enum(
        self,
        key: str,
        values: Sequence[str],
        *,
        optional: bool = False,
        default: Any = MISSING,
    ) -> CallbackData:
        """Add an enum field whose members are encoded by index.

        Append new members at the end only; the index is what gets encoded.
        """
        return self._add(
            key, FieldType.ENUM, optional=optional, default=default, enum_values=values
        )

    # ------------------------------------------------------------------
    # Payloads
    # ------------------------------------------------------------------

    def pack(self, values: Mapping[str, Any] | None = None) -> str:
        """Encode values into an identifier-prefixed payload.

        Args:
            values: Mapping from field key to value

        Returns:
            ``<id><codec body>``

        Raises:
            EncodeError: If encoding fails or the payload exceeds max_bytes
        """
        payload = self.id + encode(self.schema, values or {})

        if self.max_bytes is not None:
            size = len(payload.encode("utf-8"))
            if size > self.max_bytes:
                raise EncodeError(
                    f"Packed {self.name} payload ({size} bytes) exceeds max_bytes={self.max_bytes}"
                )

        return payload

    def filter(self, payload: str) -> bool:
        """Check whether a payload was packed by this callback.

        Only the start of the payload is examined, so routing a payload never
        requires attempting a decode.
        """
        return payload.startswith(self.id) or payload.startswith(
            self.legacy_id + LEGACY_SEPARATOR
        )

    def regexp(self) -> re.Pattern[str]:
        """Return a compiled pattern equivalent to :meth:`filter`."""
        return re.compile(
            rf"^(?:{re.escape(self.id)}|{re.escape(self.legacy_id + LEGACY_SEPARATOR)})"
        )

    def unpack(self, payload: str) -> dict[str, Any]:
        """Decode a payload packed by this callback.

        Args:
            payload: Full payload including the identifier

        Returns:
            Decoded value map, with defaults filled in

        Raises:
            CallbackIdMismatch: If the payload belongs to another callback
            DecodeError: If the payload body is malformed
        """
        legacy_prefix = self.legacy_id + LEGACY_SEPARATOR
        if payload.startswith(legacy_prefix):
            logger.debug("Decoding legacy %s payload", self.name)
            return self._unpack_legacy(payload[len(legacy_prefix) :])

        if payload.startswith(self.id):
            return decode(self.schema, payload[len(self.id) :])

        raise CallbackIdMismatch(
            f"unpack called for {self.name!r} with a payload it did not pack: {payload!r}. "
            f"Check filter(payload) before unpacking."
        )

    @staticmethod
    def _unpack_legacy(body: str) -> dict[str, Any]:
        try:
            values = json.loads(body)
        except json.JSONDecodeError as e:
            raise MalformedPayload(f"Invalid legacy payload: {e}") from e

        if not isinstance(values, dict):
            raise MalformedPayload(
                f"Legacy payload must hold a JSON object, got {type(values).__name__}"
            )
        return values
