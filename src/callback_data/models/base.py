"""Pydantic base class for callback payloads.

This module provides the CallbackModel class. Subclasses declare their fields
with ordinary Pydantic annotations and get pack/unpack/filter for free.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from ..callback import CallbackData
from ..exceptions import DecodeError, EncodeError

T = TypeVar("T", bound="CallbackModel")


class CallbackModel(BaseModel):
    """Base class for callback payload models.

    Field order matters: required fields (no default, not Optional) are
    encoded in declaration order, then optional fields in declaration order.
    Add new fields only as optional fields at the end of the class.

    callback_data-specific options are configured as ClassVar attributes:

    Example:
        >>> from typing import ClassVar, Literal, Optional
        >>> class Vote(CallbackModel):
        ...     poll_id: int
        ...     choice: Literal["yes", "no", "abstain"]
        ...     comment: Optional[str] = None
        ...
        ...     callback_name: ClassVar[Optional[str]] = "vote"
        ...     callback_max_bytes: ClassVar[Optional[int]] = 64
        >>> payload = Vote(poll_id=42, choice="no").pack()
        >>> Vote.unpack(payload)
        Vote(poll_id=42, choice='no', comment=None)

    Attributes:
        callback_name: Name the identifier is derived from (defaults to the class name)
        callback_max_bytes: Maximum packed payload size in bytes (optional)
    """

    model_config = ConfigDict(
        # Forbid extra fields not defined in schema
        extra="forbid",
        # Validate on assignment
        validate_assignment=True,
    )

    callback_name: ClassVar[str | None] = None
    callback_max_bytes: ClassVar[int | None] = None

    @classmethod
    def callback_data(cls) -> CallbackData:
        """Return the CallbackData built from this model (cached per class)."""
        return _callback_for(cls)

    @classmethod
    def filter(cls, payload: str) -> bool:
        """Check whether a payload was packed by this model."""
        return cls.callback_data().filter(payload)

    @classmethod
    def unpack(cls: type[T], payload: str) -> T:
        """Decode a payload into a validated model instance.

        Optional fields declared without a default are absent from the
        payload when they were None, and are restored to None here.

        Raises:
            DecodeError: If the payload cannot be decoded or fails validation
        """
        callback = cls.callback_data()
        values = callback.unpack(payload)

        optional_keys = {field.key for field in callback.schema.optional}
        for name, field_info in cls.model_fields.items():
            if name not in values and name in optional_keys and field_info.is_required():
                values[name] = None

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise DecodeError(f"Failed to construct {cls.__name__}: {e}") from e

    def pack(self) -> str:
        """Encode this instance into an identifier-prefixed payload.

        Fields left unset are omitted and decode back to their defaults.
        Fields set to None are omitted too, which is only allowed where None
        is what they decode back to.

        Raises:
            EncodeError: If a field with a non-None default is set to None,
                or encoding fails
        """
        dumped: dict[str, Any] = self.model_dump(mode="json", exclude_unset=True)

        values: dict[str, Any] = {}
        for key, value in dumped.items():
            if value is not None:
                values[key] = value
                continue

            field_info = type(self).model_fields[key]
            if not field_info.is_required() and field_info.default is not None:
                raise EncodeError(
                    f"Field {key}: None cannot be packed, it would decode to the default"
                )

        return type(self).callback_data().pack(values)


@lru_cache(maxsize=None)
def _callback_for(model_class: type[CallbackModel]) -> CallbackData:
    return CallbackData.from_model(
        model_class,
        name=model_class.callback_name or model_class.__name__,
        max_bytes=model_class.callback_max_bytes,
    )
