"""Exception hierarchy for callback_data.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from CallbackDataError for easy catching of any
callback_data-specific error.
"""

from __future__ import annotations


class CallbackDataError(Exception):
    """Base exception for all callback_data errors."""

    pass


class SchemaError(CallbackDataError):
    """Raised when a callback schema is invalid.

    Examples:
        - Duplicate field keys across required and optional lists
        - Enum field without members, or members on a non-enum field
        - Default value that does not match the field type
    """

    pass


class UnsupportedType(SchemaError):
    """Raised for an unrecognized field type tag or model annotation.

    This is a programming error made while building a schema, not a data error.
    """

    pass


class EncodeError(CallbackDataError):
    """Raised when encoding a value map fails.

    Examples:
        - Field value of the wrong Python type
        - Unknown key in the value map
        - Non-finite number
        - Packed payload exceeds max_bytes
    """

    pass


class MissingRequiredField(EncodeError):
    """Raised when a required field key is absent from the value map."""

    pass


class EmptyStringValue(EncodeError):
    """Raised when a string field is given the empty string."""

    pass


class InvalidEnumValue(EncodeError):
    """Raised when an enum field value is not one of the declared members."""

    pass


class DecodeError(CallbackDataError):
    """Raised when decoding a payload fails.

    Examples:
        - Truncated payload (too few tokens)
        - Trailing tokens left after all fields were read
        - Invalid token syntax (bad escape, bad UUID token)
    """

    pass


class MalformedPayload(DecodeError):
    """Raised when the payload does not match the schema's token layout."""

    pass


class InvalidEnumIndex(DecodeError):
    """Raised when a decoded enum index is outside the declared members."""

    pass


class CallbackIdMismatch(DecodeError):
    """Raised when a payload is not addressed to the callback decoding it."""

    pass
