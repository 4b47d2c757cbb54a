"""Token-level primitives for the compact text codec.

Every field value becomes exactly one token, and tokens are joined with a
single ``;``. This module provides the conversions used to build and read
those tokens: signed base-36 integers, numbers, reserved-character escaping
for strings, and the fixed 22-character UUID form.
"""

from __future__ import annotations

import base64
import math
import re
import uuid

SEPARATOR = ";"
ESCAPE = "\\"

# Largest integer a double represents exactly, and every integer below it
MAX_SAFE_INTEGER = 2**53 - 1

UUID_TOKEN_LENGTH = 22

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_BASE36_PATTERN = re.compile(r"-?[0-9a-z]+")
_DECIMAL_PATTERN = re.compile(r"-?[0-9]+(?:\.[0-9]+)?(?:e[+-][0-9]+)?")
_UUID_TOKEN_PATTERN = re.compile(r"[A-Za-z0-9_-]{%d}" % UUID_TOKEN_LENGTH)

_RESERVED_PATTERN = re.compile(r"[;\\=]")
_ESCAPES = {";": "\\s", "\\": "\\\\", "=": "\\e"}
_UNESCAPES = {"s": ";", "\\": "\\", "e": "="}


def to_base36(value: int) -> str:
    """Render an integer as a signed, lowercase base-36 numeral.

    Args:
        value: Integer to render

    Returns:
        Base-36 numeral with no leading zeros (``"0"`` for zero)

    Example:
        >>> to_base36(30)
        'u'
        >>> to_base36(-36)
        '-10'
    """
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    value = abs(value)

    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])

    return sign + "".join(reversed(digits))


def is_base36(token: str) -> bool:
    """Check whether a token is a signed lowercase base-36 numeral."""
    return _BASE36_PATTERN.fullmatch(token) is not None


def from_base36(token: str) -> int:
    """Parse a signed lowercase base-36 numeral.

    Raises:
        ValueError: If the token is not a base-36 numeral
    """
    # int() alone would also accept whitespace, '+', '_' and uppercase
    if not is_base36(token):
        raise ValueError(f"not a base-36 integer: {token!r}")
    return int(token, 36)


def is_safe_integer(value: int | float) -> bool:
    """Check whether a number is an integer a double holds without loss."""
    if isinstance(value, float) and not value.is_integer():
        return False
    return -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER


def encode_number(value: int | float) -> str:
    """Encode a number as a token.

    Safe integers (including integral floats) are written in base 36. Any
    other finite value is written as the shortest decimal that round-trips
    through a double, which always contains a ``.``, ``e+`` or ``e-`` and so
    never looks like a base-36 numeral.

    Raises:
        ValueError: If the value is not finite, or is an integer outside the
            safe range that a double cannot hold exactly
    """
    if is_safe_integer(value):
        return to_base36(int(value))

    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"cannot encode non-finite number {value!r}")

    try:
        as_float = float(value)
    except OverflowError as err:
        raise ValueError(f"integer {value} is too large to encode") from err

    if isinstance(value, int) and int(as_float) != value:
        raise ValueError(f"integer {value} cannot be represented exactly")

    return repr(as_float)


def decode_number(token: str) -> int | float:
    """Decode a number token produced by :func:`encode_number`.

    Raises:
        ValueError: If the token is neither base 36 nor a finite decimal
    """
    if is_base36(token):
        return int(token, 36)

    # float() alone would also accept whitespace, '_', '+' and 'Infinity'
    if _DECIMAL_PATTERN.fullmatch(token) is None:
        raise ValueError(f"not a number token: {token!r}")

    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"non-finite number token {token!r}")
    return value


def escape_string(value: str) -> str:
    """Escape the reserved characters ``;``, ``\\`` and ``=``.

    Strings without reserved characters are returned unchanged.

    Example:
        >>> escape_string("a;b=c")
        'a\\\\sb\\\\ec'
    """
    if _RESERVED_PATTERN.search(value) is None:
        return value
    return _RESERVED_PATTERN.sub(lambda match: _ESCAPES[match.group()], value)


def unescape_string(token: str) -> str:
    """Reverse :func:`escape_string`.

    Raises:
        ValueError: On an unknown or truncated escape sequence
    """
    if ESCAPE not in token:
        return token

    chars: list[str] = []
    position = 0
    while position < len(token):
        char = token[position]
        if char != ESCAPE:
            chars.append(char)
            position += 1
            continue

        code = token[position + 1 : position + 2]
        if code not in _UNESCAPES:
            raise ValueError(f"invalid escape sequence at offset {position} in {token!r}")
        chars.append(_UNESCAPES[code])
        position += 2

    return "".join(chars)


def compress_uuid(value: str | uuid.UUID) -> str:
    """Encode a UUID as 22 characters of unpadded URL-safe base 64.

    Raises:
        ValueError: If the value is not a valid UUID
    """
    parsed = value if isinstance(value, uuid.UUID) else uuid.UUID(value)
    return base64.urlsafe_b64encode(parsed.bytes).decode("ascii").rstrip("=")


def expand_uuid(token: str) -> str:
    """Decode a 22-character UUID token to its lowercase canonical form.

    Raises:
        ValueError: If the token is not a valid UUID token
    """
    if _UUID_TOKEN_PATTERN.fullmatch(token) is None:
        raise ValueError(
            f"UUID token must be {UUID_TOKEN_LENGTH} URL-safe base-64 characters, got {token!r}"
        )
    raw = base64.urlsafe_b64decode(token + "==")
    return str(uuid.UUID(bytes=raw))


class TokenReader:
    """Reads tokens from a payload one at a time.

    An empty payload holds no tokens at all, which is what a schema without
    fields encodes to.

    Example:
        >>> reader = TokenReader("u;1")
        >>> reader.read()
        'u'
        >>> reader.remaining
        1
    """

    def __init__(self, payload: str) -> None:
        """Initialize the reader.

        Args:
            payload: Encoded payload body (no identifier prefix)
        """
        self._tokens = payload.split(SEPARATOR) if payload else []
        self._position = 0

    @property
    def position(self) -> int:
        """Number of tokens consumed so far."""
        return self._position

    @property
    def remaining(self) -> int:
        """Number of tokens not yet consumed."""
        return len(self._tokens) - self._position

    def __len__(self) -> int:
        return len(self._tokens)

    def read(self) -> str:
        """Consume and return the next token.

        Raises:
            IndexError: If no tokens remain
        """
        if self._position >= len(self._tokens):
            raise IndexError(
                f"expected more than {len(self._tokens)} token(s) in payload"
            )
        token = self._tokens[self._position]
        self._position += 1
        return token
