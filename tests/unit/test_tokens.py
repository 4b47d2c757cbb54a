"""Unit tests for token primitives."""

from __future__ import annotations

import uuid

import pytest

from callback_data.codec.tokens import (
    MAX_SAFE_INTEGER,
    TokenReader,
    compress_uuid,
    decode_number,
    encode_number,
    escape_string,
    expand_uuid,
    from_base36,
    is_safe_integer,
    to_base36,
    unescape_string,
)


class TestBase36:
    """Test base-36 integer rendering."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0, "0"), (1, "1"), (30, "u"), (35, "z"), (36, "10"), (42, "16"), (-36, "-10")],
    )
    def test_to_base36(self, value: int, expected: str) -> None:
        assert to_base36(value) == expected
        assert from_base36(expected) == value

    def test_max_safe_integer(self) -> None:
        assert from_base36(to_base36(MAX_SAFE_INTEGER)) == MAX_SAFE_INTEGER
        assert from_base36(to_base36(-MAX_SAFE_INTEGER)) == -MAX_SAFE_INTEGER

    @pytest.mark.parametrize("token", ["", "-", "U", "+1", " 1", "1_0", "1.5", "a-b"])
    def test_rejects_non_base36(self, token: str) -> None:
        with pytest.raises(ValueError):
            from_base36(token)


class TestNumbers:
    """Test number token encoding."""

    def test_safe_integer_detection(self) -> None:
        assert is_safe_integer(0)
        assert is_safe_integer(3.0)
        assert is_safe_integer(MAX_SAFE_INTEGER)
        assert not is_safe_integer(MAX_SAFE_INTEGER + 1)
        assert not is_safe_integer(0.5)
        assert not is_safe_integer(float("nan"))
        assert not is_safe_integer(float("inf"))

    def test_integers_use_base36(self) -> None:
        assert encode_number(30) == "u"
        assert encode_number(-30) == "-u"
        assert encode_number(3.0) == "3"

    def test_float_keeps_full_precision(self) -> None:
        value = 0.1 + 0.2
        token = encode_number(value)

        assert token == "0.30000000000000004"
        assert decode_number(token) == value
        assert decode_number(token) != 0.3

    def test_large_float_is_not_mistaken_for_base36(self) -> None:
        token = encode_number(1e20)
        assert token == "1e+20"
        assert decode_number(token) == 1e20

    def test_small_negative_exponent(self) -> None:
        token = encode_number(-1e-7)
        assert decode_number(token) == -1e-7

    def test_unsafe_integer_exact_as_float(self) -> None:
        token = encode_number(2**60)
        assert decode_number(token) == 2**60

    def test_unsafe_integer_inexact_rejected(self) -> None:
        with pytest.raises(ValueError, match="exactly"):
            encode_number(2**53 + 1)

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_rejected(self, value: float) -> None:
        with pytest.raises(ValueError, match="non-finite"):
            encode_number(value)

    @pytest.mark.parametrize("token", ["", "1.2.3", "1e999", "A"])
    def test_invalid_tokens(self, token: str) -> None:
        with pytest.raises(ValueError):
            decode_number(token)

    @pytest.mark.parametrize(
        "token", [" 1.5", "1.5 ", "1_0.5", "+1.5", "1.5E+10", "-.5", "1e+999"]
    )
    def test_only_canonical_decimals_accepted(self, token: str) -> None:
        with pytest.raises(ValueError):
            decode_number(token)


class TestStringEscaping:
    """Test reserved character escaping."""

    def test_plain_string_unchanged(self) -> None:
        assert escape_string("Alice") == "Alice"
        assert escape_string("Привет | мир") == "Привет | мир"

    def test_reserved_characters(self) -> None:
        assert escape_string(";") == "\\s"
        assert escape_string("=") == "\\e"
        assert escape_string("\\") == "\\\\"
        assert escape_string("a;b\\c=d") == "a\\sb\\\\c\\ed"

    def test_unescape_reverses_escape(self) -> None:
        for value in ["a;b\\c=d", "\\s", "\\\\s", ";;==\\\\", "x"]:
            escaped = escape_string(value)
            assert ";" not in escaped
            assert unescape_string(escaped) == value

    @pytest.mark.parametrize("token", ["bad\\x", "trailing\\"])
    def test_invalid_escape(self, token: str) -> None:
        with pytest.raises(ValueError, match="invalid escape"):
            unescape_string(token)


class TestUuid:
    """Test UUID compaction."""

    def test_nil_uuid(self) -> None:
        assert compress_uuid("00000000-0000-0000-0000-000000000000") == "A" * 22

    def test_roundtrip(self) -> None:
        value = str(uuid.uuid4())
        token = compress_uuid(value)

        assert len(token) == 22
        assert expand_uuid(token) == value

    def test_accepts_uuid_instance(self) -> None:
        value = uuid.uuid4()
        assert expand_uuid(compress_uuid(value)) == str(value)

    def test_uppercase_input_decodes_lowercase(self) -> None:
        value = "6FA459EA-EE8A-3CA4-894E-DB77E160355E"
        assert expand_uuid(compress_uuid(value)) == value.lower()

    def test_invalid_uuid(self) -> None:
        with pytest.raises(ValueError):
            compress_uuid("not-a-uuid")

    @pytest.mark.parametrize("token", ["short", "A" * 23, "A" * 21 + "=", "A" * 21 + "+"])
    def test_invalid_token(self, token: str) -> None:
        with pytest.raises(ValueError):
            expand_uuid(token)


class TestTokenReader:
    """Test sequential token reading."""

    def test_empty_payload_has_no_tokens(self) -> None:
        reader = TokenReader("")
        assert len(reader) == 0
        with pytest.raises(IndexError):
            reader.read()

    def test_read_in_order(self) -> None:
        reader = TokenReader("a;b;c")
        assert reader.read() == "a"
        assert reader.read() == "b"
        assert reader.position == 2
        assert reader.remaining == 1

    def test_empty_tokens_preserved(self) -> None:
        reader = TokenReader("a;;")
        assert len(reader) == 3
