"""Property-based tests using hypothesis."""

from __future__ import annotations

import uuid
from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from callback_data import FieldSchema, FieldType, Schema, decode, encode, encoded_size, json_size
from callback_data.codec.tokens import MAX_SAFE_INTEGER

ROLES = ("user", "moderator", "admin")

SCHEMA = Schema(
    required=[
        FieldSchema("name", FieldType.STRING),
        FieldSchema("count", FieldType.NUMBER),
        FieldSchema("ratio", FieldType.NUMBER),
        FieldSchema("active", FieldType.BOOLEAN),
    ],
    optional=[
        FieldSchema("role", FieldType.ENUM, enum_values=ROLES),
        FieldSchema("ref", FieldType.UUID),
        FieldSchema("note", FieldType.STRING, default="none"),
        FieldSchema("page", FieldType.NUMBER, default=1),
    ],
)

safe_integers = st.integers(min_value=-MAX_SAFE_INTEGER, max_value=MAX_SAFE_INTEGER)
finite_floats = st.floats(allow_nan=False, allow_infinity=False)
non_empty_text = st.text(min_size=1)

values_strategy = st.fixed_dictionaries(
    {
        "name": non_empty_text,
        "count": safe_integers,
        "ratio": finite_floats,
        "active": st.booleans(),
    },
    optional={
        "role": st.sampled_from(ROLES),
        "ref": st.uuids().map(str),
        "note": non_empty_text,
        "page": safe_integers,
    },
)


def _with_defaults(values: dict[str, Any]) -> dict[str, Any]:
    expected = {
        field.key: field.default
        for field in SCHEMA.optional
        if field.has_default and field.key not in values
    }
    expected.update(values)
    return expected


class TestCodecProperties:
    """Property-based tests for codec."""

    @given(values=values_strategy)
    def test_encode_decode_roundtrip(self, values: dict[str, Any]) -> None:
        """Test decode(encode(v)) is v plus defaults for absent fields."""
        decoded = decode(SCHEMA, encode(SCHEMA, values))

        assert decoded == _with_defaults(values)

    @given(values=values_strategy)
    def test_encode_deterministic(self, values: dict[str, Any]) -> None:
        """Test encoding is deterministic."""
        assert encode(SCHEMA, values) == encode(SCHEMA, dict(values))

    @given(values=values_strategy)
    def test_token_count(self, values: dict[str, Any]) -> None:
        """Test one token per required field, bitmask, and present optional field."""
        present = sum(1 for field in SCHEMA.optional if field.key in values)

        tokens = encode(SCHEMA, values).split(";")

        assert len(tokens) == len(SCHEMA.required) + 1 + present

    @given(text=st.text(alphabet=";\\=ab", min_size=1))
    def test_reserved_characters_roundtrip(self, text: str) -> None:
        """Test strings made of reserved characters survive."""
        schema = Schema(required=[FieldSchema("text", FieldType.STRING)])

        data = encode(schema, {"text": text})

        assert ";" not in data
        assert decode(schema, data) == {"text": text}

    @given(value=finite_floats)
    def test_float_bit_exact(self, value: float) -> None:
        """Test floats decode to the identical double."""
        schema = Schema(required=[FieldSchema("n", FieldType.NUMBER)])

        decoded = decode(schema, encode(schema, {"n": value}))["n"]

        assert float(decoded) == value

    @given(value=safe_integers)
    def test_integers_use_base36(self, value: int) -> None:
        """Test safe integers are written as base-36 numerals."""
        schema = Schema(required=[FieldSchema("n", FieldType.NUMBER)])

        data = encode(schema, {"n": value})

        assert int(data, 36) == value
        assert len(data) <= len(str(value))

    @given(
        count=st.integers(min_value=0, max_value=10**6),
        name=st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=5),
        active=st.booleans(),
        role=st.sampled_from(ROLES),
    )
    def test_smaller_than_json(self, count: int, name: str, active: bool, role: str) -> None:
        """Test short records encode smaller than JSON."""
        values = {"name": name, "count": count, "ratio": 0.5, "active": active, "role": role}

        assert encoded_size(SCHEMA, values) < json_size(values)


class TestUuidProperties:
    """UUID fidelity across generation schemes."""

    def test_mixed_uuid_versions(self) -> None:
        schema = Schema(required=[FieldSchema("id", FieldType.UUID)])
        uuids = [str(uuid.uuid4()) if i % 2 == 0 else str(uuid.uuid1()) for i in range(50)]

        for value in uuids:
            data = encode(schema, {"id": value})

            assert len(data) == 22
            assert decode(schema, data) == {"id": value}

    @given(value=st.uuids())
    def test_any_uuid(self, value: uuid.UUID) -> None:
        schema = Schema(required=[FieldSchema("id", FieldType.UUID)])

        data = encode(schema, {"id": value})

        assert len(data) == 22
        assert decode(schema, data) == {"id": str(value)}
