"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from callback_data import FieldSchema, FieldType, Schema


@pytest.fixture
def user_schema() -> Schema:
    """Two required and two optional fields."""
    return Schema(
        required=[
            FieldSchema("id", FieldType.NUMBER),
            FieldSchema("type", FieldType.ENUM, enum_values=("user", "admin")),
        ],
        optional=[
            FieldSchema("name", FieldType.STRING),
            FieldSchema("status", FieldType.ENUM, enum_values=("active", "inactive")),
        ],
    )


@pytest.fixture
def profile_schema() -> Schema:
    """One field of every type, with defaults on some optional fields."""
    return Schema(
        required=[
            FieldSchema("name", FieldType.STRING),
            FieldSchema("age", FieldType.NUMBER),
            FieldSchema("is_admin", FieldType.BOOLEAN),
        ],
        optional=[
            FieldSchema("role", FieldType.ENUM, enum_values=("user", "moderator", "admin")),
            FieldSchema("session", FieldType.UUID),
            FieldSchema("page", FieldType.NUMBER, default=1),
            FieldSchema("notify", FieldType.BOOLEAN, default=True),
        ],
    )
