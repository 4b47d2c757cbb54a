"""Schema model for the compact codec.

A schema is an ordered list of required fields followed by an ordered list of
optional fields. Positions in both lists are the contract between encoder and
decoder: the n-th required field is the n-th token, and the i-th optional
field owns bit i of the presence bitmask. Evolve a schema only by appending
optional fields at the end; reordering or removing fields breaks every
payload already issued.
"""

from __future__ import annotations

import enum
import types
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Tuple, Type, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from ..exceptions import SchemaError, UnsupportedType


class FieldType(str, enum.Enum):
    """Type tag of a schema field."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    UUID = "uuid"


class _Missing(enum.Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"


# No default declared. None, "", 0 and False are all legal defaults.
MISSING = _Missing.MISSING


@dataclass(frozen=True)
class FieldSchema:
    """Schema information for a single field.

    Attributes:
        key: Field name in the value map
        type: Field type tag
        enum_values: Ordered enum members (only for ENUM fields)
        default: Value filled in at decode time when an optional field is absent
    """

    key: str
    type: FieldType
    enum_values: Tuple[str, ...] | None = None
    default: Any = MISSING

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise SchemaError(f"Field key must be a non-empty string, got {self.key!r}")

        try:
            field_type = FieldType(self.type)
        except ValueError as err:
            raise UnsupportedType(f"Field {self.key}: unsupported type {self.type!r}") from err
        object.__setattr__(self, "type", field_type)

        if field_type is FieldType.ENUM:
            if isinstance(self.enum_values, str) or not self.enum_values:
                raise SchemaError(f"Field {self.key}: enum fields require a non-empty member list")
            members = tuple(self.enum_values)
            if not all(isinstance(member, str) for member in members):
                raise SchemaError(f"Field {self.key}: enum members must be strings")
            if len(set(members)) != len(members):
                raise SchemaError(f"Field {self.key}: duplicate enum members in {members}")
            object.__setattr__(self, "enum_values", members)
        elif self.enum_values is not None:
            raise SchemaError(f"Field {self.key}: enum_values given for {field_type.value} field")

        if self.has_default and not self.accepts(self.default):
            raise SchemaError(
                f"Field {self.key}: default {self.default!r} is not a valid "
                f"{field_type.value} value"
            )

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    def accepts(self, value: Any) -> bool:
        """Check that a value is of this field's semantic type.

        Args:
            value: Candidate value

        Returns:
            True if the encoder would accept the value's type
        """
        if self.type is FieldType.STRING:
            return isinstance(value, str)
        if self.type is FieldType.NUMBER:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        if self.type is FieldType.BOOLEAN:
            return isinstance(value, bool)
        if self.type is FieldType.ENUM:
            return isinstance(value, str) and value in (self.enum_values or ())
        if self.type is FieldType.UUID:
            if isinstance(value, uuid.UUID):
                return True
            if not isinstance(value, str):
                return False
            try:
                uuid.UUID(value)
            except ValueError:
                return False
            return True
        return False


class Schema:
    """Ordered required and optional field lists.

    Schemas are immutable. ``append_required`` and ``append_optional`` return
    new schemas so a schema already handed to the codec never changes.

    Example:
        >>> schema = Schema(
        ...     required=[FieldSchema("id", FieldType.NUMBER)],
        ...     optional=[FieldSchema("name", FieldType.STRING)],
        ... )
        >>> schema.keys
        ('id', 'name')
    """

    def __init__(
        self,
        required: Iterable[FieldSchema] = (),
        optional: Iterable[FieldSchema] = (),
    ) -> None:
        """Initialize a schema.

        Args:
            required: Fields that every value map must supply, in token order
            optional: Fields that may be omitted, in bitmask order

        Raises:
            SchemaError: If a field key appears more than once
        """
        self._required: Tuple[FieldSchema, ...] = tuple(required)
        self._optional: Tuple[FieldSchema, ...] = tuple(optional)

        seen: set[str] = set()
        for field in self.fields:
            if not isinstance(field, FieldSchema):
                raise SchemaError(f"Expected FieldSchema, got {type(field).__name__}")
            if field.key in seen:
                raise SchemaError(f"Duplicate field key: {field.key}")
            seen.add(field.key)

    @property
    def required(self) -> Tuple[FieldSchema, ...]:
        return self._required

    @property
    def optional(self) -> Tuple[FieldSchema, ...]:
        return self._optional

    @property
    def fields(self) -> Tuple[FieldSchema, ...]:
        """All fields, required first, in declaration order."""
        return self._required + self._optional

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(field.key for field in self.fields)

    def field(self, key: str) -> FieldSchema:
        """Look up a field by key.

        Raises:
            KeyError: If no field has that key
        """
        for field in self.fields:
            if field.key == key:
                return field
        raise KeyError(key)

    def append_required(self, field: FieldSchema) -> Schema:
        """Return a new schema with ``field`` appended to the required list."""
        return Schema(self._required + (field,), self._optional)

    def append_optional(self, field: FieldSchema) -> Schema:
        """Return a new schema with ``field`` appended to the optional list."""
        return Schema(self._required, self._optional + (field,))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self._required == other._required and self._optional == other._optional

    def __hash__(self) -> int:
        return hash((self._required, self._optional))

    def __repr__(self) -> str:
        return f"Schema(required={list(self._required)!r}, optional={list(self._optional)!r})"

    @classmethod
    def from_model(cls, model_class: Type[BaseModel]) -> Schema:
        """Create a schema by introspecting a Pydantic model.

        Fields keep their declaration order. A field is optional when its
        annotation is ``Optional[T]`` or when it declares a default.

        Args:
            model_class: Pydantic model class

        Returns:
            Schema instance

        Raises:
            UnsupportedType: If a field annotation has no codec type
            SchemaError: If a field is otherwise invalid
        """
        required: list[FieldSchema] = []
        optional: list[FieldSchema] = []

        # Pydantic v2 API
        for field_name, field_info in model_class.model_fields.items():
            field_schema, is_required = _extract_field_schema(field_name, field_info)
            if is_required:
                required.append(field_schema)
            else:
                optional.append(field_schema)

        return cls(required, optional)


def _extract_field_schema(name: str, field_info: FieldInfo) -> tuple[FieldSchema, bool]:
    """Extract schema information from a Pydantic FieldInfo.

    Args:
        name: Field name
        field_info: Pydantic FieldInfo object

    Returns:
        Tuple of (FieldSchema, whether the field is required)
    """
    annotation = field_info.annotation
    if annotation is None:
        raise SchemaError(f"Field {name} has no type annotation")

    # Check if Optional (Union[T, None] or T | None)
    is_optional = False
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        non_none_args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(non_none_args) != 1:
            raise SchemaError(f"Field {name}: complex Union types not supported")
        annotation = non_none_args[0]
        is_optional = True

    field_type, enum_values = _classify(name, annotation)

    default: Any = MISSING
    if field_info.default is not PydanticUndefined and field_info.default is not None:
        default = field_info.default
        if isinstance(default, enum.Enum):
            default = default.value
        elif isinstance(default, uuid.UUID):
            default = str(default)

    is_required = field_info.is_required() and not is_optional
    return (
        FieldSchema(key=name, type=field_type, enum_values=enum_values, default=default),
        is_required,
    )


def _classify(name: str, annotation: Any) -> tuple[FieldType, Tuple[str, ...] | None]:
    # bool is a subclass of int, so it goes first
    if annotation is bool:
        return FieldType.BOOLEAN, None
    if annotation is str:
        return FieldType.STRING, None
    if annotation is int or annotation is float:
        return FieldType.NUMBER, None
    if annotation is uuid.UUID:
        return FieldType.UUID, None

    if get_origin(annotation) is Literal:
        members = get_args(annotation)
        if not all(isinstance(member, str) for member in members):
            raise UnsupportedType(f"Field {name}: Literal members must be strings")
        return FieldType.ENUM, tuple(members)

    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        members = tuple(member.value for member in annotation)
        if not all(isinstance(member, str) for member in members):
            raise UnsupportedType(
                f"Field {name}: enum {annotation.__name__} must have string values"
            )
        return FieldType.ENUM, members

    raise UnsupportedType(
        f"Field {name}: unsupported type {annotation}. "
        f"Supported: str, int, float, bool, UUID, Literal[str, ...], str-valued Enum."
    )
