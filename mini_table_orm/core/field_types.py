"""Supported record field types and annotation resolution."""

from __future__ import annotations

import types
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Union, get_args, get_origin
from uuid import UUID

from .errors import UnsupportedTypeError
from .native import NativeKind


class FieldType(str, Enum):
    """Primitive field types a record may declare."""

    BOOLEAN = "bool"
    BYTES = "bytes"
    DATETIME = "datetime"
    DATETIME_OFFSET = "datetime_offset"
    DOUBLE = "double"
    UUID = "uuid"
    INT32 = "int32"
    INT64 = "int64"
    STRING = "string"

    @property
    def native_kind(self) -> NativeKind:
        """Native kind used to store values of this field type."""

        return _NATIVE_KINDS[self]


Int32 = Annotated[int, FieldType.INT32]
Int64 = Annotated[int, FieldType.INT64]
AwareDatetime = Annotated[datetime, FieldType.DATETIME_OFFSET]

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

_NATIVE_KINDS = {
    FieldType.BOOLEAN: NativeKind.BOOLEAN,
    FieldType.BYTES: NativeKind.BINARY,
    FieldType.DATETIME: NativeKind.DATETIME,
    FieldType.DATETIME_OFFSET: NativeKind.DATETIME,
    FieldType.DOUBLE: NativeKind.DOUBLE,
    FieldType.UUID: NativeKind.GUID,
    FieldType.INT32: NativeKind.INT32,
    FieldType.INT64: NativeKind.INT64,
    FieldType.STRING: NativeKind.STRING,
}

_PYTHON_TYPES: dict[type, FieldType] = {
    bool: FieldType.BOOLEAN,
    bytes: FieldType.BYTES,
    datetime: FieldType.DATETIME,
    float: FieldType.DOUBLE,
    UUID: FieldType.UUID,
    int: FieldType.INT64,
    str: FieldType.STRING,
}


def normalize_field_type(value: Any) -> FieldType:
    """Normalize a `FieldType`, its string value, or a Python type."""

    if isinstance(value, FieldType):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        if key in FieldType._value2member_map_:
            return FieldType(key)
        allowed = sorted(FieldType._value2member_map_.keys())
        raise UnsupportedTypeError(
            f"Unsupported field type: {value!r}. Supported: {allowed}"
        )
    if isinstance(value, type) and value in _PYTHON_TYPES:
        return _PYTHON_TYPES[value]
    raise UnsupportedTypeError(f"Unsupported field type: {value!r}.")


def infer_field_type(value: Any) -> FieldType:
    """Infer the field type of a runtime value."""

    if isinstance(value, bool):
        return FieldType.BOOLEAN
    if isinstance(value, (bytes, bytearray, memoryview)):
        return FieldType.BYTES
    if isinstance(value, datetime):
        if value.tzinfo is not None and value.utcoffset() is not None:
            return FieldType.DATETIME_OFFSET
        return FieldType.DATETIME
    if isinstance(value, float):
        return FieldType.DOUBLE
    if isinstance(value, UUID):
        return FieldType.UUID
    if isinstance(value, int):
        return FieldType.INT64
    if isinstance(value, str):
        return FieldType.STRING
    raise UnsupportedTypeError(
        f"The specified type {type(value).__name__!r} is not supported."
    )


def resolve_annotation(annotation: Any) -> tuple[FieldType, bool]:
    """Resolve a field annotation into its field type and nullability.

    `Optional[T]` marks the field nullable. `Annotated[T, FieldType.X]` selects
    the field type explicitly; otherwise the bare Python type decides.
    """

    base, nullable = _unwrap_optional(annotation)
    if get_origin(base) is Annotated:
        inner, *extras = get_args(base)
        for extra in extras:
            if isinstance(extra, FieldType):
                return extra, nullable
        base = inner
    return normalize_field_type(base), nullable


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    origin = get_origin(annotation)
    if origin not in {Union, types.UnionType}:
        return annotation, False

    all_args = get_args(annotation)
    args = [arg for arg in all_args if arg is not type(None)]
    if len(args) == 1 and len(all_args) == 2:
        return args[0], True
    raise UnsupportedTypeError(f"Unsupported union annotation: {annotation!r}.")
