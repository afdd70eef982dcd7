"""Conversion between record field values and store-native values."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable
from uuid import UUID

from .errors import MissingValueError, UnsupportedTypeError
from .field_types import (
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    FieldType,
    infer_field_type,
    normalize_field_type,
)
from .native import NativeValue


def to_native(value: Any, field_type: Any = None) -> NativeValue:
    """Convert one field value into its native representation.

    Args:
        value: Field value.
        field_type: Declared `FieldType` (or its string/Python type form). When
            omitted the type is inferred from `value`.

    Raises:
        UnsupportedTypeError: If the value type is outside the supported set or
            does not match `field_type`.
        MissingValueError: If `value` is `None`.
        ValueError: If an integer does not fit the declared width.
    """

    if value is None:
        raise MissingValueError("Cannot convert None to a native value.")
    resolved = infer_field_type(value) if field_type is None else normalize_field_type(field_type)
    payload = _SERIALIZERS[resolved](value, resolved)
    return NativeValue(kind=resolved.native_kind, value=payload)


def from_native(native: NativeValue, target: Any) -> Any:
    """Convert a native value back into a value of the `target` field type.

    Raises:
        UnsupportedTypeError: If `target` is not a supported field type.
        MissingValueError: If `native` has no payload for the target's kind.
    """

    field_type = normalize_field_type(target)
    payload = native.slot(field_type.native_kind)
    if payload is None:
        raise MissingValueError(
            f"Native value of kind {native.kind.value} has no "
            f"{field_type.native_kind.value} payload for {field_type.value!r}."
        )
    return _DESERIALIZERS[field_type](payload)


def _require(value: Any, expected: type | tuple[type, ...], field_type: FieldType) -> None:
    if isinstance(value, bool) and field_type is not FieldType.BOOLEAN:
        raise UnsupportedTypeError(
            f"Field type {field_type.value!r} cannot store a bool value."
        )
    if not isinstance(value, expected):
        raise UnsupportedTypeError(
            f"Field type {field_type.value!r} cannot store {type(value).__name__!r}."
        )


def _serialize_bool(value: Any, field_type: FieldType) -> bool:
    _require(value, bool, field_type)
    return value


def _serialize_bytes(value: Any, field_type: FieldType) -> bytes:
    _require(value, (bytes, bytearray, memoryview), field_type)
    return bytes(value)


def _serialize_datetime(value: Any, field_type: FieldType) -> datetime:
    _require(value, datetime, field_type)
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _serialize_double(value: Any, field_type: FieldType) -> float:
    _require(value, (float, int), field_type)
    return float(value)


def _serialize_uuid(value: Any, field_type: FieldType) -> UUID:
    _require(value, UUID, field_type)
    return value


def _serialize_int(value: Any, field_type: FieldType) -> int:
    _require(value, int, field_type)
    low, high = (
        (INT32_MIN, INT32_MAX) if field_type is FieldType.INT32 else (INT64_MIN, INT64_MAX)
    )
    if not low <= value <= high:
        raise ValueError(f"Value {value} is out of range for {field_type.value!r}.")
    return int(value)


def _serialize_string(value: Any, field_type: FieldType) -> str:
    _require(value, str, field_type)
    return value


def _deserialize_naive_datetime(payload: datetime) -> datetime:
    # The stored offset is discarded, not applied.
    return payload.replace(tzinfo=None)


def _deserialize_aware_datetime(payload: datetime) -> datetime:
    if payload.tzinfo is None:
        return payload.replace(tzinfo=timezone.utc)
    return payload


def _deserialize_uuid(payload: Any) -> UUID:
    return payload if isinstance(payload, UUID) else UUID(str(payload))


_SERIALIZERS: dict[FieldType, Callable[[Any, FieldType], Any]] = {
    FieldType.BOOLEAN: _serialize_bool,
    FieldType.BYTES: _serialize_bytes,
    FieldType.DATETIME: _serialize_datetime,
    FieldType.DATETIME_OFFSET: _serialize_datetime,
    FieldType.DOUBLE: _serialize_double,
    FieldType.UUID: _serialize_uuid,
    FieldType.INT32: _serialize_int,
    FieldType.INT64: _serialize_int,
    FieldType.STRING: _serialize_string,
}

_DESERIALIZERS: dict[FieldType, Callable[[Any], Any]] = {
    FieldType.BOOLEAN: bool,
    FieldType.BYTES: bytes,
    FieldType.DATETIME: _deserialize_naive_datetime,
    FieldType.DATETIME_OFFSET: _deserialize_aware_datetime,
    FieldType.DOUBLE: float,
    FieldType.UUID: _deserialize_uuid,
    FieldType.INT32: int,
    FieldType.INT64: int,
    FieldType.STRING: str,
}
