"""Composite store key encoding and key part string conversion.

A store key is built from one or more key parts. Every part is first turned
into a canonical string, then percent-encoded with the delimiter character
escaped, and the encoded parts are joined with `KEY_DELIMITER`. Because an
encoded part can never contain the delimiter character, splitting a key back
into its parts is exact for any part content, including empty parts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, List, Sequence
from urllib.parse import quote_plus, unquote_plus
from uuid import UUID

from .errors import KeyFieldConversionError, MalformedKeyError, MissingValueError
from .field_types import (
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    FieldType,
    infer_field_type,
    normalize_field_type,
)

KEY_DELIMITER = "__"
KEY_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%SZ"

_DELIMITER_CHAR = "_"
_ESCAPED_DELIMITER_CHAR = "%5F"


def encode_key_part(part: str) -> str:
    """Percent-encode one key part so it never contains the delimiter."""

    if not isinstance(part, str):
        raise TypeError(f"Key parts must be strings, got {type(part).__name__}.")
    return quote_plus(part, safe="").replace(_DELIMITER_CHAR, _ESCAPED_DELIMITER_CHAR)


def decode_key_part(encoded: str) -> str:
    """Reverse `encode_key_part`."""

    return unquote_plus(encoded)


def assemble_key(parts: Sequence[str]) -> str:
    """Join canonical key part strings into one store key.

    Raises:
        ValueError: If `parts` is empty.
    """

    if isinstance(parts, str):
        raise TypeError("assemble_key() expects a sequence of strings, not a string.")
    if not parts:
        raise ValueError("A store key needs at least one part.")
    return KEY_DELIMITER.join(encode_key_part(part) for part in parts)


def disassemble_key(key: str, part_count: int) -> List[str]:
    """Split a store key back into exactly `part_count` decoded parts.

    Raises:
        MalformedKeyError: If the key does not hold exactly `part_count` parts.
    """

    if part_count < 1:
        raise ValueError("part_count must be >= 1")
    pieces = key.split(KEY_DELIMITER)
    if len(pieces) != part_count or any(_DELIMITER_CHAR in piece for piece in pieces):
        raise MalformedKeyError(
            f"Key {key!r} does not contain exactly {part_count} part(s)."
        )
    return [decode_key_part(piece) for piece in pieces]


def format_key_part(value: Any, field_type: Any = None) -> str:
    """Render a field value as its canonical key part string.

    Timestamps use a fixed, sortable UTC format without sub-second precision.
    Bytes render as lowercase hex; every other type uses `str()`.
    """

    if value is None:
        raise MissingValueError("Key fields cannot be None.")
    resolved = infer_field_type(value) if field_type is None else normalize_field_type(field_type)
    return _FORMATTERS[resolved](value)


def parse_key_part(text: str, field_type: Any) -> Any:
    """Parse a canonical key part string into a value of `field_type`.

    Raises:
        KeyFieldConversionError: If `text` is not a valid rendering.
    """

    resolved = normalize_field_type(field_type)
    try:
        return _PARSERS[resolved](text)
    except (ValueError, TypeError) as exc:
        raise KeyFieldConversionError(
            f"Cannot convert key part {text!r} to {resolved.value!r}."
        ) from exc


def build_key(values: Sequence[Any], field_types: Sequence[Any] | None = None) -> str:
    """Format typed values and assemble them into one store key."""

    if field_types is None:
        return assemble_key([format_key_part(value) for value in values])
    if len(field_types) != len(values):
        raise ValueError(
            f"Expected {len(field_types)} key value(s), got {len(values)}."
        )
    return assemble_key(
        [format_key_part(value, kind) for value, kind in zip(values, field_types)]
    )


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is not None and value.utcoffset() is not None:
        value = value.astimezone(timezone.utc)
    # strftime does not zero-pad years below 1000 on every platform.
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}Z"
    )


def _format_bytes(value: Any) -> str:
    return bytes(value).hex()


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"Invalid boolean literal {text!r}.")


def _parse_naive_datetime(text: str) -> datetime:
    return datetime.strptime(text, KEY_DATETIME_FORMAT)


def _parse_aware_datetime(text: str) -> datetime:
    return datetime.strptime(text, KEY_DATETIME_FORMAT).replace(tzinfo=timezone.utc)


def _int_parser(low: int, high: int) -> Callable[[str], int]:
    def parse(text: str) -> int:
        value = int(text)
        if not low <= value <= high:
            raise ValueError(f"Value {value} is out of range.")
        return value

    return parse


_FORMATTERS: dict[FieldType, Callable[[Any], str]] = {
    FieldType.BOOLEAN: str,
    FieldType.BYTES: _format_bytes,
    FieldType.DATETIME: _format_datetime,
    FieldType.DATETIME_OFFSET: _format_datetime,
    FieldType.DOUBLE: lambda value: repr(float(value)),
    FieldType.UUID: str,
    FieldType.INT32: lambda value: str(int(value)),
    FieldType.INT64: lambda value: str(int(value)),
    FieldType.STRING: str,
}

_PARSERS: dict[FieldType, Callable[[str], Any]] = {
    FieldType.BOOLEAN: _parse_bool,
    FieldType.BYTES: bytes.fromhex,
    FieldType.DATETIME: _parse_naive_datetime,
    FieldType.DATETIME_OFFSET: _parse_aware_datetime,
    FieldType.DOUBLE: float,
    FieldType.UUID: UUID,
    FieldType.INT32: _int_parser(INT32_MIN, INT32_MAX),
    FieldType.INT64: _int_parser(INT64_MIN, INT64_MAX),
    FieldType.STRING: str,
}
