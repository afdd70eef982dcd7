"""Continuation token encoding for paged range scans."""

from __future__ import annotations

from typing import Optional, Tuple

from .errors import MalformedCursorError, MalformedKeyError
from .keys import assemble_key, disassemble_key
from .table_types import ContinuationCursor


def encode_cursor(cursor: ContinuationCursor | Tuple[str, str]) -> str:
    """Serialize a continuation cursor into one URL-safe token.

    The two store keys are joined by the key delimiter. Each key is escaped
    like a key part first, so multi-part keys keep the token splittable.
    """

    if isinstance(cursor, ContinuationCursor):
        partition_key, row_key = cursor.next_partition_key, cursor.next_row_key
    else:
        partition_key, row_key = cursor
    return assemble_key([partition_key, row_key])


def decode_cursor(token: str) -> ContinuationCursor:
    """Parse a token produced by `encode_cursor`.

    Raises:
        MalformedCursorError: If the token does not hold exactly two keys.
    """

    if not isinstance(token, str):
        raise MalformedCursorError(
            f"Continuation token must be a string, got {type(token).__name__}."
        )
    try:
        partition_key, row_key = disassemble_key(token, 2)
    except MalformedKeyError as exc:
        raise MalformedCursorError(f"Malformed continuation token {token!r}.") from exc
    return ContinuationCursor(next_partition_key=partition_key, next_row_key=row_key)


def encode_optional_cursor(cursor: Optional[ContinuationCursor]) -> Optional[str]:
    """Encode a cursor, passing `None` (scan exhausted) through."""

    return None if cursor is None else encode_cursor(cursor)


def decode_optional_cursor(token: Optional[str]) -> Optional[ContinuationCursor]:
    """Decode a token, passing `None` (start of scan) through."""

    return None if token is None else decode_cursor(token)
