"""Exception hierarchy raised by mapping, key handling, and store adapters."""

from __future__ import annotations


class MiniTableError(Exception):
    """Base class for every error raised by mini_table_orm."""


class MappingError(MiniTableError, ValueError):
    """Raised when a record, key, or native value cannot be mapped."""


class UnsupportedTypeError(MappingError, TypeError):
    """Raised for field annotations or runtime values outside the supported set."""


class MissingValueError(MappingError):
    """Raised when a native value has no payload for the requested kind."""


class MissingFieldError(MappingError):
    """Raised when a native row lacks a declared, non-optional value field."""


class InvalidKeySpecError(MappingError):
    """Raised when partition/row key selectors cannot be resolved to fields."""


class MalformedKeyError(MappingError):
    """Raised when a store key does not split into the expected part count."""


class MalformedCursorError(MappingError):
    """Raised when a continuation token cannot be decoded."""


class KeyFieldConversionError(MappingError):
    """Raised when a key part cannot be parsed into its field type."""


class StoreError(MiniTableError):
    """Raised by table store adapters for backend failures."""


class ConflictError(StoreError):
    """Raised by `insert_if_absent` when the key is already occupied."""


class NotFoundError(StoreError):
    """Raised by point operations when no row exists at the key."""
