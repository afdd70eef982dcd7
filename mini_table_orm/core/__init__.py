"""Public core API for record mapping, key encoding, and repository operations."""

from .codecs import from_native, to_native
from .conditions import C, Condition, ConditionGroup, NotCondition, WhereExpression
from .contracts import AsyncTableStorePort, TableStorePort
from .cursors import decode_cursor, encode_cursor
from .errors import (
    ConflictError,
    InvalidKeySpecError,
    KeyFieldConversionError,
    MalformedCursorError,
    MalformedKeyError,
    MappingError,
    MiniTableError,
    MissingFieldError,
    MissingValueError,
    NotFoundError,
    StoreError,
    UnsupportedTypeError,
)
from .field_types import AwareDatetime, FieldType, Int32, Int64
from .filters import CompiledFilter, compile_filter, partition_range, row_range
from .keys import (
    KEY_DELIMITER,
    assemble_key,
    build_key,
    disassemble_key,
    format_key_part,
    parse_key_part,
)
from .mapper import EntityMapper, FieldBinding
from .models import DataclassModel, table_name
from .native import NativeKind, NativeValue
from .repository import Repository
from .repository_async import AsyncRepository
from .table_types import ContinuationCursor, PagedResult, ScanPage, StoredRow
from .types import NativeRow

__all__ = [
    "C",
    "Condition",
    "ConditionGroup",
    "NotCondition",
    "WhereExpression",
    "CompiledFilter",
    "compile_filter",
    "partition_range",
    "row_range",
    "TableStorePort",
    "AsyncTableStorePort",
    "DataclassModel",
    "table_name",
    "FieldType",
    "Int32",
    "Int64",
    "AwareDatetime",
    "NativeKind",
    "NativeValue",
    "NativeRow",
    "to_native",
    "from_native",
    "KEY_DELIMITER",
    "assemble_key",
    "build_key",
    "disassemble_key",
    "format_key_part",
    "parse_key_part",
    "encode_cursor",
    "decode_cursor",
    "EntityMapper",
    "FieldBinding",
    "Repository",
    "AsyncRepository",
    "ContinuationCursor",
    "PagedResult",
    "ScanPage",
    "StoredRow",
    "MiniTableError",
    "MappingError",
    "UnsupportedTypeError",
    "MissingValueError",
    "MissingFieldError",
    "InvalidKeySpecError",
    "MalformedKeyError",
    "MalformedCursorError",
    "KeyFieldConversionError",
    "StoreError",
    "ConflictError",
    "NotFoundError",
]
