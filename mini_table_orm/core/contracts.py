"""Core port contracts used by table adapters and repositories."""

from __future__ import annotations

from typing import Optional, Protocol

from .conditions import WhereExpression
from .table_types import ContinuationCursor, ScanPage
from .types import NativeRow


class TableStorePort(Protocol):
    """Partitioned table behavior required by `Repository`.

    `insert_if_absent` raises `ConflictError` when the key is taken; `delete`
    and `point_lookup` raise `NotFoundError` when nothing is stored at the key.
    Every other failure surfaces as `StoreError` or the backend's own error.
    """

    def create_table_if_not_exists(self, table: str) -> None: ...

    def put(self, table: str, partition_key: str, row_key: str, values: NativeRow) -> None: ...

    def insert_if_absent(
        self, table: str, partition_key: str, row_key: str, values: NativeRow
    ) -> None: ...

    def delete(self, table: str, partition_key: str, row_key: str) -> None: ...

    def point_lookup(self, table: str, partition_key: str, row_key: str) -> NativeRow: ...

    def range_scan(
        self,
        table: str,
        where: WhereExpression,
        page_size: int,
        cursor: Optional[ContinuationCursor] = None,
    ) -> ScanPage: ...


class AsyncTableStorePort(Protocol):
    """Async partitioned table behavior required by `AsyncRepository`."""

    async def create_table_if_not_exists(self, table: str) -> None: ...

    async def put(
        self, table: str, partition_key: str, row_key: str, values: NativeRow
    ) -> None: ...

    async def insert_if_absent(
        self, table: str, partition_key: str, row_key: str, values: NativeRow
    ) -> None: ...

    async def delete(self, table: str, partition_key: str, row_key: str) -> None: ...

    async def point_lookup(
        self, table: str, partition_key: str, row_key: str
    ) -> NativeRow: ...

    async def range_scan(
        self,
        table: str,
        where: WhereExpression,
        page_size: int,
        cursor: Optional[ContinuationCursor] = None,
    ) -> ScanPage: ...
