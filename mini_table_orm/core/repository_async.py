"""Async repository facade over a partitioned table store."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Generic, Optional, Sequence, Type, TypeVar, overload

from ._async_utils import _call_store
from .conditions import WhereExpression
from .contracts import AsyncTableStorePort, TableStorePort
from .cursors import decode_optional_cursor, encode_optional_cursor
from .errors import ConflictError, NotFoundError
from .filters import partition_range, row_range
from .mapper import EntityMapper
from .models import DataclassModel, table_name
from .repository import DEFAULT_PAGE_SIZE
from .selectors import FieldSelector
from .table_types import PagedResult

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DataclassModel)


class AsyncRepository(Generic[T]):
    """Async CRUD and paged queries backed by a sync or async table store port."""

    def __init__(
        self,
        store: TableStorePort | AsyncTableStorePort,
        model: Type[T],
        *,
        partition_key: Sequence[FieldSelector],
        row_key: Sequence[FieldSelector],
        partition_key_names: Optional[Sequence[str]] = None,
        row_key_names: Optional[Sequence[str]] = None,
        table: Optional[str] = None,
        auto_create: bool = True,
    ) -> None:
        """Create an async repository.

        Args:
            store: Concrete table store adapter (sync or async).
            model: Dataclass record type.
            partition_key: Ordered field names or selectors forming the partition key.
            row_key: Ordered field names or selectors forming the row key.
            partition_key_names: Explicit field names for `partition_key`.
            row_key_names: Explicit field names for `row_key`.
            table: Table name. Defaults to `__table__` or the class name.
            auto_create: Create the table on initialization. Only supported for
                sync stores; with async stores await `create_table()` instead.
        """

        self.store = store
        self.model = model
        self.mapper = EntityMapper(
            model,
            partition_key,
            row_key,
            partition_key_names=partition_key_names,
            row_key_names=row_key_names,
        )
        self.table = table or table_name(model)

        if auto_create:
            create_table_fn = self.store.create_table_if_not_exists
            if inspect.iscoroutinefunction(create_table_fn):
                raise ValueError(
                    "auto_create=True is not supported for async table stores in "
                    "constructor. Use auto_create=False then await create_table()."
                )
            create_table_fn(self.table)

    async def create_table(self) -> None:
        """Create the backing table when it does not exist yet."""

        await _call_store(self.store.create_table_if_not_exists, self.table)

    def partition_key(self, *values: Any) -> str:
        """Build a store partition key from raw field values."""

        return self.mapper.partition_key_for(*values)

    def row_key(self, *values: Any) -> str:
        """Build a store row key from raw field values."""

        return self.mapper.row_key_for(*values)

    async def insert(self, obj: T) -> None:
        """Insert a record unless its key is already taken."""

        partition_key, row_key, values = self.mapper.to_row(obj)
        try:
            await _call_store(
                self.store.insert_if_absent, self.table, partition_key, row_key, values
            )
        except ConflictError:
            logger.debug(
                "Insert skipped, row (%s, %s) already exists in %s",
                partition_key,
                row_key,
                self.table,
            )

    async def insert_or_replace(self, obj: T) -> None:
        """Write a record, replacing any row stored at its key."""

        partition_key, row_key, values = self.mapper.to_row(obj)
        await _call_store(self.store.put, self.table, partition_key, row_key, values)

    async def delete(self, obj: T) -> None:
        """Delete the row at the record's key; a missing row is not an error."""

        partition_key, row_key = self.mapper.keys_for(obj)
        try:
            await _call_store(self.store.delete, self.table, partition_key, row_key)
        except NotFoundError:
            logger.debug(
                "Delete skipped, row (%s, %s) not found in %s",
                partition_key,
                row_key,
                self.table,
            )

    @overload
    async def get(self, partition_key: str, row_key: str) -> Optional[T]: ...

    @overload
    async def get(self, obj: T) -> Optional[T]: ...

    async def get(self, key_or_obj: Any, row_key: Optional[str] = None) -> Optional[T]:
        """Fetch one record by store keys or by a template record; `None` if absent."""

        if isinstance(key_or_obj, self.model):
            if row_key is not None:
                raise TypeError("get() takes a record or store keys, not both.")
            partition_key, row_key = self.mapper.keys_for(key_or_obj)
        elif row_key is None:
            raise TypeError("get() needs a record or both partition_key and row_key.")
        else:
            partition_key = key_or_obj

        try:
            values = await _call_store(
                self.store.point_lookup, self.table, partition_key, row_key
            )
        except NotFoundError:
            logger.debug("Row (%s, %s) not found in %s", partition_key, row_key, self.table)
            return None
        return self.mapper.from_row(partition_key, row_key, values)

    async def get_page(
        self,
        partition_from: str,
        partition_to: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: Optional[str] = None,
    ) -> PagedResult[T]:
        """Fetch one page of rows whose partition key is in `[partition_from, partition_to)`."""

        return await self._scan(
            partition_range(partition_from, partition_to), page_size, page_token
        )

    async def get_partition_page(
        self,
        partition_key: str,
        row_from: str,
        row_to: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: Optional[str] = None,
    ) -> PagedResult[T]:
        """Fetch one page of rows of one partition with row key in `[row_from, row_to)`."""

        return await self._scan(row_range(partition_key, row_from, row_to), page_size, page_token)

    async def _scan(
        self,
        where: WhereExpression,
        page_size: int,
        page_token: Optional[str],
    ) -> PagedResult[T]:
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
        cursor = decode_optional_cursor(page_token)
        page = await _call_store(self.store.range_scan, self.table, where, page_size, cursor)
        items = [
            self.mapper.from_row(row.partition_key, row.row_key, row.values)
            for row in page.rows
        ]
        logger.debug(
            "Fetched page of %d %s record(s) from %s",
            len(items),
            self.model.__name__,
            self.table,
        )
        return PagedResult(items=items, next_page_token=encode_optional_cursor(page.next_cursor))
