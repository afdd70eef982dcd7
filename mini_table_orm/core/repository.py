"""Repository facade over a partitioned table store."""

from __future__ import annotations

import logging
from typing import Any, Generic, Optional, Sequence, Type, TypeVar, overload

from .conditions import WhereExpression
from .contracts import TableStorePort
from .cursors import decode_optional_cursor, encode_optional_cursor
from .errors import ConflictError, NotFoundError
from .filters import partition_range, row_range
from .mapper import EntityMapper
from .models import DataclassModel, table_name
from .selectors import FieldSelector
from .table_types import PagedResult, ScanPage

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DataclassModel)

DEFAULT_PAGE_SIZE = 1000


class Repository(Generic[T]):
    """CRUD and paged queries for one dataclass type backed by a `TableStorePort`.

    The repository keeps no mutable state after construction and may be shared
    between threads.
    """

    def __init__(
        self,
        store: TableStorePort,
        model: Type[T],
        *,
        partition_key: Sequence[FieldSelector],
        row_key: Sequence[FieldSelector],
        partition_key_names: Optional[Sequence[str]] = None,
        row_key_names: Optional[Sequence[str]] = None,
        table: Optional[str] = None,
        auto_create: bool = True,
    ) -> None:
        """Create a repository.

        Args:
            store: Concrete table store adapter.
            model: Dataclass record type.
            partition_key: Ordered field names or selectors forming the partition key.
            row_key: Ordered field names or selectors forming the row key.
            partition_key_names: Explicit field names for `partition_key`.
            row_key_names: Explicit field names for `row_key`.
            table: Table name. Defaults to `__table__` or the class name.
            auto_create: Create the table on initialization when missing.

        Raises:
            InvalidKeySpecError: If the key specification is invalid.
            UnsupportedTypeError: If a field type is not supported.
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
            self.create_table()

    def create_table(self) -> None:
        """Create the backing table when it does not exist yet."""

        self.store.create_table_if_not_exists(self.table)

    def partition_key(self, *values: Any) -> str:
        """Build a store partition key from raw field values."""

        return self.mapper.partition_key_for(*values)

    def row_key(self, *values: Any) -> str:
        """Build a store row key from raw field values."""

        return self.mapper.row_key_for(*values)

    def insert(self, obj: T) -> None:
        """Insert a record unless its key is already taken.

        An existing row is left untouched and no error is raised.
        """

        partition_key, row_key, values = self.mapper.to_row(obj)
        try:
            self.store.insert_if_absent(self.table, partition_key, row_key, values)
        except ConflictError:
            logger.debug(
                "Insert skipped, row (%s, %s) already exists in %s",
                partition_key,
                row_key,
                self.table,
            )

    def insert_or_replace(self, obj: T) -> None:
        """Write a record, replacing any row stored at its key."""

        partition_key, row_key, values = self.mapper.to_row(obj)
        self.store.put(self.table, partition_key, row_key, values)

    def delete(self, obj: T) -> None:
        """Delete the row at the record's key; a missing row is not an error."""

        partition_key, row_key = self.mapper.keys_for(obj)
        try:
            self.store.delete(self.table, partition_key, row_key)
        except NotFoundError:
            logger.debug(
                "Delete skipped, row (%s, %s) not found in %s",
                partition_key,
                row_key,
                self.table,
            )

    @overload
    def get(self, partition_key: str, row_key: str) -> Optional[T]: ...

    @overload
    def get(self, obj: T) -> Optional[T]: ...

    def get(self, key_or_obj: Any, row_key: Optional[str] = None) -> Optional[T]:
        """Fetch one record by store keys, or by the keys of a template record.

        Returns:
            The mapped record, or `None` when no row exists.
        """

        if isinstance(key_or_obj, self.model):
            if row_key is not None:
                raise TypeError("get() takes a record or store keys, not both.")
            partition_key, row_key = self.mapper.keys_for(key_or_obj)
        elif row_key is None:
            raise TypeError("get() needs a record or both partition_key and row_key.")
        else:
            partition_key = key_or_obj

        try:
            values = self.store.point_lookup(self.table, partition_key, row_key)
        except NotFoundError:
            logger.debug("Row (%s, %s) not found in %s", partition_key, row_key, self.table)
            return None
        return self.mapper.from_row(partition_key, row_key, values)

    def get_page(
        self,
        partition_from: str,
        partition_to: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: Optional[str] = None,
    ) -> PagedResult[T]:
        """Fetch one page of rows whose partition key is in `[partition_from, partition_to)`.

        Args:
            partition_from: Inclusive lower partition key bound (store key form).
            partition_to: Exclusive upper partition key bound (store key form).
            page_size: Maximum number of records in the page.
            page_token: Token returned by the previous page, if any.
        """

        return self._scan(partition_range(partition_from, partition_to), page_size, page_token)

    def get_partition_page(
        self,
        partition_key: str,
        row_from: str,
        row_to: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: Optional[str] = None,
    ) -> PagedResult[T]:
        """Fetch one page of rows of one partition with row key in `[row_from, row_to)`."""

        return self._scan(row_range(partition_key, row_from, row_to), page_size, page_token)

    def _scan(
        self,
        where: WhereExpression,
        page_size: int,
        page_token: Optional[str],
    ) -> PagedResult[T]:
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
        cursor = decode_optional_cursor(page_token)
        page = self.store.range_scan(self.table, where, page_size, cursor)
        return self._to_result(page)

    def _to_result(self, page: ScanPage) -> PagedResult[T]:
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
