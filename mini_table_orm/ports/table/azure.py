"""Azure Table Storage adapter implementing table store operations.

This adapter is optional and requires `azure-data-tables` package installed.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Dict, Mapping, Optional
from uuid import UUID

from ...core.conditions import WhereExpression
from ...core.errors import ConflictError, NotFoundError
from ...core.filters import compile_filter
from ...core.native import NativeKind, NativeValue
from ...core.table_types import ContinuationCursor, ScanPage, StoredRow
from ...core.types import PARTITION_KEY, ROW_KEY, MutableNativeRow, NativeRow

logger = logging.getLogger(__name__)

CONNECTION_STRING_ENV = "AZURE_STORAGE_CONNECTION_STRING"


class AzureTableStore:
    """Table store adapter for Azure Table Storage (and Azurite)."""

    def __init__(self, service_client: Any = None, *, connection_string: str | None = None) -> None:
        """Create the adapter.

        Args:
            service_client: A `TableServiceClient` (or compatible object).
            connection_string: Used to build a `TableServiceClient` when
                `service_client` is not given.
        """

        try:
            from azure.core import exceptions as azure_exceptions  # type: ignore[import-not-found]
            from azure.data import tables  # type: ignore[import-not-found]
        except ImportError as exc:  # pragma: no cover - env dependent
            raise ImportError(
                "azure-data-tables is required for AzureTableStore. "
                "Install with `pip install azure-data-tables`."
            ) from exc

        self._tables = tables
        self._exceptions = azure_exceptions
        if service_client is None:
            if not connection_string:
                raise ValueError("AzureTableStore needs a service_client or connection_string.")
            service_client = tables.TableServiceClient.from_connection_string(
                conn_str=connection_string
            )
        self._service = service_client
        self._clients: Dict[str, Any] = {}

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "AzureTableStore":
        return cls(connection_string=connection_string)

    @classmethod
    def from_env(cls, var: str = CONNECTION_STRING_ENV) -> "AzureTableStore":
        """Build the adapter from a connection string environment variable."""

        return cls(connection_string=connection_string_from_env(var))

    def create_table_if_not_exists(self, table: str) -> None:
        self._clients[table] = self._service.create_table_if_not_exists(table_name=table)

    def put(self, table: str, partition_key: str, row_key: str, values: NativeRow) -> None:
        self._client(table).upsert_entity(
            entity=to_entity(self._tables, partition_key, row_key, values),
            mode=self._tables.UpdateMode.REPLACE,
        )

    def insert_if_absent(
        self, table: str, partition_key: str, row_key: str, values: NativeRow
    ) -> None:
        try:
            self._client(table).create_entity(
                entity=to_entity(self._tables, partition_key, row_key, values)
            )
        except self._exceptions.ResourceExistsError as exc:
            raise ConflictError(
                f"Row ({partition_key!r}, {row_key!r}) already exists in {table!r}."
            ) from exc

    def delete(self, table: str, partition_key: str, row_key: str) -> None:
        try:
            self._client(table).delete_entity(partition_key=partition_key, row_key=row_key)
        except self._exceptions.ResourceNotFoundError as exc:
            raise NotFoundError(
                f"Row ({partition_key!r}, {row_key!r}) does not exist in {table!r}."
            ) from exc

    def point_lookup(self, table: str, partition_key: str, row_key: str) -> NativeRow:
        try:
            entity = self._client(table).get_entity(
                partition_key=partition_key, row_key=row_key
            )
        except self._exceptions.ResourceNotFoundError as exc:
            raise NotFoundError(
                f"Row ({partition_key!r}, {row_key!r}) does not exist in {table!r}."
            ) from exc
        return from_entity(self._tables, entity)

    def range_scan(
        self,
        table: str,
        where: WhereExpression,
        page_size: int,
        cursor: Optional[ContinuationCursor] = None,
    ) -> ScanPage:
        if page_size <= 0:
            raise ValueError("page_size must be > 0")

        compiled = compile_filter(where)
        pages = self._client(table).query_entities(
            query_filter=compiled.expression,
            parameters=compiled.parameters,
            results_per_page=page_size,
        ).by_page(continuation_token=continuation_token(cursor))
        try:
            entities = list(next(pages))
        except StopIteration:
            entities = []

        page = scan_page(self._tables, entities, getattr(pages, "continuation_token", None))
        logger.debug(
            "Scanned %d row(s) from %s with filter %s (more=%s)",
            len(page.rows),
            table,
            compiled.expression,
            page.next_cursor is not None,
        )
        return page

    def _client(self, table: str) -> Any:
        client = self._clients.get(table)
        if client is None:
            client = self._service.get_table_client(table_name=table)
            self._clients[table] = client
        return client


def connection_string_from_env(var: str = CONNECTION_STRING_ENV) -> str:
    """Read a storage connection string from the environment."""

    connection_string = os.getenv(var)
    if not connection_string:
        raise ValueError(f"Environment variable {var} is not set.")
    return connection_string


def to_entity(
    tables: Any, partition_key: str, row_key: str, values: NativeRow
) -> Dict[str, Any]:
    """Build an SDK entity with every property tagged with its Edm type."""

    entity: Dict[str, Any] = {PARTITION_KEY: partition_key, ROW_KEY: row_key}
    for name, native in values.items():
        entity[name] = tables.EntityProperty(native.value, tables.EdmType[native.kind.name])
    return entity


def from_entity(tables: Any, entity: Mapping[str, Any]) -> MutableNativeRow:
    """Convert an SDK entity into a native row, skipping both key columns."""

    values: MutableNativeRow = {}
    for name, raw in entity.items():
        if name in (PARTITION_KEY, ROW_KEY):
            continue
        native = _native_value(tables, raw)
        if native is not None:
            values[name] = native
    return values


def continuation_token(cursor: Optional[ContinuationCursor]) -> Optional[Dict[str, str]]:
    """SDK continuation token for a cursor; `None` starts a fresh scan."""

    if cursor is None:
        return None
    return {PARTITION_KEY: cursor.next_partition_key, ROW_KEY: cursor.next_row_key}


def scan_page(tables: Any, entities: Any, token: Any) -> ScanPage:
    """Build a `ScanPage` from one page of SDK entities and its continuation token."""

    rows = [
        StoredRow(
            partition_key=entity[PARTITION_KEY],
            row_key=entity[ROW_KEY],
            values=from_entity(tables, entity),
        )
        for entity in entities
    ]
    return ScanPage(rows=rows, next_cursor=_next_cursor(token))


def _native_value(tables: Any, raw: Any) -> Optional[NativeValue]:
    if raw is None:
        return None
    if isinstance(raw, tables.EntityProperty):
        kind = NativeKind[tables.EdmType(raw.edm_type).name]
        return NativeValue(kind=kind, value=_plain(raw.value))
    if isinstance(raw, bool):
        return NativeValue(NativeKind.BOOLEAN, raw)
    if isinstance(raw, int):
        return NativeValue(NativeKind.INT32, raw)
    if isinstance(raw, float):
        return NativeValue(NativeKind.DOUBLE, raw)
    if isinstance(raw, (bytes, bytearray)):
        return NativeValue(NativeKind.BINARY, bytes(raw))
    if isinstance(raw, datetime):
        return NativeValue(NativeKind.DATETIME, _plain(raw))
    if isinstance(raw, UUID):
        return NativeValue(NativeKind.GUID, raw)
    if isinstance(raw, str):
        return NativeValue(NativeKind.STRING, raw)
    logger.debug("Skipping property of unsupported type %s", type(raw).__name__)
    return None


def _next_cursor(token: Any) -> Optional[ContinuationCursor]:
    if not token:
        return None
    partition_key = token.get(PARTITION_KEY)
    row_key = token.get(ROW_KEY)
    if partition_key is None and row_key is None:
        return None
    return ContinuationCursor(
        next_partition_key=partition_key or "",
        next_row_key=row_key or "",
    )


def _plain(value: Any) -> Any:
    # The SDK returns a datetime subclass carrying the raw service string.
    if isinstance(value, datetime) and type(value) is not datetime:
        return datetime(
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond,
            tzinfo=value.tzinfo,
        )
    return value
