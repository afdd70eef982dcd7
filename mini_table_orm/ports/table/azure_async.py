"""Async Azure Table Storage adapter over `azure.data.tables.aio`.

This adapter is optional and requires `azure-data-tables` (with an async HTTP
transport such as `aiohttp`) installed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ...core.conditions import WhereExpression
from ...core.errors import ConflictError, NotFoundError
from ...core.filters import compile_filter
from ...core.table_types import ContinuationCursor, ScanPage
from ...core.types import NativeRow
from .azure import (
    CONNECTION_STRING_ENV,
    connection_string_from_env,
    continuation_token,
    from_entity,
    scan_page,
    to_entity,
)

logger = logging.getLogger(__name__)


class AsyncAzureTableStore:
    """Async table store adapter for Azure Table Storage (and Azurite)."""

    def __init__(self, service_client: Any = None, *, connection_string: str | None = None) -> None:
        """Create the adapter.

        Args:
            service_client: An async `TableServiceClient` (or compatible object).
            connection_string: Used to build an async `TableServiceClient` when
                `service_client` is not given.
        """

        try:
            from azure.core import exceptions as azure_exceptions  # type: ignore[import-not-found]
            from azure.data import tables  # type: ignore[import-not-found]
            from azure.data.tables import aio as tables_aio  # type: ignore[import-not-found]
        except ImportError as exc:  # pragma: no cover - env dependent
            raise ImportError(
                "azure-data-tables is required for AsyncAzureTableStore. "
                "Install with `pip install azure-data-tables aiohttp`."
            ) from exc

        self._tables = tables
        self._exceptions = azure_exceptions
        if service_client is None:
            if not connection_string:
                raise ValueError(
                    "AsyncAzureTableStore needs a service_client or connection_string."
                )
            service_client = tables_aio.TableServiceClient.from_connection_string(
                conn_str=connection_string
            )
        self._service = service_client
        self._clients: Dict[str, Any] = {}

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "AsyncAzureTableStore":
        return cls(connection_string=connection_string)

    @classmethod
    def from_env(cls, var: str = CONNECTION_STRING_ENV) -> "AsyncAzureTableStore":
        """Build the adapter from a connection string environment variable."""

        return cls(connection_string=connection_string_from_env(var))

    async def close(self) -> None:
        """Close the underlying service client and its transport."""

        await self._service.close()

    async def __aenter__(self) -> "AsyncAzureTableStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def create_table_if_not_exists(self, table: str) -> None:
        self._clients[table] = await self._service.create_table_if_not_exists(table_name=table)

    async def put(
        self, table: str, partition_key: str, row_key: str, values: NativeRow
    ) -> None:
        await self._client(table).upsert_entity(
            entity=to_entity(self._tables, partition_key, row_key, values),
            mode=self._tables.UpdateMode.REPLACE,
        )

    async def insert_if_absent(
        self, table: str, partition_key: str, row_key: str, values: NativeRow
    ) -> None:
        try:
            await self._client(table).create_entity(
                entity=to_entity(self._tables, partition_key, row_key, values)
            )
        except self._exceptions.ResourceExistsError as exc:
            raise ConflictError(
                f"Row ({partition_key!r}, {row_key!r}) already exists in {table!r}."
            ) from exc

    async def delete(self, table: str, partition_key: str, row_key: str) -> None:
        try:
            await self._client(table).delete_entity(
                partition_key=partition_key, row_key=row_key
            )
        except self._exceptions.ResourceNotFoundError as exc:
            raise NotFoundError(
                f"Row ({partition_key!r}, {row_key!r}) does not exist in {table!r}."
            ) from exc

    async def point_lookup(self, table: str, partition_key: str, row_key: str) -> NativeRow:
        try:
            entity = await self._client(table).get_entity(
                partition_key=partition_key, row_key=row_key
            )
        except self._exceptions.ResourceNotFoundError as exc:
            raise NotFoundError(
                f"Row ({partition_key!r}, {row_key!r}) does not exist in {table!r}."
            ) from exc
        return from_entity(self._tables, entity)

    async def range_scan(
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
            first = await pages.__anext__()
        except StopAsyncIteration:
            entities = []
        else:
            entities = [entity async for entity in first]

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
