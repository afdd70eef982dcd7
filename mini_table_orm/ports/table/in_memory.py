"""In-memory table store adapter for testing and local development."""

from __future__ import annotations

import operator
from bisect import bisect_left
from typing import Any, Callable, Dict, List, Optional, Tuple

from ...core.conditions import Condition, ConditionGroup, NotCondition, WhereExpression
from ...core.errors import ConflictError, NotFoundError, StoreError
from ...core.table_types import ContinuationCursor, ScanPage, StoredRow
from ...core.types import PARTITION_KEY, ROW_KEY, MutableNativeRow, NativeRow

_Key = Tuple[str, str]

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
}


class InMemoryTableStore:
    """Simple in-memory implementation of partitioned table operations.

    Rows are kept in `(partition_key, row_key)` order, which is also the order
    range scans return them in.
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[_Key, MutableNativeRow]] = {}

    def create_table_if_not_exists(self, table: str) -> None:
        self._tables.setdefault(table, {})

    def delete_table(self, table: str) -> None:
        self._tables.pop(table, None)

    def put(self, table: str, partition_key: str, row_key: str, values: NativeRow) -> None:
        self._get_table(table)[(partition_key, row_key)] = dict(values)

    def insert_if_absent(
        self, table: str, partition_key: str, row_key: str, values: NativeRow
    ) -> None:
        rows = self._get_table(table)
        if (partition_key, row_key) in rows:
            raise ConflictError(
                f"Row ({partition_key!r}, {row_key!r}) already exists in {table!r}."
            )
        rows[(partition_key, row_key)] = dict(values)

    def delete(self, table: str, partition_key: str, row_key: str) -> None:
        rows = self._get_table(table)
        if (partition_key, row_key) not in rows:
            raise NotFoundError(
                f"Row ({partition_key!r}, {row_key!r}) does not exist in {table!r}."
            )
        del rows[(partition_key, row_key)]

    def point_lookup(self, table: str, partition_key: str, row_key: str) -> NativeRow:
        rows = self._get_table(table)
        try:
            return dict(rows[(partition_key, row_key)])
        except KeyError as exc:
            raise NotFoundError(
                f"Row ({partition_key!r}, {row_key!r}) does not exist in {table!r}."
            ) from exc

    def range_scan(
        self,
        table: str,
        where: WhereExpression,
        page_size: int,
        cursor: Optional[ContinuationCursor] = None,
    ) -> ScanPage:
        if page_size <= 0:
            raise ValueError("page_size must be > 0")

        rows = self._get_table(table)
        keys = sorted(rows)
        start = 0
        if cursor is not None:
            start = bisect_left(keys, (cursor.next_partition_key, cursor.next_row_key))

        page: List[StoredRow] = []
        next_cursor: Optional[ContinuationCursor] = None
        for key in keys[start:]:
            values = rows[key]
            if not self._matches(where, key, values):
                continue
            if len(page) == page_size:
                next_cursor = ContinuationCursor(
                    next_partition_key=key[0],
                    next_row_key=key[1],
                )
                break
            page.append(StoredRow(partition_key=key[0], row_key=key[1], values=dict(values)))
        return ScanPage(rows=page, next_cursor=next_cursor)

    def _get_table(self, name: str) -> Dict[_Key, MutableNativeRow]:
        if name not in self._tables:
            raise StoreError(f"Table does not exist: {name}")
        return self._tables[name]

    @classmethod
    def _matches(cls, expr: WhereExpression, key: _Key, values: NativeRow) -> bool:
        if isinstance(expr, Condition):
            if expr.col == PARTITION_KEY:
                current: Any = key[0]
            elif expr.col == ROW_KEY:
                current = key[1]
            else:
                native = values.get(expr.col)
                if native is None:
                    return False
                current = native.value
            try:
                return _OPERATORS[expr.op](current, expr.value)
            except TypeError:
                return False

        if isinstance(expr, ConditionGroup):
            results = (cls._matches(item, key, values) for item in expr.items)
            return all(results) if expr.operator == "and" else any(results)

        if isinstance(expr, NotCondition):
            return not cls._matches(expr.item, key, values)

        raise TypeError("Expression must be Condition, ConditionGroup, or NotCondition.")
