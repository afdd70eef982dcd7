"""Shared table entities used by table ports and repositories."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from .types import NativeRow

T = TypeVar("T")


@dataclass(frozen=True)
class ContinuationCursor:
    """Position at which a paged range scan resumes."""

    next_partition_key: str
    next_row_key: str


@dataclass(frozen=True)
class StoredRow:
    """One row as returned by a table store scan."""

    partition_key: str
    row_key: str
    values: NativeRow


@dataclass(frozen=True)
class ScanPage:
    """One page of a range scan and the cursor to continue it, if any."""

    rows: List[StoredRow]
    next_cursor: Optional[ContinuationCursor] = None


@dataclass
class PagedResult(Generic[T]):
    """Mapped records of one page and the token for the next page.

    `next_page_token` is `None` once the scan is exhausted.
    """

    items: List[T] = field(default_factory=list)
    next_page_token: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.next_page_token is not None
