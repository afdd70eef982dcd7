"""Basic CRUD example for mini_table_orm Repository."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, replace
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "mini_table_orm").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mini_table_orm import InMemoryTableStore, Repository


@dataclass
class FileProgress:
    merchant: str
    file: str
    size: int
    processed: int


def main() -> None:
    # Debug logs show skipped inserts and deletes.
    logging.basicConfig(level=logging.DEBUG)

    # 1) Create store and repository (the table is created on init).
    store = InMemoryTableStore()
    repo = Repository(
        store,
        FileProgress,
        partition_key=[lambda row: row.merchant],
        row_key=[lambda row: row.file],
    )

    # 2) Write and read back by store keys.
    progress = FileProgress(merchant="M1", file="F1", size=1_000_000, processed=0)
    repo.insert_or_replace(progress)
    print("Fetched:", repo.get("M1", "F1"))

    # 3) Replace with new progress.
    repo.insert_or_replace(replace(progress, processed=50_000))
    print("After update:", repo.get("M1", "F1"))

    # 4) insert() keeps the existing row.
    repo.insert(replace(progress, processed=1))
    print("After second insert:", repo.get(progress))

    # 5) Delete twice; the second call is a no-op.
    repo.delete(progress)
    repo.delete(progress)
    print("After delete:", repo.get("M1", "F1"))


if __name__ == "__main__":
    main()
