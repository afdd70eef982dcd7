"""Composite keys and paged range scans."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "mini_table_orm").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mini_table_orm import InMemoryTableStore, Int32, MalformedCursorError, Repository


@dataclass
class Reading:
    __table__ = "readings"

    site: str
    sensor: str
    taken_at: datetime
    sequence: Int32
    value: float
    note: Optional[str] = None


def main() -> None:
    repo = Repository(
        InMemoryTableStore(),
        Reading,
        partition_key=["site", "sensor"],
        row_key=["taken_at", "sequence"],
    )

    start = datetime(2024, 3, 1, 8, 0)
    for site in ("plant_a", "plant_b"):
        for step in range(3):
            repo.insert(
                Reading(site, "temp", start + timedelta(minutes=step), step, 20.0 + step)
            )

    # Keys are escaped so "_" inside values never clashes with the delimiter.
    partition_key = repo.partition_key("plant_a", "temp")
    print("Partition key:", partition_key)

    # 1) Page through every partition in ["plant_a", "plant_z").
    token = None
    while True:
        page = repo.get_page(
            repo.partition_key("plant_a", ""),
            repo.partition_key("plant_z", ""),
            page_size=2,
            page_token=token,
        )
        print("Page:", [(item.site, item.sequence) for item in page.items])
        token = page.next_page_token
        if token is None:
            break

    # 2) Scan one partition by row key range.
    page = repo.get_partition_page(
        partition_key,
        repo.row_key(start, 1),
        repo.row_key(start + timedelta(hours=1), 0),
    )
    print("Rows from sequence 1:", [item.sequence for item in page.items])

    # 3) Malformed tokens are rejected.
    try:
        repo.get_page("a", "z", page_token="not-a-token")
    except MalformedCursorError as exc:
        print("Expected error:", exc)


if __name__ == "__main__":
    main()
