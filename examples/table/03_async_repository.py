from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID, uuid4

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "mini_table_orm").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mini_table_orm import AsyncRepository, InMemoryTableStore


@dataclass
class Upload:
    merchant_id: UUID
    file: str
    done: bool


async def main() -> None:
    # Sync stores work with AsyncRepository as well.
    repo = AsyncRepository(
        InMemoryTableStore(),
        Upload,
        partition_key=["merchant_id"],
        row_key=["file"],
    )

    merchant = uuid4()
    await repo.insert(Upload(merchant, "a.csv", False))
    await repo.insert(Upload(merchant, "b.csv", True))

    found = await repo.get(repo.partition_key(merchant), repo.row_key("a.csv"))
    print("found:", found)

    page = await repo.get_partition_page(repo.partition_key(merchant), "a", "z")
    print("uploads:", page.items)


if __name__ == "__main__":
    asyncio.run(main())
