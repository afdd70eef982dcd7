"""Azure Table Storage adapter example (optional dependency).

Point AZURE_STORAGE_CONNECTION_STRING at a storage account or a local Azurite
instance before running.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from mini_table_orm import AwareDatetime, AzureTableStore, Repository


@dataclass
class FileProgress:
    merchant: str
    file: str
    processed: int
    updated_at: AwareDatetime


def main() -> None:
    try:
        store = AzureTableStore.from_env()
    except ImportError as exc:
        print("Azure example skipped:", exc)
        print("Install dependency: pip install azure-data-tables")
        return
    except ValueError as exc:
        print("Azure example skipped:", exc)
        return

    repo = Repository(
        store,
        FileProgress,
        partition_key=["merchant"],
        row_key=["file"],
        table="FileProgressDemo",
    )

    repo.insert_or_replace(
        FileProgress("M1", "F1", processed=0, updated_at=datetime.now(timezone.utc))
    )
    print("Fetched:", repo.get("M1", "F1"))
    print("Merchants M*:", repo.get_page("M", "N", page_size=10).items)


if __name__ == "__main__":
    main()
