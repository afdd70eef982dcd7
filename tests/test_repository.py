from __future__ import annotations

import unittest
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from mini_table_orm import (
    InMemoryTableStore,
    InvalidKeySpecError,
    MalformedCursorError,
    Repository,
    StoreError,
    UnsupportedTypeError,
)


@dataclass
class FileProgress:
    merchant: str
    file: str
    size: int
    processed: int


@dataclass
class Reading:
    __table__ = "readings"

    sensor: str
    site: str
    taken_at: datetime
    value: float
    note: Optional[str] = None


@dataclass
class BadRecord:
    key: str
    code: str
    payload: dict


class RepositoryCrudTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryTableStore()
        self.repo = Repository(
            self.store,
            FileProgress,
            partition_key=[lambda row: row.merchant],
            row_key=[lambda row: row.file],
        )
        self.record = FileProgress(merchant="M1", file="F1", size=1000000, processed=0)

    def test_table_created_on_construction(self) -> None:
        self.assertEqual(self.repo.table, "FileProgress")
        self.assertIn("FileProgress", self.store._tables)

    def test_insert_or_replace_then_get(self) -> None:
        self.repo.insert_or_replace(self.record)

        self.assertEqual(self.repo.get("M1", "F1"), self.record)

        updated = replace(self.record, processed=50000)
        self.repo.insert_or_replace(updated)

        fetched = self.repo.get("M1", "F1")
        self.assertEqual(fetched, updated)
        self.assertEqual(fetched.size, 1000000)

    def test_insert_keeps_first_values(self) -> None:
        self.repo.insert(self.record)
        self.repo.insert(replace(self.record, processed=7))

        self.assertEqual(self.repo.get("M1", "F1").processed, 0)

    def test_get_by_template_record(self) -> None:
        self.repo.insert(self.record)
        template = FileProgress(merchant="M1", file="F1", size=0, processed=0)

        self.assertEqual(self.repo.get(template), self.record)

    def test_get_missing_row_returns_none(self) -> None:
        self.assertIsNone(self.repo.get("M1", "never-written"))
        self.assertIsNone(self.repo.get(self.record))

    def test_get_requires_row_key_for_string_keys(self) -> None:
        with self.assertRaises(TypeError):
            self.repo.get("M1")  # type: ignore[call-overload]

    def test_get_rejects_record_with_row_key(self) -> None:
        self.repo.insert(self.record)

        with self.assertRaises(TypeError):
            self.repo.get(self.record, "F1")  # type: ignore[call-overload]

    def test_delete_is_idempotent(self) -> None:
        self.repo.insert(self.record)

        self.repo.delete(self.record)
        self.repo.delete(self.record)

        self.assertIsNone(self.repo.get("M1", "F1"))

    def test_key_builders(self) -> None:
        self.assertEqual(self.repo.partition_key("M_1"), "M%5F1")
        self.assertEqual(self.repo.row_key("F1"), "F1")

    def test_auto_create_disabled(self) -> None:
        store = InMemoryTableStore()
        repo = Repository(
            store,
            FileProgress,
            partition_key=["merchant"],
            row_key=["file"],
            table="progress",
            auto_create=False,
        )

        with self.assertRaises(StoreError):
            repo.insert(self.record)
        repo.create_table()
        repo.insert(self.record)
        self.assertEqual(repo.get("M1", "F1"), self.record)

    def test_construction_errors_are_raised_immediately(self) -> None:
        with self.assertRaises(InvalidKeySpecError):
            Repository(
                self.store,
                FileProgress,
                partition_key=[lambda row: row.merchant.lower()],
                row_key=["file"],
            )
        with self.assertRaises(UnsupportedTypeError):
            Repository(self.store, BadRecord, partition_key=["key"], row_key=["code"])


class RepositoryCompositeKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = Repository(
            InMemoryTableStore(),
            Reading,
            partition_key=["sensor", "site"],
            row_key=["taken_at"],
        )

    def test_table_name_override(self) -> None:
        self.assertEqual(self.repo.table, "readings")

    def test_composite_keys_round_trip(self) -> None:
        reading = Reading("temp_1", "plant__a", datetime(2024, 3, 1, 8, 0), 21.5)
        self.repo.insert(reading)

        fetched = self.repo.get(
            self.repo.partition_key("temp_1", "plant__a"),
            self.repo.row_key(datetime(2024, 3, 1, 8, 0)),
        )

        self.assertEqual(fetched, reading)
        self.assertIsNone(fetched.note)


class RepositoryPagingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = Repository(
            InMemoryTableStore(),
            FileProgress,
            partition_key=["merchant"],
            row_key=["file"],
        )
        for merchant, file in [("A", "1"), ("B", "1"), ("B", "2"), ("C", "1"), ("D", "1")]:
            self.repo.insert(FileProgress(merchant, file, size=10, processed=0))
        self.repo.insert(FileProgress("Z", "1", size=10, processed=0))

    def _collect(self, fetch):
        pages = []
        token = None
        while True:
            page = fetch(token)
            pages.append(page)
            token = page.next_page_token
            if token is None:
                return pages

    def test_range_scan_pages_until_exhausted(self) -> None:
        pages = self._collect(lambda token: self.repo.get_page("A", "Z", page_size=2, page_token=token))

        self.assertEqual([len(page.items) for page in pages], [2, 2, 1])
        self.assertTrue(pages[0].has_more)
        self.assertFalse(pages[-1].has_more)
        self.assertEqual(
            [(item.merchant, item.file) for page in pages for item in page.items],
            [("A", "1"), ("B", "1"), ("B", "2"), ("C", "1"), ("D", "1")],
        )

    def test_resumed_scan_matches_uninterrupted_scan(self) -> None:
        uninterrupted = self.repo.get_page("A", "Z", page_size=100).items

        first = self.repo.get_page("A", "Z", page_size=3)
        rest = self.repo.get_page("A", "Z", page_size=100, page_token=first.next_page_token)

        self.assertEqual(first.items + rest.items, uninterrupted)
        self.assertIsNone(rest.next_page_token)

    def test_partition_page(self) -> None:
        page = self.repo.get_partition_page("B", "1", "9", page_size=1)
        second = self.repo.get_partition_page("B", "1", "9", page_size=1, page_token=page.next_page_token)

        self.assertEqual([item.file for item in page.items], ["1"])
        self.assertEqual([item.file for item in second.items], ["2"])
        self.assertIsNone(second.next_page_token)

    def test_empty_range(self) -> None:
        page = self.repo.get_page("E", "Y")

        self.assertEqual(page.items, [])
        self.assertIsNone(page.next_page_token)

    def test_invalid_arguments(self) -> None:
        with self.assertRaises(ValueError):
            self.repo.get_page("A", "Z", page_size=0)
        with self.assertRaises(MalformedCursorError):
            self.repo.get_page("A", "Z", page_token="not-a-token")


if __name__ == "__main__":
    unittest.main()
