from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union
from uuid import UUID

from mini_table_orm import (
    AwareDatetime,
    EntityMapper,
    FieldType,
    Int32,
    InvalidKeySpecError,
    KeyFieldConversionError,
    MalformedKeyError,
    MissingFieldError,
    MissingValueError,
    NativeKind,
    NativeValue,
    UnsupportedTypeError,
)

MERCHANT = UUID("12345678-1234-5678-1234-567812345678")


@dataclass
class FileProgress:
    merchant_id: str
    file_id: str
    processed: bool
    size: int
    received_at: datetime


@dataclass
class Shipment:
    merchant_id: UUID
    region: str
    shipped_on: datetime
    sequence: Int32
    sent_at: AwareDatetime
    weight: float
    label: bytes
    note: Optional[str] = None
    retries: int | None = None


@dataclass
class Overridden:
    tenant: str
    code: str
    counter: int = field(default=0, metadata={"field_type": FieldType.INT32})


@dataclass
class Derived:
    tenant: str
    code: str
    label: str = field(init=False, default="")


@dataclass
class WithList:
    tenant: str
    code: str
    tags: List[str]


@dataclass
class WithUnion:
    tenant: str
    code: str
    payload: Union[int, str]


class NotADataclass:
    tenant: str = ""


class MapperConstructionTests(unittest.TestCase):
    def test_names_and_lambdas_resolve_to_fields(self) -> None:
        by_name = EntityMapper(FileProgress, ["merchant_id"], ["file_id"])
        by_lambda = EntityMapper(
            FileProgress,
            [lambda row: row.merchant_id],
            [lambda row: row.file_id],
        )

        for mapper in (by_name, by_lambda):
            self.assertEqual(mapper.partition_key_names, ["merchant_id"])
            self.assertEqual(mapper.row_key_names, ["file_id"])
            self.assertEqual(mapper.value_names, ["processed", "size", "received_at"])

    def test_single_selector_is_accepted_without_list(self) -> None:
        mapper = EntityMapper(FileProgress, "merchant_id", lambda row: row.file_id)  # type: ignore[arg-type]
        self.assertEqual(mapper.row_key_names, ["file_id"])

    def test_field_types_follow_annotations(self) -> None:
        mapper = EntityMapper(Shipment, ["merchant_id", "region"], ["shipped_on", "sequence"])
        types = {
            binding.name: (binding.field_type, binding.nullable)
            for binding in mapper.partition_bindings + mapper.row_bindings + mapper.value_bindings
        }

        self.assertEqual(types["merchant_id"], (FieldType.UUID, False))
        self.assertEqual(types["sequence"], (FieldType.INT32, False))
        self.assertEqual(types["sent_at"], (FieldType.DATETIME_OFFSET, False))
        self.assertEqual(types["shipped_on"], (FieldType.DATETIME, False))
        self.assertEqual(types["note"], (FieldType.STRING, True))
        self.assertEqual(types["retries"], (FieldType.INT64, True))

    def test_metadata_overrides_annotation(self) -> None:
        mapper = EntityMapper(Overridden, ["tenant"], ["code"])
        self.assertEqual(mapper.value_bindings[0].field_type, FieldType.INT32)

    def test_invalid_specifications(self) -> None:
        cases = {
            "unknown field": (["merchant_id"], ["missing"]),
            "overlap": (["merchant_id"], ["merchant_id"]),
            "duplicate": (["merchant_id", "merchant_id"], ["file_id"]),
            "empty partition": ([], ["file_id"]),
            "empty row": (["merchant_id"], []),
            "computed lambda": ([lambda row: row.merchant_id + "x"], ["file_id"]),
            "two attributes": ([lambda row: (row.merchant_id, row.size)], ["file_id"]),
            "constant lambda": ([lambda row: "M1"], ["file_id"]),
            "non selector": ([42], ["file_id"]),
            "empty name": ([""], ["file_id"]),
        }
        for label, (partition_key, row_key) in cases.items():
            with self.subTest(label):
                with self.assertRaises(InvalidKeySpecError):
                    EntityMapper(FileProgress, partition_key, row_key)

    def test_explicit_names_must_match_selector_count(self) -> None:
        with self.assertRaises(InvalidKeySpecError):
            EntityMapper(
                FileProgress,
                [lambda row: row.merchant_id],
                ["file_id"],
                partition_key_names=["merchant_id", "file_id"],
            )

    def test_explicit_names_allow_computed_selectors(self) -> None:
        mapper = EntityMapper(
            FileProgress,
            [lambda row: row.merchant_id.upper()],
            ["file_id"],
            partition_key_names=["merchant_id"],
        )
        record = FileProgress("m1", "F1", False, 1, datetime(2024, 1, 1))

        self.assertEqual(mapper.keys_for(record), ("M1", "F1"))

    def test_non_dataclass_model(self) -> None:
        with self.assertRaises(TypeError):
            EntityMapper(NotADataclass, ["tenant"], ["tenant"])  # type: ignore[arg-type]

    def test_unsupported_field_types(self) -> None:
        for model in (WithList, WithUnion):
            with self.subTest(model=model.__name__):
                with self.assertRaises(UnsupportedTypeError):
                    EntityMapper(model, ["tenant"], ["code"])


class MapperConversionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.mapper = EntityMapper(
            Shipment,
            [lambda row: row.merchant_id, lambda row: row.region],
            [lambda row: row.shipped_on, lambda row: row.sequence],
        )
        self.record = Shipment(
            merchant_id=MERCHANT,
            region="eu_west",
            shipped_on=datetime(2024, 5, 1, 12, 30, 15),
            sequence=7,
            sent_at=datetime(2024, 5, 1, 13, 0, tzinfo=timezone.utc),
            weight=2.5,
            label=b"\x00\x01",
            note="fragile",
        )

    def test_to_row_builds_keys_and_native_values(self) -> None:
        partition_key, row_key, values = self.mapper.to_row(self.record)

        self.assertEqual(partition_key, f"{MERCHANT}__eu%5Fwest")
        self.assertEqual(row_key, "2024-05-01+12%3A30%3A15Z__7")
        self.assertEqual(values["weight"], NativeValue(NativeKind.DOUBLE, 2.5))
        self.assertEqual(values["label"], NativeValue(NativeKind.BINARY, b"\x00\x01"))
        self.assertEqual(values["note"], NativeValue(NativeKind.STRING, "fragile"))
        self.assertNotIn("retries", values)
        for key_field in ("merchant_id", "region", "shipped_on", "sequence"):
            self.assertNotIn(key_field, values)

    def test_round_trip(self) -> None:
        partition_key, row_key, values = self.mapper.to_row(self.record)

        self.assertEqual(self.mapper.from_row(partition_key, row_key, values), self.record)

    def test_key_datetime_drops_sub_second_precision(self) -> None:
        self.record.shipped_on = datetime(2024, 5, 1, 12, 30, 15, 500000)
        restored = self.mapper.from_row(*self.mapper.to_row(self.record))

        self.assertEqual(restored.shipped_on, datetime(2024, 5, 1, 12, 30, 15))

    def test_early_year_key_round_trips(self) -> None:
        self.record.shipped_on = datetime(999, 1, 2, 3, 4, 5)
        restored = self.mapper.from_row(*self.mapper.to_row(self.record))

        self.assertEqual(restored, self.record)

    def test_none_in_required_fields(self) -> None:
        self.record.weight = None  # type: ignore[assignment]
        with self.assertRaises(MissingValueError):
            self.mapper.to_row(self.record)

        self.record.weight = 1.0
        self.record.region = None  # type: ignore[assignment]
        with self.assertRaises(MissingValueError):
            self.mapper.to_row(self.record)

    def test_missing_required_value_field(self) -> None:
        partition_key, row_key, values = self.mapper.to_row(self.record)
        del values["weight"]

        with self.assertRaises(MissingFieldError):
            self.mapper.from_row(partition_key, row_key, values)

    def test_missing_optional_value_field_reads_as_none(self) -> None:
        partition_key, row_key, values = self.mapper.to_row(self.record)
        del values["note"]

        self.assertIsNone(self.mapper.from_row(partition_key, row_key, values).note)

    def test_malformed_and_unparsable_keys(self) -> None:
        _, row_key, values = self.mapper.to_row(self.record)

        with self.assertRaises(MalformedKeyError):
            self.mapper.from_row("only-one-part", row_key, values)
        with self.assertRaises(KeyFieldConversionError):
            self.mapper.from_row("not-a-uuid__eu", row_key, values)

    def test_wrong_native_kind(self) -> None:
        partition_key, row_key, values = self.mapper.to_row(self.record)
        values["weight"] = NativeValue(NativeKind.STRING, "heavy")

        with self.assertRaises(MissingValueError):
            self.mapper.from_row(partition_key, row_key, values)

    def test_key_builders_from_raw_values(self) -> None:
        self.assertEqual(
            self.mapper.partition_key_for(MERCHANT, "eu_west"),
            f"{MERCHANT}__eu%5Fwest",
        )
        self.assertEqual(
            self.mapper.row_key_for(datetime(2024, 5, 1, 12, 30, 15), 7),
            "2024-05-01+12%3A30%3A15Z__7",
        )
        with self.assertRaises(ValueError):
            self.mapper.partition_key_for(MERCHANT)

    def test_keys_for_rejects_other_types(self) -> None:
        with self.assertRaises(TypeError):
            self.mapper.keys_for(FileProgress("M1", "F1", False, 0, datetime(2024, 1, 1)))  # type: ignore[arg-type]

    def test_non_init_fields_are_restored(self) -> None:
        mapper = EntityMapper(Derived, ["tenant"], ["code"])
        record = Derived("T", "C")
        record.label = "computed"

        restored = mapper.from_row(*mapper.to_row(record))

        self.assertEqual(restored.label, "computed")


if __name__ == "__main__":
    unittest.main()
