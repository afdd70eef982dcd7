from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

from mini_table_orm import (
    FieldType,
    MissingValueError,
    NativeKind,
    NativeValue,
    UnsupportedTypeError,
    from_native,
    to_native,
)


class TypeConverterRoundTripTests(unittest.TestCase):
    def test_every_supported_type_round_trips(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        cases = [
            (True, FieldType.BOOLEAN),
            (False, FieldType.BOOLEAN),
            (b"\x00\xffdata", FieldType.BYTES),
            (b"", FieldType.BYTES),
            (datetime(2024, 5, 1, 12, 30, 15, 123456), FieldType.DATETIME),
            (datetime(2024, 5, 1, 12, 30, 15, tzinfo=plus_two), FieldType.DATETIME_OFFSET),
            (3.25, FieldType.DOUBLE),
            (-0.1, FieldType.DOUBLE),
            (UUID("12345678-1234-5678-1234-567812345678"), FieldType.UUID),
            (123, FieldType.INT32),
            (-(2**31), FieldType.INT32),
            (2**63 - 1, FieldType.INT64),
            (-(2**63), FieldType.INT64),
            ("héllo wörld", FieldType.STRING),
            ("", FieldType.STRING),
        ]

        for value, field_type in cases:
            with self.subTest(value=value, field_type=field_type):
                native = to_native(value, field_type)
                self.assertEqual(native.kind, field_type.native_kind)
                self.assertEqual(from_native(native, field_type), value)

    def test_inferred_types_and_python_type_targets(self) -> None:
        self.assertEqual(to_native(True), NativeValue(NativeKind.BOOLEAN, True))
        self.assertEqual(to_native(7), NativeValue(NativeKind.INT64, 7))
        self.assertEqual(to_native(1.5), NativeValue(NativeKind.DOUBLE, 1.5))
        self.assertEqual(to_native("x"), NativeValue(NativeKind.STRING, "x"))
        self.assertEqual(to_native(bytearray(b"ab")), NativeValue(NativeKind.BINARY, b"ab"))

        self.assertEqual(from_native(to_native(7), int), 7)
        self.assertEqual(from_native(to_native(7), "int64"), 7)
        self.assertIs(from_native(to_native(False), bool), False)

    def test_timestamps_are_stored_in_utc(self) -> None:
        naive = datetime(2024, 1, 1, 8, 0, 0)
        aware = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone(timedelta(hours=2)))

        naive_native = to_native(naive)
        aware_native = to_native(aware)

        self.assertEqual(naive_native.kind, NativeKind.DATETIME)
        self.assertEqual(naive_native.value, datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc))
        self.assertEqual(aware_native.value.utcoffset(), timedelta(0))
        self.assertEqual(aware_native.value, aware)

    def test_naive_read_discards_stored_offset(self) -> None:
        stored = NativeValue(
            NativeKind.DATETIME,
            datetime(2024, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2))),
        )

        restored = from_native(stored, datetime)

        self.assertEqual(restored, datetime(2024, 1, 1, 10, 0))
        self.assertIsNone(restored.tzinfo)

    def test_aware_read_of_naive_payload_assumes_utc(self) -> None:
        stored = NativeValue(NativeKind.DATETIME, datetime(2024, 1, 1, 10, 0))
        restored = from_native(stored, FieldType.DATETIME_OFFSET)
        self.assertEqual(restored, datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc))


class TypeConverterErrorTests(unittest.TestCase):
    def test_unsupported_runtime_and_target_types(self) -> None:
        with self.assertRaises(UnsupportedTypeError):
            to_native(Decimal("1.5"))
        with self.assertRaises(UnsupportedTypeError):
            to_native([1, 2])
        with self.assertRaises(UnsupportedTypeError):
            from_native(NativeValue(NativeKind.STRING, "1.5"), Decimal)
        with self.assertRaises(UnsupportedTypeError):
            from_native(NativeValue(NativeKind.STRING, "x"), "decimal")

    def test_value_must_match_declared_type(self) -> None:
        with self.assertRaises(UnsupportedTypeError):
            to_native(True, FieldType.INT64)
        with self.assertRaises(UnsupportedTypeError):
            to_native("1", FieldType.INT32)
        with self.assertRaises(UnsupportedTypeError):
            to_native(1, FieldType.STRING)

    def test_integer_width_is_enforced(self) -> None:
        with self.assertRaises(ValueError):
            to_native(2**31, FieldType.INT32)
        with self.assertRaises(ValueError):
            to_native(2**63)

    def test_missing_payload_for_requested_kind(self) -> None:
        with self.assertRaises(MissingValueError):
            from_native(NativeValue(NativeKind.STRING, "5"), int)
        with self.assertRaises(MissingValueError):
            from_native(NativeValue(NativeKind.INT32, 5), FieldType.INT64)
        with self.assertRaises(MissingValueError):
            from_native(NativeValue(NativeKind.INT64, None), int)

    def test_none_cannot_be_converted(self) -> None:
        with self.assertRaises(MissingValueError):
            to_native(None)


if __name__ == "__main__":
    unittest.main()
