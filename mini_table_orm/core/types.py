"""Shared core type aliases used across contracts, mapper, and ports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Mapping

if TYPE_CHECKING:
    from .native import NativeValue

NativeRow = Mapping[str, "NativeValue"]
MutableNativeRow = Dict[str, "NativeValue"]

PARTITION_KEY = "PartitionKey"
ROW_KEY = "RowKey"
