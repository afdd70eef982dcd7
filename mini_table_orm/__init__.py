"""Dataclass mapping and paged queries over partitioned table stores."""

from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all
from .ports import AsyncAzureTableStore, AzureTableStore, InMemoryTableStore

__all__ = [*_core_all, "InMemoryTableStore", "AzureTableStore", "AsyncAzureTableStore"]
