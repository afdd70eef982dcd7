"""Public port exports for concrete adapter implementations."""

from .table import AsyncAzureTableStore, AzureTableStore, InMemoryTableStore

__all__ = [
    "InMemoryTableStore",
    "AzureTableStore",
    "AsyncAzureTableStore",
]
