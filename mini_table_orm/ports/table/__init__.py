"""Table store adapter exports."""

from .azure import AzureTableStore
from .azure_async import AsyncAzureTableStore
from .in_memory import InMemoryTableStore

__all__ = [
    "InMemoryTableStore",
    "AzureTableStore",
    "AsyncAzureTableStore",
]
