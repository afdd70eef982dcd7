"""Internal async helpers shared by async modules."""

from __future__ import annotations

import inspect
from typing import Any, Callable


async def _maybe_await(value: Any) -> Any:
    """Await awaitables and return non-awaitable values unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def _call_store(method: Callable[..., Any], *args: Any) -> Any:
    """Call a sync or async store method and return its result."""
    return await _maybe_await(method(*args))
