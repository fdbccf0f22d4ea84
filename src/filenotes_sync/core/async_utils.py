"""Bridge between the async MCP handlers and the blocking replication code."""

import asyncio
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_sync(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Await ``func(*args, **kwargs)`` on a worker thread.

    A replication run walks the notes directory and talks HTTP to the
    provider; doing that on the event loop would stall the stdio transport
    for the whole run.  Exceptions raised by *func* propagate unchanged.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
