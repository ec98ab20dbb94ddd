"""Invoke helpers — call sync or async producers uniformly.

Producers can be ``def`` or ``async def``. Any code that calls a
user-provided producer from async code must handle both cases. This
module keeps the sync/async check in exactly one place.

Usage::

    from trickle._internal.invoke import invoke

    value = await invoke(producer)
"""

import inspect
from collections.abc import Callable
from typing import Any

import anyio.to_thread


async def invoke(producer: Callable[[], Any], *, offload: bool = True) -> Any:
    """Call *producer* and await the result if it's awaitable.

    ``async def`` producers are awaited on the running loop. Plain
    callables run in a worker thread when *offload* is true, so blocking
    I/O inside them does not stall the event loop::

        # sync — runs in a worker thread
        streamer.add_placeholder("stats", lambda: db.load_stats())

        # async — awaited directly
        async def load_feed():
            return await client.get_feed()
        streamer.add_placeholder("feed", load_feed)
    """
    if inspect.iscoroutinefunction(producer):
        return await producer()
    if offload:
        result = await anyio.to_thread.run_sync(producer)
    else:
        result = producer()
    if inspect.isawaitable(result):
        result = await result
    return result
