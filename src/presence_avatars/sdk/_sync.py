"""Background event loop for the blocking resolver wrappers.

All blocking calls run on one long-lived event loop in a daemon thread.
The loop outlives individual calls so that a pooled httpx client
created during one call stays usable in the next, which would not be
the case with a fresh ``asyncio.run()`` per call.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Coroutine, TypeVar

T = TypeVar("T")

_loop: asyncio.AbstractEventLoop | None = None
_lock = threading.Lock()


def _background_loop() -> asyncio.AbstractEventLoop:
    """Get or start the shared background loop."""
    global _loop
    with _lock:
        if _loop is None or _loop.is_closed():
            _loop = asyncio.new_event_loop()
            thread = threading.Thread(
                target=_loop.run_forever,
                name="presence-avatars-loop",
                daemon=True,
            )
            thread.start()
    return _loop


def run_sync(coro: Coroutine[..., ..., T]) -> T:
    """Run *coro* on the background loop and block until it finishes.

    Exceptions raised by the coroutine propagate to the caller.  Must
    not be called from a coroutine running on the background loop itself.
    """
    loop = _background_loop()
    future = asyncio.run_coroutine_threadsafe(coro, loop)
    return future.result()
