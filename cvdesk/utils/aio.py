"""Bridge between the event loop and blocking adapter calls.

Use cases own all state on the loop thread. Ports are blocking (``requests``),
so each call runs on an executor thread and the coroutine suspends only at that
boundary.
"""

from __future__ import annotations

import asyncio
import functools
from concurrent.futures import Executor
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


async def run_blocking(
    executor: Optional[Executor], fn: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run ``fn(*args, **kwargs)`` on ``executor`` (default pool when ``None``)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, functools.partial(fn, *args, **kwargs))


def loop_callback(
    loop: asyncio.AbstractEventLoop, fn: Callable[..., None]
) -> Callable[..., None]:
    """Wrap ``fn`` so calls from any thread are applied on ``loop``."""

    def _schedule(*args: Any) -> None:
        if loop.is_closed():
            return
        loop.call_soon_threadsafe(fn, *args)

    return _schedule


__all__ = ["loop_callback", "run_blocking"]
