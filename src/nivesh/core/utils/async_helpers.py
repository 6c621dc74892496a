"""Bridge from synchronous callers (the CLI) into the async engine."""

import asyncio
from collections.abc import Coroutine
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

T = TypeVar("T")


def run_async_safely(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run ``coro`` to completion and return its result.

    Outside an event loop this is ``asyncio.run``.  Inside a running loop
    (a notebook, a test harness) the coroutine gets its own loop on a worker
    thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1) as executor:
        return executor.submit(asyncio.run, coro).result()
