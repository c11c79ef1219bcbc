"""Async helpers for running interface coroutines from synchronous code."""

import asyncio
from typing import Any, Coroutine, TypeVar

T = TypeVar("T")


def create_event_loop() -> asyncio.AbstractEventLoop:
    """Create a fresh event loop and make it current for this thread."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    return loop


def run_coroutine(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine on a fresh event loop.

    Flask request handlers are synchronous; each request gets its own loop so
    no loop state leaks between requests. Leftover tasks are cancelled before
    the loop is closed.
    """
    loop = create_event_loop()

    try:
        return loop.run_until_complete(coro)
    finally:
        pending = asyncio.all_tasks(loop)
        for task in pending:
            task.cancel()

        if pending:
            loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))

        loop.run_until_complete(loop.shutdown_asyncgens())
        asyncio.set_event_loop(None)
        loop.close()
