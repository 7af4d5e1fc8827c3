"""
Helpers for calling client libraries that may be synchronous or asynchronous.
"""
import asyncio
import inspect
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


async def resolve(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def call_client(func: Callable, *args, **kwargs) -> Any:
    """
    Call a client method without blocking the event loop.

    Coroutine functions are awaited directly. Plain callables (pyicloud and
    requests are blocking) run in a worker thread; if they hand back an
    awaitable it is awaited as well.

    Args:
        func: Method or factory to call
        *args: Positional arguments for ``func``
        **kwargs: Keyword arguments for ``func``

    Returns:
        The resolved return value of ``func``
    """
    if inspect.iscoroutinefunction(func):
        return await func(*args, **kwargs)
    result = await asyncio.to_thread(func, *args, **kwargs)
    return await resolve(result)


async def close_client(client: Any) -> None:
    """
    Release a client handle if it exposes ``close()``.

    A failing close is logged and not raised, so it never replaces the
    error or result of the invocation that owned the client.
    """
    if client is None:
        return
    close = getattr(client, 'close', None)
    if not callable(close):
        return
    try:
        await call_client(close)
    except Exception as e:
        logger.warning(f"Error closing {type(client).__name__}: {e}")
