"""Invoke helpers — call sync or async callables uniformly.

Error handlers and compilers may be ``def`` or ``async def``. Blocking
callables are pushed to a worker thread so the event loop keeps serving
other requests while libsass runs.

Usage::

    from warble._internal.invoke import invoke, invoke_blocking

    response = await invoke(handler, request, exc)
    result = await invoke_blocking(compiler.render, options)
"""

import inspect
from functools import partial
from typing import Any

import anyio.to_thread


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


async def invoke_blocking(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Run *func* off the event loop unless it is a coroutine function.

    Coroutine functions are awaited in place. Anything else runs in an
    anyio worker thread; an awaitable it returns is awaited afterwards.
    """
    if inspect.iscoroutinefunction(func):
        return await func(*args, **kwargs)
    result = await anyio.to_thread.run_sync(partial(func, *args, **kwargs))
    if inspect.isawaitable(result):
        result = await result
    return result
