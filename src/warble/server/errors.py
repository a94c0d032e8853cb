"""Error handling pipeline for warble requests.

Maps HTTPError exceptions and unexpected failures (compile errors included)
to Response objects, using registered error handlers or plain-text defaults.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from warble._internal.invoke import invoke
from warble.errors import CompileError, HTTPError
from warble.http.request import Request
from warble.http.response import Response

logger = logging.getLogger("warble.server")


def find_error_handler(
    exc: Exception,
    error_handlers: dict[int | type, Callable[..., Any]],
    status: int,
) -> Callable[..., Any] | None:
    """Most specific handler for *exc*: by exception class (MRO order), then status."""
    for cls in type(exc).__mro__:
        handler = error_handlers.get(cls)
        if handler is not None:
            return handler
    return error_handlers.get(status)


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args,
    and may be sync or async. A ``str`` result becomes a plain-text body.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = await invoke(handler, request, exc)
    elif len(params) == 1:
        result = await invoke(handler, request)
    else:
        result = await invoke(handler)

    if isinstance(result, Response):
        return result
    return Response(body=str(result))


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    handler = find_error_handler(exc, error_handlers, exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = Response(body=detail).with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Handle unexpected exceptions (and compile failures) as 500 errors."""
    if isinstance(exc, CompileError):
        logger.error("500 %s %s — %s", request.method, request.path, exc)
    else:
        logger.exception("500 %s %s", request.method, request.path)

    handler = find_error_handler(exc, error_handlers, 500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(500)
        return response

    if debug:
        return Response(body=str(exc) or type(exc).__name__, status=500)
    return Response(body="Internal Server Error", status=500)
