"""ASGI handler — translates ASGI scope/messages to warble types.

The only component that touches raw ASGI directly. Converts the scope to
a typed Request, runs it through the middleware chain, and sends the
Response back through ASGI send().
"""

from collections.abc import Callable
from typing import Any

from warble._internal.asgi import Receive, Scope, Send
from warble.errors import HTTPError, NotFound
from warble.http.request import Request
from warble.http.response import Response
from warble.middleware.protocol import Next
from warble.server.errors import handle_http_error, handle_internal_error
from warble.server.sender import send_response


async def not_found(request: Request) -> Response:
    """Innermost handler: nothing in the chain claimed the request."""
    raise NotFound(f"{request.method} {request.path}")


def build_chain(middleware: tuple[Callable[..., Any], ...], endpoint: Next = not_found) -> Next:
    """Wrap *middleware* around *endpoint*, first entry outermost."""
    handler = endpoint
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    chain: Next,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)

    try:
        response = await chain(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)

    await send_response(response, send, method=request.method)
