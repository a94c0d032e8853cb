"""Warble application class.

A minimal ASGI host for stylesheet middleware: an ordered middleware chain,
an innermost fallback handler, and error handlers.

Mutable during setup (middleware, error handlers). Frozen at runtime when
``__call__()`` is first invoked.
"""

import threading
from collections.abc import Callable
from typing import Any

from warble._internal.asgi import Receive, Scope, Send
from warble._internal.invoke import invoke
from warble._internal.types import ErrorHandler
from warble.errors import ConfigurationError
from warble.http.request import Request
from warble.http.response import Response
from warble.middleware.protocol import Middleware, Next
from warble.server.handler import build_chain, handle_request, not_found


class App:
    """The warble application.

    Usage::

        app = App()
        app.add_middleware(SassMiddleware("styles", dest="public"))
        app.add_middleware(StaticFiles(directory="public", prefix="/"))

        @app.error(CompileError)
        def compile_failed(request, exc):
            return Response(exc.diagnostic(), status=500)

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one thread builds the middleware chain.
    """

    __slots__ = (
        "_chain",
        "_error_handlers",
        "_fallback",
        "_freeze_lock",
        "_frozen",
        "_middleware_list",
        "debug",
    )

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._fallback: Next = not_found
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._chain: Next | None = None

    # -- Setup --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline (first added runs first)."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    def fallback(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register the handler that runs when every middleware falls through.

        It receives the request and may return a ``Response`` or a ``str``.
        Without one, fall-through requests end in a 404.
        """
        self._check_not_frozen()

        async def endpoint(request: Request) -> Response:
            result = await invoke(func, request)
            if isinstance(result, Response):
                return result
            return Response(body=str(result))

        self._fallback = endpoint
        return func

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._chain is not None

        await handle_request(
            scope,
            receive,
            send,
            chain=self._chain,
            error_handlers=self._error_handlers,
            debug=self.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Acknowledge the lifespan protocol; the app has no startup work."""
        self._ensure_frozen()
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._chain = build_chain(tuple(self._middleware_list), self._fallback)
            self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify the app after it has started serving requests."
            raise ConfigurationError(msg)
