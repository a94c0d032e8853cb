"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    SassMiddleware -- Compile .scss/.sass to .css on request, cached on disk
    StaticFiles -- Serve static files (compiled artifacts) from a directory
"""

from warble.middleware.protocol import Middleware, Next
from warble.middleware.sass import SassMiddleware, sass_middleware
from warble.middleware.static import StaticFiles

__all__ = [
    "Middleware",
    "Next",
    "SassMiddleware",
    "StaticFiles",
    "sass_middleware",
]
