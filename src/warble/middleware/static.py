"""Static file serving middleware.

Serves compiled artifacts (and anything else) from a directory for
matching URL prefixes. Sits behind :class:`~warble.middleware.sass.SassMiddleware`
in file mode, which writes the css and then falls through to this.

Falls through to the next handler for non-matching paths.
"""

import mimetypes
from email.utils import formatdate, parsedate_to_datetime
from pathlib import Path

import anyio

from warble.errors import HTTPError
from warble.http.request import Request
from warble.http.response import Response
from warble.middleware.protocol import Next


class StaticFiles:
    """Middleware that serves static files from a directory.

    Files are served for paths matching the configured prefix.
    Non-matching paths, and missing files, fall through.

    Security: resolves symlinks and verifies the final path
    is within the configured directory to prevent path traversal.

    Usage::

        app.add_middleware(SassMiddleware("styles", dest="public"))
        app.add_middleware(StaticFiles(directory="public", prefix="/"))
    """

    __slots__ = ("_cache_control", "_directory", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/static",
        *,
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._cache_control = cache_control

        # Root prefix "/" normalizes to "" (every path is a candidate)
        stripped = "/" + prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    async def __call__(self, request: Request, next: Next) -> Response:
        """Serve a static file or fall through."""
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        path = request.path
        if self._prefix:
            if not path.startswith(self._prefix + "/"):
                return await next(request)
            relative = path[len(self._prefix) :].lstrip("/")
        else:
            relative = path.lstrip("/")

        if not relative:
            return await next(request)

        file_path = (self._directory / relative).resolve()
        if not file_path.is_relative_to(self._directory):
            raise HTTPError(status=403, detail="Forbidden")

        target = anyio.Path(file_path)
        if not await target.is_file():
            return await next(request)

        stat = await target.stat()
        last_modified = formatdate(stat.st_mtime, usegmt=True)
        if _not_modified(request, int(stat.st_mtime)):
            return (
                Response(body=b"", status=304)
                .with_header("Last-Modified", last_modified)
                .with_header("Cache-Control", self._cache_control)
            )

        content_type, _ = mimetypes.guess_type(str(file_path))
        body = await target.read_bytes()
        return (
            Response(body=body, content_type=content_type or "application/octet-stream")
            .with_header("Last-Modified", last_modified)
            .with_header("Cache-Control", self._cache_control)
        )


def _not_modified(request: Request, mtime: int) -> bool:
    """True if the client's ``If-Modified-Since`` copy is still current."""
    since = request.headers.get("if-modified-since")
    if not since:
        return False
    try:
        parsed = parsedate_to_datetime(since)
    except (TypeError, ValueError):
        return False
    return mtime <= int(parsed.timestamp())
