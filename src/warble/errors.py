"""Warble exception hierarchy.

Shared across the app, the request handler, and middleware so every module
raises and catches the same types.
"""

from __future__ import annotations

from dataclasses import dataclass

# Placeholder file name compilers report when the source came from a string
_ANONYMOUS_FILES = frozenset({"", "stdin"})


class WarbleError(Exception):
    """Base for all warble-specific errors."""


class ConfigurationError(WarbleError):
    """Raised when middleware or app configuration is invalid.

    Raised at construction time, never deferred to the first request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WarbleError):
    """An error that maps directly to an HTTP status code.

    Raised by middleware or the innermost handler. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — nothing in the pipeline handled the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class CompileError(WarbleError):
    """A stylesheet failed to compile.

    Carries the position the compiler reported. ``file`` may be ``None``
    or a placeholder such as ``"stdin"``; :meth:`diagnostic` falls back to
    the entry path the middleware resolved in that case.
    """

    def __init__(
        self,
        message: str,
        *,
        file: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.file = file
        self.line = line
        self.column = column
        self.source_path: str | None = None

    def location(self, source_path: str | None = None) -> str:
        """Return ``file:line:column`` for this error.

        Line and column are left out when the compiler did not report them.
        """
        file = self.file
        if file is None or file in _ANONYMOUS_FILES:
            file = source_path or self.source_path or "<unknown>"
        parts = [file]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)

    def diagnostic(self, source_path: str | None = None) -> str:
        """Human-readable report: the message, then where it happened."""
        return f"{self.message.lstrip(' ')}\n\nin {self.location(source_path)}"

    def __str__(self) -> str:
        if self.source_path is not None:
            return self.diagnostic()
        return self.message
