"""Immutable HTTP request.

Frozen metadata taken from the ASGI scope. Stylesheet middleware only ever
looks at the method, the path and a couple of headers, so the body is not
exposed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from warble._internal.asgi import HTTPScope
from warble.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request."""

    method: str
    path: str
    headers: Headers
    query_string: bytes = b""
    root_path: str = ""
    http_version: str = "1.1"

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    @classmethod
    def from_asgi(cls, scope: dict[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        parsed = HTTPScope.from_scope(scope)
        return cls(
            method=parsed.method.upper(),
            path=parsed.path,
            headers=Headers(parsed.headers),
            query_string=parsed.query_string,
            root_path=parsed.root_path,
            http_version=parsed.http_version,
        )
