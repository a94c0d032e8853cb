"""Typed ASGI definitions.

Raw ASGI aliases plus a typed view of the HTTP scope for internal use.
Users never see these.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass
from typing import Any, TypeAlias

# Raw ASGI 3.0 types
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class HTTPScope:
    """The parts of an ASGI HTTP scope a stylesheet request needs."""

    method: str
    path: str
    query_string: bytes
    root_path: str
    http_version: str
    headers: tuple[tuple[bytes, bytes], ...]

    @classmethod
    def from_scope(cls, scope: Scope) -> "HTTPScope":
        """Parse raw ASGI scope into typed object."""
        return cls(
            method=scope["method"],
            path=scope["path"],
            query_string=scope.get("query_string", b""),
            root_path=scope.get("root_path", ""),
            http_version=scope.get("http_version", "1.1"),
            headers=tuple(scope.get("headers", ())),
        )
