"""Shared type aliases used across warble modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Error handler — receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]

# Debug sink — receives (level, key, value)
LogFunc: TypeAlias = Callable[[str, str, str], None]

# Error sink — receives every failure the sass middleware reports
ErrorCallback: TypeAlias = Callable[[BaseException], None]

# Returns an object satisfying the Compiler protocol
CompilerFactory: TypeAlias = Callable[[], Any]
