"""Test doubles and filesystem helpers shared by the test modules."""

import os
from pathlib import Path

from warble.compiler import LibSassCompiler, RenderOptions, RenderResult


def set_mtime(path: Path, seconds: float) -> None:
    """Set both atime and mtime of *path* to *seconds* since the epoch."""
    ns = int(seconds * 1_000_000_000)
    os.utime(path, ns=(ns, ns))


class CountingCompiler:
    """Delegates to libsass and records every render call."""

    def __init__(self) -> None:
        self.calls: list[RenderOptions] = []
        self._inner = LibSassCompiler()

    def render(self, options: RenderOptions) -> RenderResult:
        self.calls.append(options)
        return self._inner.render(options)

    def factory(self) -> "CountingCompiler":
        return self


class FakeCompiler:
    """Returns canned css without touching libsass."""

    def __init__(
        self,
        css: str = "a{}",
        included: tuple[str, ...] = (),
        source_map: str | None = None,
    ) -> None:
        self.css = css
        self.included = included
        self.source_map = source_map
        self.calls: list[RenderOptions] = []

    def render(self, options: RenderOptions) -> RenderResult:
        self.calls.append(options)
        return RenderResult(css=self.css, source_map=self.source_map, included_files=self.included)

    def factory(self) -> "FakeCompiler":
        return self
