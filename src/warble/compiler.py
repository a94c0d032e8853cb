"""Stylesheet compiler interface and the libsass implementation.

The middleware only needs one capability from a compiler::

    render(options: RenderOptions) -> RenderResult

``render`` raises :class:`~warble.errors.CompileError` on invalid input.
It may be a plain method (run in a worker thread) or a coroutine.

:class:`LibSassCompiler` is the default. libsass does not report which
files an entry pulled in, so an importer hook records every ``@import``
and resolves it the way libsass does, then hands the import back to
libsass untouched.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import sass

from warble.errors import CompileError

_IMPORT_EXTENSIONS = (".scss", ".sass", ".css")

# "on line 3:7 of styles/broken.scss" (column and trailing context optional)
_POSITION_RE = re.compile(r"^\s*on line (\d+)(?::(\d+))? of ([^,\n]+)", re.MULTILINE)


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Everything a compiler needs for one entry stylesheet.

    ``out_file`` is only used to compute relative source-map references;
    compilers never write it.
    """

    file: str
    out_file: str
    include_paths: tuple[str, ...] = ()
    indented_syntax: bool = False
    source_map: str | None = None  # Map file path; None disables maps
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Compiled css plus the files that went into it."""

    css: str
    source_map: str | None = None
    included_files: tuple[str, ...] = ()


class Compiler(Protocol):
    """Anything that turns an entry stylesheet into css."""

    def render(self, options: RenderOptions) -> RenderResult | Awaitable[RenderResult]: ...


class LibSassCompiler:
    """Compiler backed by libsass (the ``sass`` module).

    Pass-through options in ``RenderOptions.extra`` go straight to
    ``sass.compile`` (``output_style``, ``precision``, ``source_comments``...).
    """

    __slots__ = ()

    def render(self, options: RenderOptions) -> RenderResult:
        collector = ImportCollector(options.include_paths)

        # libsass picks the indented syntax from the ".sass" extension of filename;
        # its indented flag only applies to string input.
        kwargs: dict[str, Any] = dict(options.extra)
        kwargs["filename"] = options.file
        kwargs["include_paths"] = list(options.include_paths)
        kwargs["importers"] = [(0, collector.importer)]
        if options.source_map is not None:
            kwargs["source_map_filename"] = options.source_map
            kwargs["output_filename_hint"] = options.out_file

        try:
            compiled = sass.compile(**kwargs)
        except sass.CompileError as exc:
            raise parse_compile_error(str(exc)) from exc

        if options.source_map is not None:
            css, source_map = compiled
        else:
            css, source_map = compiled, None
        return RenderResult(css=css, source_map=source_map, included_files=collector.files)


class ImportCollector:
    """Records the files an entry imports while libsass compiles it."""

    __slots__ = ("_files", "_include_paths")

    def __init__(self, include_paths: Sequence[str] = ()) -> None:
        self._include_paths = tuple(include_paths)
        self._files: dict[str, None] = {}

    def importer(self, path: str, prev: str) -> None:
        """libsass importer hook; always defers to libsass's own resolution."""
        resolved = resolve_import(path, prev, self._include_paths)
        if resolved is not None:
            self._files.setdefault(resolved, None)

    @property
    def files(self) -> tuple[str, ...]:
        """Resolved imports, first-seen order, no duplicates."""
        return tuple(self._files)


def resolve_import(target: str, prev: str, include_paths: Sequence[str] = ()) -> str | None:
    """Resolve an ``@import`` target to an absolute file path.

    Looks next to the importing file first, then in each include path,
    trying partials (``_name``), each stylesheet extension, and
    ``_index``/``index`` files. Returns ``None`` for remote urls and
    anything that does not exist.
    """
    if target.startswith(("http://", "https://", "//", "url(")):
        return None

    bases: list[Path] = []
    if prev and prev != "stdin":
        bases.append(Path(prev).parent)
    bases.extend(Path(p) for p in include_paths)

    for base in bases:
        for candidate in _candidates(base / target):
            if candidate.is_file():
                return str(candidate.resolve())
    return None


def _candidates(path: Path) -> Iterator[Path]:
    if path.suffix in _IMPORT_EXTENSIONS:
        yield path
        yield path.with_name("_" + path.name)
        return
    for ext in _IMPORT_EXTENSIONS:
        yield path.with_name(path.name + ext)
        yield path.with_name("_" + path.name + ext)
    for ext in _IMPORT_EXTENSIONS:
        yield path / f"_index{ext}"
        yield path / f"index{ext}"


def parse_compile_error(text: str) -> CompileError:
    """Turn a libsass error report into a :class:`CompileError`.

    libsass reports look like::

        Error: Invalid CSS after "a {": expected "}", was ""
                on line 1:4 of styles/broken.scss
        >> a {
    """
    match = _POSITION_RE.search(text)
    if match is None:
        return CompileError(text.strip())

    message = text[: match.start()].strip()
    if message.startswith("Error: "):
        message = message[len("Error: ") :]
    line, column, file = match.groups()
    return CompileError(
        message or text.strip(),
        file=file.strip(),
        line=int(line),
        column=int(column) if column is not None else None,
    )
