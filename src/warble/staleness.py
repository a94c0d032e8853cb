"""Staleness detection for compiled stylesheets.

Decides, for one mapped request, whether the artifact on disk can be served
as is. Checks run in order and stop at the first that demands a compile:

1. ``force``/``response`` mode — always compile.
2. The entry has no recorded imports (first request since start, a compile
   in flight, or the last compile failed) — compile.
3. The artifact is missing, or the source is strictly newer — compile.
4. Any recorded import is gone or at least as new as the artifact — compile.

Otherwise the artifact is fresh.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

import anyio

from warble.imports import ImportGraph
from warble.mapping import PathMapping


class Reason(enum.Enum):
    FORCED = "forced"
    UNTRACKED = "untracked"
    MISSING = "not found"
    MODIFIED = "modified"
    IMPORT_MODIFIED = "modified import"
    SOURCE_UNREADABLE = "source unreadable"
    FRESH = "fresh"


@dataclass(frozen=True, slots=True)
class Decision:
    """Outcome of a staleness check.

    ``changed`` lists the imports found modified (usually just the first).
    ``error`` holds the failure when the source could not be stat'ed; the
    request then passes through without compiling.
    """

    compile: bool
    reason: Reason
    changed: tuple[str, ...] = ()
    error: OSError | None = None


class StalenessResolver:
    """Compares modification times of an entry, its imports, and its artifact."""

    __slots__ = ("_always_compile", "_imports")

    def __init__(self, imports: ImportGraph, *, always_compile: bool = False) -> None:
        self._imports = imports
        self._always_compile = always_compile

    async def decide(self, mapping: PathMapping) -> Decision:
        """Decide whether *mapping* needs a compile.

        Raises:
            OSError: The artifact could not be stat'ed for a reason other
                than not existing.
        """
        if self._always_compile:
            return Decision(compile=True, reason=Reason.FORCED)

        source = str(mapping.source_path)
        recorded = self._imports.lookup(source)
        if recorded is None:
            return Decision(compile=True, reason=Reason.UNTRACKED)

        try:
            source_stat = await anyio.Path(mapping.source_path).stat()
        except OSError as exc:
            return Decision(compile=False, reason=Reason.SOURCE_UNREADABLE, error=exc)

        try:
            css_stat = await anyio.Path(mapping.css_path).stat()
        except FileNotFoundError:
            return Decision(compile=True, reason=Reason.MISSING)

        if source_stat.st_mtime_ns > css_stat.st_mtime_ns:
            return Decision(compile=True, reason=Reason.MODIFIED)

        changed = await changed_imports(recorded, css_stat.st_mtime_ns)
        if changed:
            return Decision(compile=True, reason=Reason.IMPORT_MODIFIED, changed=changed)
        return Decision(compile=False, reason=Reason.FRESH)


async def changed_imports(paths: Sequence[str], since_ns: int) -> tuple[str, ...]:
    """Return imports modified at or after *since_ns*, or no longer stat-able.

    Every path is stat'ed concurrently. The first change cancels the checks
    still outstanding; an empty result means every check completed and
    reported unchanged.
    """
    if not paths:
        return ()

    changed: list[str] = []

    async def check(path: str, scope: anyio.CancelScope) -> None:
        try:
            stat = await anyio.Path(path).stat()
        except OSError:
            # A deleted import must trigger a rebuild, not serve stale css
            pass
        else:
            if stat.st_mtime_ns < since_ns:
                return
        changed.append(path)
        scope.cancel()

    async with anyio.create_task_group() as tg:
        for path in paths:
            tg.start_soon(check, path, tg.cancel_scope)

    return tuple(changed)
