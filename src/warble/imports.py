"""Import graph tracker.

Remembers, per compiled entry stylesheet, the files its last successful
compile pulled in through ``@import``/``@use``. The staleness check stats
those files to decide whether a cached artifact is still valid.

State lives for as long as the owning middleware. It is never cleared:
after a restart every entry compiles once, which rebuilds the graph, and
from then on modification times are enough.
"""

from collections.abc import Iterable


class _Pending:
    __slots__ = ()

    def __repr__(self) -> str:
        return "PENDING"


PENDING = _Pending()


class ImportGraph:
    """Map of entry source path to the ordered files it transitively imports.

    ``lookup`` only returns a list once a compile of the entry has completed.
    While a compile is in flight, or after it failed, the entry reads as
    untracked so the next request compiles again.

    There is no lock. ``record_pending`` must run before the compile call
    suspends; a second request for the same entry arriving meanwhile sees it
    as untracked and compiles too.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, ...] | _Pending] = {}

    def record_pending(self, entry: str) -> None:
        """Mark *entry* as being compiled."""
        self._entries[entry] = PENDING

    def record_dependencies(self, entry: str, paths: Iterable[str]) -> None:
        """Replace the record for *entry* with a fresh list of imported files."""
        self._entries[entry] = tuple(paths)

    def lookup(self, entry: str) -> tuple[str, ...] | None:
        """Return the recorded imports, or ``None`` if untracked or pending."""
        record = self._entries.get(entry)
        if record is None or record is PENDING:
            return None
        return record  # type: ignore[return-value]

    def is_pending(self, entry: str) -> bool:
        return self._entries.get(entry) is PENDING

    def __contains__(self, entry: object) -> bool:
        return entry in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ImportGraph({len(self._entries)} entries)"
