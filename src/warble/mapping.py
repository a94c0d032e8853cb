"""Request path → stylesheet path mapping.

Pure path arithmetic, no filesystem access. A request for ``/css/app.css``
maps to ``<dest>/css/app.css`` for the compiled artifact and
``<src>/css/app.scss`` for its source.
"""

import posixpath
from dataclasses import dataclass
from pathlib import Path

from warble.config import SassConfig

CSS_EXTENSION = ".css"


@dataclass(frozen=True, slots=True)
class PathMapping:
    """Where a requested stylesheet lives on disk."""

    output_path: str
    css_path: Path
    source_path: Path

    @property
    def source_dir(self) -> Path:
        """Extra lookup root for the entry's relative imports."""
        return self.source_path.parent


def strip_prefix(path: str, prefix: str) -> str | None:
    """Remove *prefix* from *path*; ``None`` if the path lies outside it."""
    if not prefix:
        return path
    if not path.startswith(prefix):
        return None
    return path[len(prefix) :]


def is_stylesheet_request(path: str) -> bool:
    return path.endswith(CSS_EXTENSION)


def map_paths(output_path: str, config: SassConfig) -> PathMapping:
    """Map a prefix-stripped request path onto source and destination files.

    The path is normalized under a virtual root first, so ``..`` segments
    cannot climb out of ``src`` or ``dest``.
    """
    relative = posixpath.normpath("/" + output_path.lstrip("/")).lstrip("/")

    if config.root is not None:
        # Requests may spell out the dest directory; it is re-added below
        dest_segment = str(config.dest).strip("/")
        if dest_segment and (relative == dest_segment or relative.startswith(dest_segment + "/")):
            relative = relative[len(dest_segment) :].lstrip("/")
        dest_base = Path(config.root) / config.dest  # type: ignore[operator]
        src_base = Path(config.root) / config.src
    else:
        dest_base = Path(config.dest)  # type: ignore[arg-type]
        src_base = Path(config.src)

    source_relative = relative[: -len(CSS_EXTENSION)] + config.syntax_extension

    return PathMapping(
        output_path=output_path,
        css_path=(dest_base / relative).resolve(),
        source_path=(src_base / source_relative).resolve(),
    )
