"""Sass middleware configuration.

SassConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. Options the middleware does not recognise are kept
in ``extra`` and forwarded verbatim to the compiler.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from warble._internal.types import CompilerFactory, ErrorCallback, LogFunc
from warble.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class SassConfig:
    """Sass middleware configuration. Immutable after creation.

    Only ``src`` is required::

        config = SassConfig(src="styles", dest="public", prefix="/css")

    ``force`` recompiles on every request. ``response`` writes the compiled
    css straight into the HTTP response instead of the ``dest`` tree, which
    also recompiles on every request.
    """

    # Directories
    src: str | Path = ""
    dest: str | Path | None = None  # Defaults to src
    root: str | Path | None = None  # Base path for both src and dest

    # Request matching
    prefix: str = ""

    # Behaviour
    force: bool = False
    debug: bool = False
    indented_syntax: bool = False
    response: bool = False

    # Output
    source_map: bool | str | Path = False  # True writes "<css>.map"
    max_age: int = 0
    include_paths: tuple[str | Path, ...] = ()
    out_file: str | Path | None = None

    # Hooks
    log: LogFunc | None = None
    error: ErrorCallback | None = None
    compiler_factory: CompilerFactory | None = None

    # Forwarded verbatim to the compiler (e.g. output_style, precision)
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.src:
            msg = 'Sass middleware requires a "src" directory.'
            raise ConfigurationError(msg)
        if self.max_age < 0:
            msg = f"max_age must be >= 0, got {self.max_age}"
            raise ConfigurationError(msg)
        if self.dest is None:
            object.__setattr__(self, "dest", self.src)
        object.__setattr__(self, "include_paths", tuple(self.include_paths))

    @classmethod
    def from_options(cls, src: str | Path | None = None, /, **options: Any) -> SassConfig:
        """Build a config from loose keyword options.

        Accepts a bare source directory as the only argument. Keywords that
        are not fields of ``SassConfig`` land in ``extra``::

            SassConfig.from_options("styles", output_style="compressed")
        """
        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in options.items() if key in known}
        unknown = {key: value for key, value in options.items() if key not in known}
        if src is not None:
            kwargs["src"] = src
        if unknown:
            kwargs["extra"] = {**kwargs.get("extra", {}), **unknown}
        return cls(**kwargs)

    @property
    def syntax_extension(self) -> str:
        """File extension of stylesheet sources."""
        return ".sass" if self.indented_syntax else ".scss"

    @property
    def always_compile(self) -> bool:
        """True when every matching request recompiles."""
        return self.force or self.response

    @property
    def source_maps_enabled(self) -> bool:
        return bool(self.source_map)
