"""Lazy Sass compilation middleware.

Handles GET/HEAD requests for ``.css`` paths. For each one it maps the path
onto a ``.scss`` (or ``.sass``) source, asks the staleness resolver whether
the compiled artifact is still valid, and compiles when it is not.

File mode (default) writes the css, and optionally its source map, under
``dest`` and then falls through so a static file server further down the
chain serves it. Response mode returns the compiled css directly and never
touches ``dest``.

Everything else falls through to the next handler.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import anyio

from warble._internal.invoke import invoke_blocking
from warble.compiler import LibSassCompiler, RenderOptions, RenderResult
from warble.config import SassConfig
from warble.errors import CompileError, ConfigurationError
from warble.http.request import Request
from warble.http.response import Response
from warble.imports import ImportGraph
from warble.mapping import PathMapping, is_stylesheet_request, map_paths, strip_prefix
from warble.middleware.protocol import Next
from warble.staleness import Decision, Reason, StalenessResolver

logger = logging.getLogger("warble.sass")

DIR_MODE = 0o700


def _default_log(level: str, key: str, value: str) -> None:
    logger.log(logging.getLevelName(level.upper()), "%s: %s", key, value)


class SassMiddleware:
    """Middleware that compiles stylesheets on demand and caches them on disk.

    Usage::

        # File mode: compile into ./public, serve with StaticFiles
        app.add_middleware(SassMiddleware("styles", dest="public"))
        app.add_middleware(StaticFiles(directory="public", prefix="/"))

        # Response mode: compile on every request, answer directly
        app.add_middleware(SassMiddleware(SassConfig(src="styles", response=True)))

    Each instance owns its import graph. Pass ``imports=`` to share one
    between instances.
    """

    __slots__ = ("_log", "_resolver", "config", "imports")

    def __init__(
        self,
        config: SassConfig | str | Path | None = None,
        /,
        *,
        imports: ImportGraph | None = None,
        **options: Any,
    ) -> None:
        if isinstance(config, SassConfig):
            if options:
                msg = "Pass options either as a SassConfig or as keywords, not both."
                raise ConfigurationError(msg)
            self.config = config
        else:
            self.config = SassConfig.from_options(config, **options)

        self.imports = imports if imports is not None else ImportGraph()
        self._resolver = StalenessResolver(
            self.imports, always_compile=self.config.always_compile
        )
        self._log = self.config.log or _default_log

    async def __call__(self, request: Request, next: Next) -> Response:
        """Serve, compile, or fall through."""
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        if not is_stylesheet_request(request.path):
            self._debug("skip", f"{request.path} nothing to do")
            return await next(request)

        path = strip_prefix(request.path, self.config.prefix)
        if path is None:
            self._debug("skip", f"{request.path} prefix mismatch")
            return await next(request)

        mapping = map_paths(path, self.config)
        self._debug("source", str(mapping.source_path))
        self._debug("dest", "<response>" if self.config.response else str(mapping.css_path))

        decision = await self._decide(mapping)
        if decision.error is not None:
            self._report(decision.error)
            return await next(request)
        if not decision.compile:
            return await next(request)

        return await self._compile(request, mapping, next)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _decide(self, mapping: PathMapping) -> Decision:
        try:
            decision = await self._resolver.decide(mapping)
        except OSError as exc:
            self._report(exc)
            raise

        if decision.reason in (Reason.MISSING, Reason.MODIFIED):
            self._debug(decision.reason.value, str(mapping.css_path))
        for path in decision.changed:
            self._debug(decision.reason.value, path)
        return decision

    async def _compile(self, request: Request, mapping: PathMapping, next: Next) -> Response:
        source = str(mapping.source_path)
        self._debug("read", str(mapping.css_path))

        # Before the first await: a request racing this one sees the entry
        # as untracked and compiles on its own.
        self.imports.record_pending(source)

        if not await anyio.Path(mapping.source_path).exists():
            return await next(request)

        options = self._render_options(mapping)
        factory = self.config.compiler_factory or LibSassCompiler
        compiler = factory()

        try:
            result: RenderResult = await invoke_blocking(compiler.render, options)
        except CompileError as exc:
            exc.source_path = source
            if self.config.debug:
                self._log("error", "error", exc.diagnostic())
            self._report(exc)
            raise
        except Exception as exc:
            self._report(exc)
            raise

        self._debug("render", "<response>" if self.config.response else source)
        if options.source_map is not None:
            self._debug("render", options.source_map)

        self.imports.record_dependencies(source, result.included_files)

        if self.config.response:
            return Response(
                body=result.css,
                content_type="text/css",
            ).with_header("Cache-Control", f"max-age={self.config.max_age}")

        await self._persist(mapping, result, options.source_map)
        return await next(request)

    async def _persist(
        self, mapping: PathMapping, result: RenderResult, source_map: str | None
    ) -> None:
        """Write css and source map concurrently; fail if either write fails."""
        failures: list[OSError] = []

        async def write(path: Path, data: str) -> None:
            target = anyio.Path(path)
            try:
                await target.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
                await target.write_text(data, encoding="utf-8")
            except OSError as exc:
                failures.append(exc)
                self._report(exc)

        async with anyio.create_task_group() as tg:
            tg.start_soon(write, mapping.css_path, result.css)
            if source_map is not None:
                tg.start_soon(write, Path(source_map), result.source_map or "")

        if failures:
            raise failures[0]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _render_options(self, mapping: PathMapping) -> RenderOptions:
        config = self.config
        return RenderOptions(
            file=str(mapping.source_path),
            out_file=str(config.out_file or mapping.css_path),
            include_paths=(str(mapping.source_dir), *map(str, config.include_paths)),
            indented_syntax=config.indented_syntax,
            source_map=self._source_map_path(mapping),
            extra=config.extra,
        )

    def _source_map_path(self, mapping: PathMapping) -> str | None:
        if not self.config.source_maps_enabled:
            return None
        source_map = self.config.source_map
        if source_map is True:
            return f"{mapping.css_path}.map"
        return str(source_map)

    def _debug(self, key: str, value: str) -> None:
        if self.config.debug:
            self._log("debug", key, value)

    def _report(self, exc: BaseException) -> None:
        if self.config.error is not None:
            self.config.error(exc)


def sass_middleware(src: str | Path | SassConfig, **options: Any) -> SassMiddleware:
    """Functional constructor: ``sass_middleware("styles", debug=True)``."""
    return SassMiddleware(src, **options)
