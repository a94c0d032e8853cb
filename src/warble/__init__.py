"""Warble — lazy Sass compilation middleware for ASGI.

Compiles ``.scss``/``.sass`` sources into ``.css`` when a stylesheet is
requested, caches the result on disk, and recompiles only when the source
or one of its imports changed.

Basic usage::

    from warble import App, SassMiddleware, StaticFiles

    app = App()
    app.add_middleware(SassMiddleware("styles", dest="public"))
    app.add_middleware(StaticFiles(directory="public", prefix="/"))
"""

import importlib

__version__ = "0.1.0"
__all__ = [
    "App",
    "CompileError",
    "Compiler",
    "ConfigurationError",
    "HTTPError",
    "ImportGraph",
    "LibSassCompiler",
    "Middleware",
    "Next",
    "NotFound",
    "RenderOptions",
    "RenderResult",
    "Request",
    "Response",
    "SassConfig",
    "SassMiddleware",
    "StaticFiles",
    "WarbleError",
    "sass_middleware",
]

# Public name -> defining module, imported on first access
_LAZY_IMPORTS: dict[str, str] = {
    "App": "warble.app",
    "CompileError": "warble.errors",
    "Compiler": "warble.compiler",
    "ConfigurationError": "warble.errors",
    "HTTPError": "warble.errors",
    "ImportGraph": "warble.imports",
    "LibSassCompiler": "warble.compiler",
    "Middleware": "warble.middleware.protocol",
    "Next": "warble.middleware.protocol",
    "NotFound": "warble.errors",
    "RenderOptions": "warble.compiler",
    "RenderResult": "warble.compiler",
    "Request": "warble.http.request",
    "Response": "warble.http.response",
    "SassConfig": "warble.config",
    "SassMiddleware": "warble.middleware.sass",
    "StaticFiles": "warble.middleware.static",
    "WarbleError": "warble.errors",
    "sass_middleware": "warble.middleware.sass",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import warble`` from loading libsass until it is needed.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(importlib.import_module(module_name), name)
