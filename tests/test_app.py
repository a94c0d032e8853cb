"""Tests for warble.app — middleware chain, fallback, error handlers, lifespan."""

import logging

import pytest

from warble.app import App
from warble.errors import CompileError, ConfigurationError, HTTPError
from warble.http.response import Response
from warble.testing import TestClient


class Tag:
    """Middleware that records its name on the way in and out."""

    def __init__(self, name: str, trail: list[str]) -> None:
        self.name = name
        self.trail = trail

    async def __call__(self, request, next):
        self.trail.append(f"{self.name}>")
        response = await next(request)
        self.trail.append(f"<{self.name}")
        return response


class TestMiddlewareChain:
    async def test_first_added_runs_first(self) -> None:
        trail: list[str] = []
        app = App()
        app.add_middleware(Tag("a", trail))
        app.add_middleware(Tag("b", trail))

        @app.fallback
        def fallback(request):
            trail.append("fallback")
            return "done"

        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.text == "done"
        assert trail == ["a>", "b>", "fallback", "<b", "<a"]

    async def test_async_fallback_may_return_response(self) -> None:
        app = App()

        @app.fallback
        async def fallback(request):
            return Response("gone", status=410)

        async with TestClient(app) as client:
            response = await client.get("/anything")

        assert response.status == 410

    async def test_default_fallback_is_404(self) -> None:
        async with TestClient(App()) as client:
            response = await client.get("/missing.css")

        assert response.status == 404
        assert response.text == "GET /missing.css"

    async def test_frozen_after_first_request(self) -> None:
        app = App()
        async with TestClient(app) as client:
            await client.get("/")

        with pytest.raises(ConfigurationError):
            app.add_middleware(Tag("late", []))


class TestErrorHandlers:
    async def test_handler_by_status(self) -> None:
        app = App()

        @app.error(404)
        def missing(request):
            return f"no stylesheet at {request.path}"

        async with TestClient(app) as client:
            response = await client.get("/site.css")

        assert response.status == 404
        assert response.text == "no stylesheet at /site.css"

    async def test_handler_by_exception_superclass(self) -> None:
        app = App()

        async def fail(request, next):
            raise CompileError("Undefined variable", file="site.scss", line=1, column=2)

        app.add_middleware(fail)
        seen: list[Exception] = []

        @app.error(Exception)
        async def everything(request, exc):
            seen.append(exc)
            return "handled"

        async with TestClient(app) as client:
            response = await client.get("/site.css")

        assert response.status == 500
        assert response.text == "handled"
        assert isinstance(seen[0], CompileError)

    async def test_handler_without_arguments(self) -> None:
        app = App()

        async def teapot(request, next):
            raise HTTPError(status=418)

        app.add_middleware(teapot)

        @app.error(418)
        def handler():
            return Response("short and stout", status=418)

        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.text == "short and stout"

    async def test_http_error_headers_are_sent(self) -> None:
        app = App()

        async def limited(request, next):
            raise HTTPError(status=429, detail="Slow down", headers=(("Retry-After", "5"),))

        app.add_middleware(limited)

        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.status == 429
        assert response.header("retry-after") == "5"

    async def test_unhandled_error_is_500(self, caplog: pytest.LogCaptureFixture) -> None:
        app = App()

        async def broken(request, next):
            raise RuntimeError("disk on fire")

        app.add_middleware(broken)

        with caplog.at_level(logging.ERROR, logger="warble.server"):
            async with TestClient(app) as client:
                response = await client.get("/")

        assert response.status == 500
        assert response.text == "Internal Server Error"
        assert any(record.exc_info for record in caplog.records)

    async def test_debug_shows_compile_diagnostic(self) -> None:
        app = App(debug=True)

        async def fail(request, next):
            err = CompileError("Undefined variable", file="stdin", line=2, column=10)
            err.source_path = "/srv/styles/site.scss"
            raise err

        app.add_middleware(fail)

        async with TestClient(app) as client:
            response = await client.get("/site.css")

        assert response.status == 500
        assert response.text == "Undefined variable\n\nin /srv/styles/site.scss:2:10"


class TestLifespan:
    async def test_startup_and_shutdown_acknowledged(self) -> None:
        app = App()
        inbox = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict] = []

        async def receive():
            return inbox.pop(0)

        async def send(message):
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)

        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
