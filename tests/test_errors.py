"""Tests for warble.errors — exception hierarchy and compile diagnostics."""

import pytest

from warble.errors import (
    CompileError,
    ConfigurationError,
    HTTPError,
    NotFound,
    WarbleError,
)


class TestHierarchy:
    def test_http_error_is_warble_error(self) -> None:
        assert issubclass(HTTPError, WarbleError)

    def test_not_found_is_http_error(self) -> None:
        assert issubclass(NotFound, HTTPError)

    def test_configuration_error_is_warble_error(self) -> None:
        assert issubclass(ConfigurationError, WarbleError)

    def test_compile_error_is_warble_error(self) -> None:
        assert issubclass(CompileError, WarbleError)


class TestHTTPError:
    def test_str_with_detail(self) -> None:
        assert str(HTTPError(status=403, detail="Forbidden")) == "403: Forbidden"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(status=500)) == "500"

    def test_frozen(self) -> None:
        err = HTTPError(status=400)
        with pytest.raises(AttributeError):
            err.status = 500  # type: ignore[misc]

    def test_not_found_defaults(self) -> None:
        err = NotFound()
        assert err.status == 404
        assert err.detail == "Not Found"


class TestCompileError:
    def test_location(self) -> None:
        err = CompileError("Undefined variable", file="styles/site.scss", line=3, column=9)
        assert err.location() == "styles/site.scss:3:9"

    def test_location_without_column(self) -> None:
        err = CompileError("boom", file="site.scss", line=3)
        assert err.location() == "site.scss:3"

    def test_location_without_position(self) -> None:
        err = CompileError("boom", file="site.scss")
        assert err.location() == "site.scss"

    @pytest.mark.parametrize("file", [None, "", "stdin"])
    def test_anonymous_file_falls_back_to_source(self, file) -> None:
        err = CompileError("boom", file=file, line=1, column=2)
        assert err.location("/srv/styles/site.scss") == "/srv/styles/site.scss:1:2"

    def test_anonymous_file_uses_recorded_source(self) -> None:
        err = CompileError("boom", file="stdin", line=1, column=2)
        err.source_path = "/srv/styles/site.scss"
        assert err.location() == "/srv/styles/site.scss:1:2"

    def test_diagnostic(self) -> None:
        err = CompileError("  Undefined variable", file="site.scss", line=2, column=10)
        assert err.diagnostic() == "Undefined variable\n\nin site.scss:2:10"

    def test_str_is_message_until_source_known(self) -> None:
        err = CompileError("Undefined variable", file="stdin", line=2, column=10)
        assert str(err) == "Undefined variable"

        err.source_path = "/srv/styles/site.scss"
        assert str(err) == "Undefined variable\n\nin /srv/styles/site.scss:2:10"
