"""Tests for liveurl.url — Url parsing, serialization and with_* updaters."""

import pytest

from liveurl.errors import InvalidParamsError, InvalidPathError, InvalidUrlError
from liveurl.params import Params
from liveurl.path import Path
from liveurl.url import Url


@pytest.fixture
def url() -> Url:
    return Url.from_string("https://google.com/abc")


class TestFromString:
    def test_components(self) -> None:
        url = Url.from_string("https://google.com/abc?a[]=b&a[]=c")
        assert url.scheme == "https"
        assert url.host == "google.com"
        assert url.port == 443
        assert url.path == Path.from_string("/abc")
        assert url.params == {"a": ["b", "c"]}

    def test_default_ports(self) -> None:
        assert Url.from_string("http://example.com/").port == 80
        assert Url.from_string("https://example.com/").port == 443

    def test_explicit_port(self) -> None:
        assert Url.from_string("http://localhost:4000/x").port == 4000

    def test_missing_path_is_root(self) -> None:
        url = Url.from_string("https://example.com")
        assert url.path == Path()
        assert url.to_relative_target() == "/?"

    def test_fragment_and_userinfo_ignored(self) -> None:
        url = Url.from_string("https://user:pw@example.com/a?b=c#frag")
        assert url.host == "example.com"
        assert url.to_relative_target() == "/a?b=c"

    @pytest.mark.parametrize(
        "value",
        ["/relative", "ftp://example.com/", "https:///nohost", "https://example.com:99999/", "nonsense"],
    )
    def test_rejects_non_absolute_http(self, value: str) -> None:
        with pytest.raises(InvalidUrlError):
            Url.from_string(value)

    def test_rejects_non_string(self) -> None:
        with pytest.raises(InvalidUrlError):
            Url.from_string(b"https://example.com/")  # type: ignore[arg-type]

    def test_malformed_query_is_best_effort(self) -> None:
        url = Url.from_string("https://example.com/?a=1&[]=x&a[b]=2")
        assert url.params == {"a": "1"}


class TestFromComponents:
    def test_host_params_take_precedence(self) -> None:
        url = Url.from_components({"a": ["b", {"c": "d"}]}, "https://test.com/test?ignored=1")
        assert url.path == Path.from_string("/test")
        assert url.params == {"a": ["b", {"c": "d"}]}
        assert url.to_relative_target() == "/test?a[]=b&a[][c]=d"


    def test_host_path_taken_as_reached(self) -> None:
        url = Url.from_components({}, "https://example.com/a//b")
        assert url.to_relative_target() == "/a/b?"

    def test_from_string_stays_strict(self) -> None:
        with pytest.raises(InvalidPathError):
            Url.from_string("https://example.com/a//b")


class TestSerialization:
    def test_relative_target(self) -> None:
        url = Url("https", "google.com", 443, "/abc", {"a": "b"})
        assert url.to_relative_target() == "/abc?a=b"

    def test_root_with_empty_params(self) -> None:
        assert Url("https", "example.com", 443).to_relative_target() == "/?"

    def test_nested_params(self) -> None:
        url = Url("https", "example.com", 443, "/base", {"x": [{"y": "z"}, "a"]})
        assert url.to_relative_target() == "/base?x[][y]=z&x[]=a"

    def test_absolute_target(self) -> None:
        url = Url("https", "google.com", 443, "/abc", {"a": "b"})
        assert url.to_absolute_target() == "https://google.com:443/abc?a=b"
        assert str(url) == "https://google.com:443/abc?a=b"

    def test_ipv6_host_bracketed(self) -> None:
        url = Url.from_string("http://[::1]:8080/")
        assert url.host == "::1"
        assert url.to_absolute_target() == "http://[::1]:8080/?"


class TestConstruction:
    def test_coerces_path_and_params(self) -> None:
        url = Url("http", "example.com", 80, "/a", "b=c")
        assert isinstance(url.path, Path)
        assert isinstance(url.params, Params)
        assert url.params == {"b": "c"}

    @pytest.mark.parametrize(
        ("scheme", "host", "port"),
        [("ftp", "h", 1), ("http", "", 1), ("http", "h", -1), ("http", "h", 65536), ("http", "h", True)],
    )
    def test_invalid_fields(self, scheme: str, host: str, port: int) -> None:
        with pytest.raises(InvalidUrlError):
            Url(scheme, host, port)  # type: ignore[arg-type]

    def test_frozen(self, url: Url) -> None:
        with pytest.raises(AttributeError):
            url.port = 1  # type: ignore[misc]


class TestWithUpdaters:
    def test_with_scheme(self, url: Url) -> None:
        assert url.with_scheme("http").scheme == "http"
        assert url.with_scheme(lambda s: "http" if s == "https" else "https").scheme == "http"
        assert url.scheme == "https"

    def test_with_host(self, url: Url) -> None:
        assert url.with_host("apple.com").host == "apple.com"
        assert url.with_host(lambda h: f"www.{h}").host == "www.google.com"

    def test_with_port(self, url: Url) -> None:
        assert url.with_port(1234).port == 1234
        assert url.with_port(lambda p: p + 1).port == 444

    def test_with_path(self, url: Url) -> None:
        assert str(url.with_path("/").path) == "/"
        assert str(url.with_path(lambda p: f"{p}/efg").path) == "/abc/efg"
        assert str(url.with_path(lambda p: p / "efg").path) == "/abc/efg"

    def test_with_params(self, url: Url) -> None:
        assert url.with_params({"a": ["b", "c"]}).params == {"a": ["b", "c"]}
        updated = url.with_params(lambda params: {**params, "a": ["b", "c"]})
        assert updated.params == {"a": ["b", "c"]}

    def test_updaters_validate(self, url: Url) -> None:
        with pytest.raises(InvalidUrlError):
            url.with_scheme("gopher")  # type: ignore[arg-type]
        with pytest.raises(InvalidUrlError):
            url.with_port(lambda p: p * 1000)
        with pytest.raises(InvalidPathError):
            url.with_path("no-slash")
        with pytest.raises(InvalidParamsError):
            url.with_params({"a": 1})  # type: ignore[dict-item]

    def test_with_relative_target(self, url: Url) -> None:
        moved = url.with_relative_target("/next?page=2")
        assert moved.host == "google.com"
        assert moved.to_relative_target() == "/next?page=2"

    def test_with_relative_target_drops_fragment(self, url: Url) -> None:
        moved = url.with_relative_target("/next?page=2#top")
        assert moved.path == Path.from_string("/next")
        assert moved.params == {"page": "2"}
        assert url.with_relative_target("/a#x").to_relative_target() == "/a?"

    def test_equality(self) -> None:
        assert Url.from_string("https://a.com/x?b=c") == Url("https", "a.com", 443, "/x", {"b": "c"})
