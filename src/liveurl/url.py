"""Url — a fully qualified http(s) url with a structured path and params.

Each ``.with_*()`` call returns a new Url. Immutable by construction, and
every updater takes either a literal replacement or a function of the
current value::

    url = Url.from_string("https://example.com/abc?a[]=b&a[]=c")
    url.with_port(8443)
    url.with_path(lambda path: path / "edit")
    url.with_params(lambda params: {**params, "page": "2"})
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Literal, TypeAlias
from urllib.parse import urlsplit

from liveurl.errors import InvalidUrlError
from liveurl.params import DEFAULT_MAX_DEPTH, DEFAULT_MAX_PAIRS, Params, decode, encode
from liveurl.path import Path

Scheme: TypeAlias = Literal["http", "https"]

DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}


@dataclass(frozen=True, slots=True)
class Url:
    """A fully qualified http(s) url.

    *path* accepts a ``Path`` or a string, *params* a ``Params``, any
    mapping, or a query string; both are normalized on construction.
    """

    scheme: Scheme
    host: str
    port: int
    path: Path = field(default_factory=Path)
    params: Params = field(default_factory=Params)

    def __post_init__(self) -> None:
        if self.scheme not in DEFAULT_PORTS:
            msg = f"Url scheme must be 'http' or 'https', got {self.scheme!r}"
            raise InvalidUrlError(msg)
        if not isinstance(self.host, str) or not self.host:
            msg = f"Url host must be a non-empty string, got {self.host!r}"
            raise InvalidUrlError(msg)
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            msg = f"Url port must be an int, got {self.port!r}"
            raise InvalidUrlError(msg)
        if not 0 <= self.port <= 65535:
            msg = f"Url port must be in 0..65535, got {self.port}"
            raise InvalidUrlError(msg)
        object.__setattr__(self, "path", Path.new(self.path))
        object.__setattr__(self, "params", Params.new(self.params))

    # -- Parsing --

    @classmethod
    def from_string(
        cls,
        url: str,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_pairs: int = DEFAULT_MAX_PAIRS,
    ) -> Url:
        """Parse an absolute http(s) url.

        The port defaults to the scheme's (80/443) and the path to ``/``.
        Userinfo and fragment are ignored. Raises ``InvalidUrlError`` for
        anything that is not an absolute http(s) url, and ``InvalidPathError``
        for a malformed path.
        """
        return cls._parse(url, Path.from_string, max_depth=max_depth, max_pairs=max_pairs)

    @classmethod
    def _parse(
        cls,
        url: str,
        parse_path: Callable[[str], Path],
        *,
        max_depth: int,
        max_pairs: int,
    ) -> Url:
        if not isinstance(url, str):
            msg = f"Url must be a string, got {type(url).__name__}"
            raise InvalidUrlError(msg)
        try:
            parts = urlsplit(url)
            port = parts.port
        except ValueError as exc:
            msg = f"Malformed url {url!r}: {exc}"
            raise InvalidUrlError(msg) from exc

        scheme = parts.scheme.lower()
        if scheme not in DEFAULT_PORTS:
            msg = f"Url must be absolute http(s), got {url!r}"
            raise InvalidUrlError(msg)
        if not parts.hostname:
            msg = f"Url must have a host, got {url!r}"
            raise InvalidUrlError(msg)

        return cls(
            scheme=scheme,  # type: ignore[arg-type]
            host=parts.hostname,
            port=DEFAULT_PORTS[scheme] if port is None else port,
            path=parse_path(parts.path or "/"),
            params=decode(parts.query, max_depth=max_depth, max_pairs=max_pairs),
        )

    @classmethod
    def from_components(
        cls,
        params: Mapping[str, Any],
        uri: str,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_pairs: int = DEFAULT_MAX_PAIRS,
    ) -> Url:
        """Build a url from host-decoded *params* and the raw *uri*.

        *params* win over whatever query string *uri* carries. The path is
        taken as the host reached it: ``/a//b`` is stored as ``/a/b``
        rather than rejected.
        """
        url = cls._parse(uri, Path.from_request, max_depth=max_depth, max_pairs=max_pairs)
        return url.with_params(params)

    # -- Serialization --

    def to_relative_target(self) -> str:
        """Path and query only, e.g. ``/abc?a=b``. Empty params give ``/abc?``."""
        return f"{self.path}?{encode(self.params)}"

    def to_absolute_target(self) -> str:
        """Scheme, host, port, path and query, e.g. ``https://example.com:443/abc?a=b``."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}{self.to_relative_target()}"

    __str__ = to_absolute_target

    # -- Chainable transformations --

    def with_scheme(self, scheme: Scheme | Callable[[Scheme], Scheme]) -> Url:
        """Return a new Url with a different scheme."""
        value = scheme(self.scheme) if callable(scheme) else scheme
        return replace(self, scheme=value)

    def with_host(self, host: str | Callable[[str], str]) -> Url:
        """Return a new Url with a different host."""
        value = host(self.host) if callable(host) else host
        return replace(self, host=value)

    def with_port(self, port: int | Callable[[int], int]) -> Url:
        """Return a new Url with a different port."""
        value = port(self.port) if callable(port) else port
        return replace(self, port=value)

    def with_path(
        self,
        path: str | Sequence[str] | Path | Callable[[Path], str | Sequence[str] | Path],
    ) -> Url:
        """Return a new Url with a different path.

        An updater receives the current ``Path`` and may return a ``Path``,
        a path string, or a segment sequence.
        """
        value = path(self.path) if callable(path) else path
        return replace(self, path=Path.new(value))

    def with_params(
        self,
        params: str | Mapping[str, Any] | Callable[[Params], str | Mapping[str, Any]],
    ) -> Url:
        """Return a new Url with different params.

        An updater receives the current ``Params`` (a read-only mapping) and
        returns any mapping or a query string::

            url.with_params(lambda params: {**params, "sort": "asc"})
        """
        value = params(self.params) if callable(params) else params
        return replace(self, params=Params.new(value))

    def with_relative_target(self, target: str) -> Url:
        """Return a new Url pointing at *target* (``/path?query``) on the same origin.

        A ``#fragment`` is dropped.
        """
        path, _, query = target.partition("#")[0].partition("?")
        return replace(self, path=Path.from_string(path), params=decode(query))
