"""Immutable url path as a tuple of segments.

``/`` has no segments, ``/a/b`` has ``("a", "b")``. A trailing slash is
kept as a trailing empty segment so ``str(Path.from_string(s)) == s``
holds for every well-formed path.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from liveurl.errors import InvalidPathError


@dataclass(frozen=True, slots=True)
class Path:
    """An absolute url path.

    Usage::

        path = Path.from_string("/users/42")
        path.segments          # ("users", "42")
        str(path / "edit")     # "/users/42/edit"
    """

    segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        segments = tuple(self.segments)
        for segment in segments:
            if not isinstance(segment, str):
                msg = f"Path segments must be strings, got {segment!r}"
                raise InvalidPathError(msg)
            if "/" in segment or "\\" in segment:
                msg = f"Path segment {segment!r} must not contain a slash"
                raise InvalidPathError(msg)
        if "" in segments[:-1]:
            msg = f"Only the last path segment may be empty, got {segments!r}"
            raise InvalidPathError(msg)
        object.__setattr__(self, "segments", segments)

    @classmethod
    def from_string(cls, path: str) -> Path:
        """Parse an absolute path. Raises ``InvalidPathError`` if malformed."""
        if not isinstance(path, str) or not path.startswith("/"):
            msg = f"Path must start with '/', got {path!r}"
            raise InvalidPathError(msg)
        if "//" in path or "\\" in path:
            msg = f"Path must not contain '//' or '\\', got {path!r}"
            raise InvalidPathError(msg)
        if path == "/":
            return cls()
        return cls(tuple(path[1:].split("/")))

    @classmethod
    def from_request(cls, path: str) -> Path:
        """Parse a path the host actually served. Never raises.

        Browsers happily reach ``/a//b``; empty inner segments are collapsed
        (``/a/b``) and backslashes percent-encoded. A trailing slash is kept.
        """
        parts = path.replace("\\", "%5C").split("/")
        *inner, last = parts[1:] or [""]
        segments = tuple(segment for segment in inner if segment)
        if last or segments:
            segments = (*segments, last)
        return cls(segments)

    @classmethod
    def new(cls, value: str | Sequence[str] | Path) -> Path:
        """Build a path from a string, a segment sequence, or another path."""
        if isinstance(value, Path):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        return cls(tuple(value))

    def to_string(self) -> str:
        return "/" + "/".join(self.segments)

    __str__ = to_string

    def update_segments(self, update: Callable[[tuple[str, ...]], Sequence[str]]) -> Path:
        """Return a new path built from ``update(self.segments)``."""
        return Path(tuple(update(self.segments)))

    def __truediv__(self, segment: str) -> Path:
        segments = self.segments[:-1] if self.segments[-1:] == ("",) else self.segments
        return Path((*segments, segment))
