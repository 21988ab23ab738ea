"""Immutable nested query params and their bracket-notation codec.

Params implements ``Mapping[str, ParamValue]`` where a value is a string,
a sequence of values, or a nested mapping. The codec follows the bracket
convention Plug and Rack decode on the host side::

    {"a": "b"}                   a=b
    {"a": {"b": "c"}}            a[b]=c
    {"a": ["b", "c"]}            a[]=b&a[]=c
    {"x": [{"y": "z"}, "a"]}     x[][y]=z&x[]=a

Mapping keys encode in sorted order, sequences in their own order.
Decoding never raises: malformed pairs are dropped and logged at debug
level.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator, Mapping
from typing import Any
from urllib.parse import quote_plus, unquote_plus

from liveurl._internal.types import ParamValue
from liveurl.errors import InvalidParamsError

logger = logging.getLogger("liveurl.params")

DEFAULT_MAX_DEPTH = 32
DEFAULT_MAX_PAIRS = 1000

# root key followed by zero or more bracket groups: a, a[b], a[][c]
_NAME = re.compile(r"\A([^\[\]]+)((?:\[[^\[\]]*\])*)\Z")
_GROUP = re.compile(r"\[([^\[\]]*)\]")


class Params(Mapping[str, Any]):
    """Immutable nested query params.

    Nested mappings are stored as ``Params`` and sequences as tuples, so
    every level is immutable. Equality compares structure, which means a
    ``Params`` equals the plain dict it was built from::

        Params({"a": ["b", "c"]}) == {"a": ["b", "c"]}  # True

    Raises ``InvalidParamsError`` for non-string keys, non-string leaves,
    and sequences nested directly in sequences.
    """

    _entries: dict[str, Any]

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Any] | None = None) -> None:
        frozen = {} if entries is None else _freeze_mapping(entries, ())
        object.__setattr__(self, "_entries", frozen)

    @classmethod
    def new(cls, value: str | Mapping[str, Any]) -> Params:
        """Build params from a query string or a mapping."""
        if isinstance(value, Params):
            return value
        if isinstance(value, str):
            return decode(value)
        if isinstance(value, Mapping):
            return cls(value)
        msg = f"Params must be built from a str or a mapping, got {type(value).__name__}"
        raise InvalidParamsError(msg)

    def __setattr__(self, name: str, value: Any) -> None:
        msg = "Params is immutable"
        raise AttributeError(msg)

    def __getitem__(self, key: str) -> Any:
        return self._entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Params):
            return self._entries == other._entries
        if isinstance(other, Mapping):
            try:
                return self._entries == Params(other)._entries
            except InvalidParamsError:
                return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._entries.items()))

    def __repr__(self) -> str:
        return f"Params({self.to_dict()!r})"

    def __str__(self) -> str:
        return encode(self)

    def to_dict(self) -> dict[str, Any]:
        """Return a plain nested ``dict``/``list`` copy."""
        return {key: _thaw(value) for key, value in self._entries.items()}

    entries = to_dict

    def update_entries(self, update: Callable[[dict[str, Any]], Mapping[str, Any]]) -> Params:
        """Return new params built from ``update(self.to_dict())``."""
        return Params.new(update(self.to_dict()))

    def with_entry(self, key: str, value: ParamValue) -> Params:
        """Return new params with *key* set to *value*."""
        return Params({**self._entries, key: value})

    def without_entry(self, key: str) -> Params:
        """Return new params without *key* (no error if missing)."""
        return Params({k: v for k, v in self._entries.items() if k != key})


# -- Construction-time validation --


def _describe(path: tuple[str, ...]) -> str:
    if not path:
        return "top level"
    return path[0] + "".join(f"[{part}]" for part in path[1:])


def _freeze_mapping(mapping: Any, path: tuple[str, ...]) -> dict[str, Any]:
    if isinstance(mapping, Params):
        return dict(mapping._entries)
    if not isinstance(mapping, Mapping):
        msg = f"Expected a mapping at {_describe(path)}, got {type(mapping).__name__}"
        raise InvalidParamsError(msg)
    frozen: dict[str, Any] = {}
    for key, value in mapping.items():
        if not isinstance(key, str):
            msg = f"Param keys must be strings, got {key!r} at {_describe(path)}"
            raise InvalidParamsError(msg)
        frozen[key] = _freeze_value(value, (*path, key), in_sequence=False)
    return frozen


def _freeze_value(value: Any, path: tuple[str, ...], *, in_sequence: bool) -> Any:
    if isinstance(value, str | Params):
        return value
    if isinstance(value, Mapping):
        params = Params.__new__(Params)
        object.__setattr__(params, "_entries", _freeze_mapping(value, path))
        return params
    if isinstance(value, list | tuple):
        if in_sequence:
            msg = f"Sequences cannot nest directly in sequences at {_describe(path)}"
            raise InvalidParamsError(msg)
        return tuple(_freeze_value(item, (*path, ""), in_sequence=True) for item in value)
    msg = (
        f"Param values must be str, sequence or mapping, "
        f"got {type(value).__name__} at {_describe(path)}"
    )
    raise InvalidParamsError(msg)


def _thaw(value: Any) -> Any:
    if isinstance(value, Params):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


# -- Encoding --


def _escape(text: str) -> str:
    return quote_plus(text, safe="")


def encode(params: Mapping[str, Any]) -> str:
    """Encode params as a bracket-notation query string.

    Empty params encode to ``""``. Empty sequences and mappings emit no
    pairs at all.
    """
    if not isinstance(params, Params):
        params = Params(params)
    pairs: list[str] = []
    for key in sorted(params):
        _encode_value(pairs, _escape(key), params[key])
    return "&".join(pairs)


def _encode_value(pairs: list[str], name: str, value: Any) -> None:
    match value:
        case str():
            pairs.append(f"{name}={_escape(value)}")
        case Params():
            for key in sorted(value):
                _encode_value(pairs, f"{name}[{_escape(key)}]", value[key])
        case tuple():
            for item in value:
                _encode_value(pairs, f"{name}[]", item)


# -- Decoding --


class _MalformedPair(Exception):  # noqa: N818 — internal control flow
    """A query pair that cannot be merged into the decoded structure."""


def decode(
    query: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_pairs: int = DEFAULT_MAX_PAIRS,
) -> Params:
    """Decode a bracket-notation query string into params.

    A single leading ``?`` is ignored. Repeated plain keys keep the last
    value. ``k[]`` appends to a list; ``k[][c]`` merges into the list's
    last mapping unless that mapping already holds ``c``, in which case a
    new mapping is started.

    Never raises. Pairs with an empty or malformed name, pairs that clash
    with an earlier value's type (``a=1&a[b]=2``), pairs nested deeper
    than *max_depth*, and pairs past *max_pairs* are dropped.
    """
    if query.startswith("?"):
        query = query[1:]

    root: dict[str, Any] = {}
    seen = 0
    for pair in query.split("&"):
        if not pair:
            continue
        if seen >= max_pairs:
            logger.debug("Dropping query pairs past max_pairs=%d", max_pairs)
            break
        seen += 1

        raw_name, _, raw_value = pair.partition("=")
        name = unquote_plus(raw_name)
        try:
            key, segments = _parse_name(name, max_depth)
            _assign(root, key, segments, unquote_plus(raw_value))
        except _MalformedPair as exc:
            logger.debug("Dropping query pair %r: %s", pair, exc)

    return Params(root)


def _parse_name(name: str, max_depth: int) -> tuple[str, tuple[str | None, ...]]:
    """Split ``a[b][]`` into ``("a", ("b", None))``; ``None`` marks ``[]``."""
    match = _NAME.match(name)
    if match is None:
        msg = "malformed name"
        raise _MalformedPair(msg)
    key, groups = match.groups()
    segments = tuple(group or None for group in _GROUP.findall(groups))
    if len(segments) > max_depth:
        msg = f"nested deeper than max_depth={max_depth}"
        raise _MalformedPair(msg)
    for previous, current in zip(segments, segments[1:], strict=False):
        if previous is None and current is None:
            msg = "nested lists are not supported"
            raise _MalformedPair(msg)
    return key, segments


def _build(segments: tuple[str | None, ...], value: str) -> Any:
    if not segments:
        return value
    head, rest = segments[0], segments[1:]
    if head is None:
        return [_build(rest, value)]
    return {head: _build(rest, value)}


def _has_path(container: dict[str, Any], segments: tuple[str | None, ...]) -> bool:
    """Whether *segments* are already occupied inside *container*."""
    if None in segments:
        return False
    current: Any = container
    for segment in segments:
        if segment not in current:
            return False
        current = current[segment]
        if not isinstance(current, dict):
            return True
    return True


def _assign(
    container: dict[str, Any],
    key: str,
    segments: tuple[str | None, ...],
    value: str,
) -> None:
    """Merge one decoded pair into *container*.

    Checks for type clashes before touching existing containers, so a
    dropped pair leaves no partial keys behind.
    """
    existing = container.get(key)

    if not segments:
        if isinstance(existing, dict | list):
            msg = f"{key!r} already holds a nested value"
            raise _MalformedPair(msg)
        container[key] = value
        return

    if existing is None:
        container[key] = _build(segments, value)
        return

    head, rest = segments[0], segments[1:]
    if head is None:
        if not isinstance(existing, list):
            msg = f"{key!r} is not a list"
            raise _MalformedPair(msg)
        if not rest:
            existing.append(value)
            return
        last = existing[-1] if existing else None
        if isinstance(last, dict) and not _has_path(last, rest):
            _assign(last, rest[0], rest[1:], value)  # type: ignore[arg-type]
        else:
            existing.append(_build(rest, value))
        return

    if not isinstance(existing, dict):
        msg = f"{key!r} is not a mapping"
        raise _MalformedPair(msg)
    _assign(existing, head, rest, value)
