"""Shared type aliases used across liveurl modules."""

from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeAlias

# A query param value — a string leaf, a sequence, or a nested mapping
ParamValue: TypeAlias = "str | Sequence[ParamValue] | Mapping[str, ParamValue]"

# Lazy operation target — receives (current url, session), returns Url or str
TargetFn: TypeAlias = Callable[[Any, Any], Any]

# Deferred build function — receives the current url, returns an Operation
BuildFn: TypeAlias = Callable[[Any], Any]

# Pass-through handler for mailbox messages that are not navigation requests
MessageHandler: TypeAlias = Callable[[Any], Any]
