"""Navigation request wire protocol.

A navigation request is a plain 3-tuple on the session mailbox::

    ("liveurl", "patch" | "navigate" | "redirect", operation)
    ("liveurl", "build", build_fn)

The mailbox is shared with arbitrary application messages, so anything
else is simply not a navigation request.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from liveurl.operation import Operation, OperationKind

PROTOCOL_TAG = "liveurl"


class NavigationRequest(NamedTuple):
    """A tagged ``(tag, kind, payload)`` triple addressed to a session."""

    tag: str
    kind: OperationKind
    payload: Any

    @classmethod
    def for_operation(cls, operation: Operation) -> NavigationRequest:
        return cls(PROTOCOL_TAG, operation.kind, operation)

    @classmethod
    def for_build(cls, build: Any) -> NavigationRequest:
        return cls(PROTOCOL_TAG, OperationKind.BUILD, build)


def match_request(message: Any) -> NavigationRequest | None:
    """Return *message* as a ``NavigationRequest`` if it has the protocol shape.

    Accepts plain tuples as well as ``NavigationRequest`` instances, and
    kinds given as ``OperationKind`` or their string values. Never raises.
    """
    if not isinstance(message, tuple) or len(message) != 3:
        return None
    tag, kind, payload = message
    if not isinstance(tag, str) or tag != PROTOCOL_TAG:
        return None
    if not isinstance(kind, OperationKind):
        try:
            kind = OperationKind(kind)
        except (TypeError, ValueError):
            return None
    if kind is OperationKind.BUILD:
        if not callable(payload):
            return None
    elif not isinstance(payload, Operation) or payload.kind is not kind:
        return None
    return NavigationRequest(tag, kind, payload)
