"""Asynchronous navigation requests.

Any task holding a ``SessionHandle`` can ask the session to navigate.
Requests are only enqueued here; the session evaluates them later, in its
own context, against whatever url is current by then. That keeps
concurrent requests from building on a stale url.

Every function returns as soon as the request is queued. There is no
delivery acknowledgement, no cancellation and no timeout.
"""

from __future__ import annotations

import logging

from liveurl._internal.types import BuildFn
from liveurl.messages import NavigationRequest
from liveurl.operation import Operation, Target, push_navigate, push_patch, redirect
from liveurl.session import SessionHandle, current_session

logger = logging.getLogger("liveurl.client")


def _resolve_handle(handle: SessionHandle | None) -> SessionHandle:
    if handle is not None:
        return handle
    return current_session().handle


def _enqueue(request: NavigationRequest, handle: SessionHandle | None) -> None:
    target = _resolve_handle(handle)
    logger.debug("Sending %s request to %s", request.kind.value, target)
    target.send(request)


def send_operation(build: BuildFn, handle: SessionHandle | None = None) -> None:
    """Ask a session to build and apply an operation.

    *build* receives the session's url at processing time and must return
    an ``Operation``. *handle* defaults to the current session's, so
    calls from inside a session hook address that session::

        send_operation(lambda url: push_patch(url.with_params({"page": "2"})))

    Raises ``LookupError`` when no handle is given outside a session.
    """
    if not callable(build):
        msg = f"send_operation() expects a build function, got {type(build).__name__}"
        raise TypeError(msg)
    _enqueue(NavigationRequest.for_build(build), handle)


def send(operation: Operation, handle: SessionHandle | None = None) -> None:
    """Enqueue an already built operation. Lazy targets resolve in the session."""
    if not isinstance(operation, Operation):
        msg = f"send() expects an Operation, got {type(operation).__name__}"
        raise TypeError(msg)
    _enqueue(NavigationRequest.for_operation(operation), handle)


def send_patch(
    to: Target,
    *,
    replace: bool = False,
    handle: SessionHandle | None = None,
) -> None:
    """Enqueue a ``push_patch``. Target shape errors raise here, not in the session."""
    send(push_patch(to, replace=replace), handle)


def send_navigate(
    to: Target,
    *,
    replace: bool = False,
    handle: SessionHandle | None = None,
) -> None:
    """Enqueue a ``push_navigate``."""
    send(push_navigate(to, replace=replace), handle)


def send_redirect(
    *,
    to: Target | None = None,
    external: Target | None = None,
    handle: SessionHandle | None = None,
) -> None:
    """Enqueue a ``redirect``, internal (*to*) or external."""
    send(redirect(to=to, external=external), handle)
