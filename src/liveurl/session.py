"""Session — one live UI instance, its url state, and its mailbox.

A session is a single writer: only the task running its hooks (or its
``run()`` loop) ever changes its url. Other tasks hold a
``SessionHandle`` and can only enqueue messages, so there is no shared
mutable state and no locking.

The host runtime drives two hooks:

- ``handle_params(params, uri)`` on every location change, storing a
  freshly parsed ``Url``.
- ``handle_info(message)`` for every mailbox message. Navigation requests
  are applied and halt; anything else continues unchanged.

The current session is held in a ContextVar, accessible via
``current_session()`` from build functions and lazy targets.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import Any

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from liveurl._internal.types import MessageHandler
from liveurl.config import LiveUrlConfig
from liveurl.errors import OperationError
from liveurl.instructions import Host, HostInstruction, perform
from liveurl.messages import match_request
from liveurl.operation import Mode, Operation, OperationKind, resolve_target, to_instruction
from liveurl.params import Params
from liveurl.path import Path
from liveurl.url import Url

logger = logging.getLogger("liveurl.session")

# -- Session ContextVar --

_session_var: ContextVar[Session | None] = ContextVar("liveurl_session", default=None)


def current_session() -> Session:
    """Return the session whose hooks are running.

    Raises ``LookupError`` if called outside ``Session.run()``, a hook,
    or ``session_scope()``.
    """
    session = _session_var.get()
    if session is None:
        msg = (
            "No active session. Pass a SessionHandle explicitly or call "
            "from inside a session hook."
        )
        raise LookupError(msg)
    return session


@contextmanager
def session_scope(session: Session) -> Iterator[Session]:
    """Make *session* the current session for the enclosed block."""
    token = _session_var.set(session)
    try:
        yield session
    finally:
        _session_var.reset(token)


class HookResult(Enum):
    """Whether the host should keep processing a message."""

    CONT = "cont"
    HALT = "halt"


# -- Handle --


class SessionHandle:
    """Opaque address of a session.

    The only thing a holder can do is enqueue a message. Sending never
    blocks and never raises: a message for a closed session (or one whose
    bounded mailbox is full) is dropped. Callers that need confirmation
    must send their own acknowledgement message.

    Memory streams are not thread-safe; from a worker thread use
    ``anyio.from_thread.run_sync(handle.send, message)``.
    """

    __slots__ = ("_closed", "_name", "_send")

    def __init__(self, send: MemoryObjectSendStream[Any], name: str) -> None:
        self._send = send
        self._name = name
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, message: Any) -> None:
        """Enqueue *message* for the session; fire-and-forget."""
        try:
            self._send.send_nowait(message)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            logger.debug("Dropping message for closed session %s: %r", self._name, message)
        except anyio.WouldBlock:
            logger.warning("Dropping message for session %s: mailbox full", self._name)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._send.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<SessionHandle {self._name} {state}>"


# -- Session --


class Session:
    """Url state and mailbox for one live UI instance.

    Usage::

        session = Session(host=my_host)
        session.handle_params({"sort": "asc"}, "https://example.com/items")

        # from anywhere holding the handle
        send_operation(lambda url: push_patch(url.with_params({})), session.handle)

        # in the session's own task
        await session.run()
    """

    def __init__(
        self,
        config: LiveUrlConfig | None = None,
        *,
        host: Host | None = None,
        on_message: MessageHandler | None = None,
        name: str | None = None,
    ) -> None:
        self.config = config or LiveUrlConfig()
        self.assigns: dict[str, Any] = {}
        self.redirected: HostInstruction | None = None
        self._host = host
        self._on_message = on_message
        send, receive = anyio.create_memory_object_stream[Any](
            max_buffer_size=self.config.mailbox_size
        )
        self._receive: MemoryObjectReceiveStream[Any] = receive
        self.handle = SessionHandle(send, name or f"session-{id(self):x}")

    @property
    def url(self) -> Url | None:
        """The current url, or ``None`` before the first location change."""
        return self.assigns.get(self.config.state_key)

    # -- Hooks --

    def handle_params(self, params: Mapping[str, Any], uri: str) -> tuple[HookResult, Session]:
        """Location-change hook. Stores the url built from *params* and *uri*."""
        url = Url.from_components(
            params,
            uri,
            max_depth=self.config.max_query_depth,
            max_pairs=self.config.max_query_pairs,
        )
        self.assigns[self.config.state_key] = url
        logger.debug("Session %s at %s", self.handle, url.to_relative_target())
        return HookResult.CONT, self

    def handle_info(self, message: Any) -> tuple[HookResult, Any]:
        """Message hook.

        Returns ``(HALT, instruction)`` after applying a navigation
        request, ``(CONT, message)`` for anything else.
        """
        request = match_request(message)
        if request is None:
            return HookResult.CONT, message

        with session_scope(self):
            operation = request.payload
            if request.kind is OperationKind.BUILD:
                url = self.url
                if url is None:
                    msg = "Cannot run a build function before the session has a location"
                    raise OperationError(msg)
                operation = request.payload(url)
                if not isinstance(operation, Operation):
                    msg = f"Build function must return an Operation, got {type(operation).__name__}"
                    raise OperationError(msg)
            return HookResult.HALT, self._apply(operation)

    # -- Applying --

    def apply(self, operation: Operation) -> HostInstruction:
        """Apply *operation* synchronously from this session's own context.

        Raises ``OperationError`` when another session is current; code
        outside the session should use ``send_operation`` instead.
        """
        active = _session_var.get()
        if active is not None and active is not self:
            msg = "apply_operation() must run in the owning session; use send_operation()"
            raise OperationError(msg)
        if not isinstance(operation, Operation):
            msg = f"Expected an Operation, got {type(operation).__name__}"
            raise OperationError(msg)
        with session_scope(self):
            return self._apply(operation)

    def _apply(self, operation: Operation) -> HostInstruction:
        target = resolve_target(operation, self)
        instruction = to_instruction(operation, target)
        tracked = None if operation.mode is Mode.EXTERNAL else self._tracked_url(target)
        self.redirected = instruction
        if tracked is not None:
            self.assigns[self.config.state_key] = tracked
        logger.debug("Session %s applied %s: %r", self.handle, operation.kind.value, instruction)
        if self._host is not None:
            perform(self._host, instruction)
        return instruction

    def _tracked_url(self, target: Url | str) -> Url | None:
        # The host confirms through handle_params later; track the target now
        # so requests already queued build against it.
        if isinstance(target, Url):
            return target
        if self.url is None:
            return None
        return self.url.with_relative_target(target)

    # -- Mailbox --

    async def dispatch(self, message: Any) -> tuple[HookResult, Any]:
        """Run *message* through ``handle_info``, passing it on if it continues."""
        result, value = self.handle_info(message)
        if result is HookResult.CONT and self._on_message is not None:
            with session_scope(self):
                pending = self._on_message(value)
                if inspect.isawaitable(pending):
                    await pending
        return result, value

    async def run(self) -> None:
        """Process the mailbox in order until ``close()`` and the buffer is drained."""
        with session_scope(self):
            async with self._receive:
                async for message in self._receive:
                    await self.dispatch(message)
        logger.debug("Session %s stopped", self.handle)

    def process_pending(self) -> list[tuple[HookResult, Any]]:
        """Synchronously run every queued message through ``handle_info``.

        For hosts that drive the session without an event loop task.
        Pass-through messages are returned, not sent to ``on_message``.
        """
        results: list[tuple[HookResult, Any]] = []
        while True:
            try:
                message = self._receive.receive_nowait()
            except (anyio.WouldBlock, anyio.EndOfStream, anyio.ClosedResourceError):
                return results
            results.append(self.handle_info(message))

    def close(self) -> None:
        """Stop accepting messages. Already queued messages are still processed."""
        self.handle.close()


# -- Accessors --


def _require_url(session: Session) -> Url:
    url = session.url
    if url is None:
        msg = "Session has no location yet; handle_params has not run"
        raise LookupError(msg)
    return url


def get_url(session: Session) -> Url:
    """Return the session's current ``Url``."""
    return _require_url(session)


def get_path(session: Session) -> Path:
    """Return the current url's path."""
    return _require_url(session).path


def get_params(session: Session) -> Params:
    """Return the current url's params."""
    return _require_url(session).params


def get_relative_target(session: Session) -> str:
    """Return the current ``/path?query`` string."""
    return _require_url(session).to_relative_target()
