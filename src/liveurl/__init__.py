"""liveurl — url state and navigation for server-rendered live sessions.

Keeps the session's current location as a structured ``Url`` and turns
navigation intents into one of three host instructions: patch the
location, navigate to another view, or redirect.

Basic usage::

    from liveurl import Session, apply_operation, push_patch

    session = Session()
    session.handle_params({"sort": "asc"}, "https://example.com/items")

    apply_operation(
        session,
        push_patch(lambda url, session: url.with_params({"sort": "desc"})),
    )
    session.redirected  # PatchLocation(to="/items?sort=desc", replace=False)

From any other task holding the session's handle::

    from liveurl import push_patch, send_operation

    send_operation(
        lambda url: push_patch(url.with_params({"page": "2"})),
        session.handle,
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from liveurl.instructions import HostInstruction
    from liveurl.operation import Operation
    from liveurl.session import Session

__version__ = "0.3.0"
__all__ = [
    "ConfigurationError",
    "HardRedirect",
    "Host",
    "HookResult",
    "InvalidParamsError",
    "InvalidPathError",
    "InvalidUrlError",
    "InvariantViolation",
    "LiveUrlConfig",
    "LiveUrlError",
    "Mode",
    "NavigateToView",
    "Operation",
    "OperationError",
    "Params",
    "PatchLocation",
    "Path",
    "Session",
    "SessionHandle",
    "StackOperation",
    "Url",
    "apply_operation",
    "current_session",
    "push_navigate",
    "push_patch",
    "redirect",
    "send_operation",
]


def apply_operation(session: Session, operation: Operation) -> HostInstruction:
    """Synchronously apply *operation* from the session's own context.

    Alias for ``Session.apply``. Code outside the session (another task,
    a subordinate component) should use ``send_operation`` instead.
    """
    return session.apply(operation)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import liveurl`` fast while providing a clean top-level API.
    """
    if name == "LiveUrlConfig":
        from liveurl.config import LiveUrlConfig

        return LiveUrlConfig

    if name == "Params":
        from liveurl.params import Params

        return Params

    if name == "Path":
        from liveurl.path import Path

        return Path

    if name == "Url":
        from liveurl.url import Url

        return Url

    if name in ("Mode", "Operation", "StackOperation", "push_navigate", "push_patch", "redirect"):
        from liveurl import operation as _op

        return getattr(_op, name)

    if name in ("HardRedirect", "Host", "NavigateToView", "PatchLocation"):
        from liveurl import instructions as _instr

        return getattr(_instr, name)

    if name in ("HookResult", "Session", "SessionHandle", "current_session"):
        from liveurl import session as _session

        return getattr(_session, name)

    if name == "send_operation":
        from liveurl.client import send_operation

        return send_operation

    if name in (
        "ConfigurationError",
        "InvalidParamsError",
        "InvalidPathError",
        "InvalidUrlError",
        "InvariantViolation",
        "LiveUrlError",
        "OperationError",
    ):
        from liveurl import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
