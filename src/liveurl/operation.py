"""Navigation operations — a target plus how to get there.

An Operation pairs a target with a ``Mode`` (stay in the view, mount
another view, or leave the app) and a ``StackOperation`` (push a history
entry, replace it, or reload the page). The constructors in this module
are the only producers, so ``apply`` only ever sees these pairs:

=============  ===============  ====================================
mode           stack_operation  host instruction
=============  ===============  ====================================
INTRA_VIEW     PUSH             ``PatchLocation(to, replace=False)``
INTRA_VIEW     REPLACE          ``PatchLocation(to, replace=True)``
INTER_VIEW     PUSH             ``NavigateToView(to, replace=False)``
INTER_VIEW     REPLACE          ``NavigateToView(to, replace=True)``
INTER_VIEW     REDIRECT         ``HardRedirect(to=...)``
EXTERNAL       REDIRECT         ``HardRedirect(external=...)``
=============  ===============  ====================================

A target is a ``Url``, a string, or a function ``(url, session) -> Url | str``
evaluated at apply time against the session's current url.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeAlias
from urllib.parse import urlsplit

from liveurl._internal.types import TargetFn
from liveurl.errors import InvalidPathError, InvariantViolation, OperationError
from liveurl.instructions import HardRedirect, HostInstruction, NavigateToView, PatchLocation
from liveurl.path import Path
from liveurl.url import DEFAULT_PORTS, Url

if TYPE_CHECKING:
    from liveurl.session import Session

Target: TypeAlias = Url | str | TargetFn


class Mode(Enum):
    """How the host reaches the target."""

    INTRA_VIEW = "intra_view"
    INTER_VIEW = "inter_view"
    EXTERNAL = "external"


class StackOperation(Enum):
    """How the navigation affects browser history."""

    PUSH = "push"
    REPLACE = "replace"
    REDIRECT = "redirect"


class OperationKind(Enum):
    """Wire-level kind of a navigation request.

    ``BUILD`` marks a deferred build function whose operation, and so its
    real kind, only exists once the session evaluates it.
    """

    PATCH = "patch"
    NAVIGATE = "navigate"
    REDIRECT = "redirect"
    BUILD = "build"


@dataclass(frozen=True, slots=True)
class Operation:
    """A navigation intent. Build with ``push_patch``, ``push_navigate`` or ``redirect``."""

    target: Target
    mode: Mode
    stack_operation: StackOperation

    @property
    def kind(self) -> OperationKind:
        if self.mode is Mode.INTRA_VIEW:
            return OperationKind.PATCH
        if self.stack_operation is StackOperation.REDIRECT:
            return OperationKind.REDIRECT
        return OperationKind.NAVIGATE

    @property
    def is_lazy(self) -> bool:
        """Whether the target is a function evaluated at apply time."""
        return callable(self.target)


# -- Target shape checks --


def _is_internal(target: str) -> bool:
    # A "#" in an encoded target can only be a fragment.
    if "#" in target:
        return False
    path, _, _query = target.partition("?")
    try:
        Path.from_string(path)
    except InvalidPathError:
        return False
    return True


def _is_external(target: str) -> bool:
    try:
        parts = urlsplit(target)
    except ValueError:
        return False
    return parts.scheme.lower() in DEFAULT_PORTS and bool(parts.hostname)


def _internal(target: Any, what: str) -> Target:
    if isinstance(target, Url) or callable(target):
        return target
    if isinstance(target, str) and _is_internal(target):
        return target
    msg = (
        f"{what} target must be a Url, an absolute path like '/a/b?c=d', "
        f"or a function, got {target!r}"
    )
    raise OperationError(msg)


def _external(target: Any) -> Target:
    if isinstance(target, Url) or callable(target):
        return target
    if isinstance(target, str) and _is_external(target):
        return target
    msg = (
        "redirect(external=...) target must be a Url or an absolute http(s) url string, "
        f"got {target!r}"
    )
    raise OperationError(msg)


# -- Constructors --


def push_patch(to: Target, *, replace: bool = False) -> Operation:
    """Patch the current view's location, pushing or replacing a history entry.

    Usage::

        push_patch(url.with_params({"page": "2"}))
        push_patch(lambda url, session: url.with_path("/search"), replace=True)
    """
    stack_operation = StackOperation.REPLACE if replace else StackOperation.PUSH
    return Operation(_internal(to, "push_patch"), Mode.INTRA_VIEW, stack_operation)


def push_navigate(to: Target, *, replace: bool = False) -> Operation:
    """Mount the view at *to*, pushing or replacing a history entry."""
    stack_operation = StackOperation.REPLACE if replace else StackOperation.PUSH
    return Operation(_internal(to, "push_navigate"), Mode.INTER_VIEW, stack_operation)


def redirect(*, to: Target | None = None, external: Target | None = None) -> Operation:
    """Full page redirect, inside the app (*to*) or out of it (*external*).

    Exactly one of *to* and *external* must be given. An external string
    is used verbatim::

        redirect(to=url.with_path("/login").with_params({}))
        redirect(external="https://example.com")
    """
    if (to is None) == (external is None):
        msg = "redirect() needs exactly one of 'to' or 'external'"
        raise OperationError(msg)
    if to is not None:
        return Operation(_internal(to, "redirect(to=...)"), Mode.INTER_VIEW, StackOperation.REDIRECT)
    return Operation(_external(external), Mode.EXTERNAL, StackOperation.REDIRECT)


# -- Application --


def resolve_target(operation: Operation, session: Session) -> Url | str:
    """Evaluate a lazy target against the session's current url."""
    if not operation.is_lazy:
        return operation.target  # type: ignore[return-value]
    url = session.url
    if url is None:
        msg = "Cannot resolve a lazy target before the session has a location"
        raise OperationError(msg)
    return operation.target(url, session)  # type: ignore[operator]


def _relative(target: Url | str) -> str:
    if isinstance(target, Url):
        return target.to_relative_target()
    if isinstance(target, str) and _is_internal(target):
        return target
    msg = (
        f"Internal operation resolved to {target!r}, "
        "expected a Url or an absolute path like '/a/b?c=d'"
    )
    raise OperationError(msg)


def _absolute(target: Url | str) -> str:
    if isinstance(target, Url):
        return target.to_absolute_target()
    if isinstance(target, str) and _is_external(target):
        return target
    msg = (
        f"External redirect resolved to {target!r}, "
        "expected a Url or an absolute http(s) url string"
    )
    raise OperationError(msg)


def to_instruction(operation: Operation, target: Url | str) -> HostInstruction:
    """Map an operation and its resolved target to a host instruction."""
    match (operation.mode, operation.stack_operation):
        case (Mode.INTRA_VIEW, StackOperation.PUSH):
            return PatchLocation(_relative(target), replace=False)
        case (Mode.INTRA_VIEW, StackOperation.REPLACE):
            return PatchLocation(_relative(target), replace=True)
        case (Mode.INTER_VIEW, StackOperation.PUSH):
            return NavigateToView(_relative(target), replace=False)
        case (Mode.INTER_VIEW, StackOperation.REPLACE):
            return NavigateToView(_relative(target), replace=True)
        case (Mode.INTER_VIEW, StackOperation.REDIRECT):
            return HardRedirect(to=_relative(target))
        case (Mode.EXTERNAL, StackOperation.REDIRECT):
            return HardRedirect(external=_absolute(target))
        case (mode, stack_operation):
            msg = f"No host instruction for mode={mode!r}, stack_operation={stack_operation!r}"
            raise InvariantViolation(msg)


def apply(session: Session, operation: Operation) -> HostInstruction:
    """Resolve *operation* against *session* and return its host instruction.

    Pure: records nothing on the session. ``Session.apply`` is the
    recording variant.
    """
    if not isinstance(operation, Operation):
        msg = f"Expected an Operation, got {type(operation).__name__}"
        raise OperationError(msg)
    return to_instruction(operation, resolve_target(operation, session))
