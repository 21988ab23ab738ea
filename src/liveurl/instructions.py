"""Host instructions — what the host runtime must do after an operation.

Applying an operation produces exactly one of three frozen dataclasses.
The host performs the actual navigation; liveurl only decides what it
should be.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, TypeAlias

from liveurl.errors import InvariantViolation


@dataclass(frozen=True, slots=True)
class PatchLocation:
    """Update the location of the current view without remounting it."""

    to: str
    replace: bool = False


@dataclass(frozen=True, slots=True)
class NavigateToView:
    """Mount the view at *to* over the live connection."""

    to: str
    replace: bool = False


@dataclass(frozen=True, slots=True)
class HardRedirect:
    """Full page load, either inside the app (*to*) or out of it (*external*)."""

    to: str | None = None
    external: str | None = None

    def __post_init__(self) -> None:
        if (self.to is None) == (self.external is None):
            msg = "HardRedirect needs exactly one of 'to' or 'external'"
            raise InvariantViolation(msg)

    @property
    def target(self) -> str:
        return self.to if self.to is not None else self.external  # type: ignore[return-value]


HostInstruction: TypeAlias = PatchLocation | NavigateToView | HardRedirect


class Host(Protocol):
    """Protocol for the runtime that performs navigations.

    Any object with these three methods works; no base class required::

        class MyHost:
            def patch_location(self, to: str, *, replace: bool) -> None: ...
            def navigate_to_view(self, to: str, *, replace: bool) -> None: ...
            def hard_redirect(self, *, to=None, external=None) -> None: ...
    """

    def patch_location(self, to: str, *, replace: bool) -> None: ...

    def navigate_to_view(self, to: str, *, replace: bool) -> None: ...

    def hard_redirect(self, *, to: str | None = None, external: str | None = None) -> None: ...


def perform(host: Host, instruction: HostInstruction) -> None:
    """Issue the single host call matching *instruction*."""
    match instruction:
        case PatchLocation(to=to, replace=replace):
            host.patch_location(to, replace=replace)
        case NavigateToView(to=to, replace=replace):
            host.navigate_to_view(to, replace=replace)
        case HardRedirect(to=to, external=external):
            host.hard_redirect(to=to, external=external)
        case _:
            msg = f"Unknown host instruction: {instruction!r}"
            raise InvariantViolation(msg)
