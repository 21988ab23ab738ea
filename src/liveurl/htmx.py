"""htmx host binding — turn host instructions into response headers.

=============================  ==========================================
instruction                    headers
=============================  ==========================================
``PatchLocation`` push         ``HX-Push-Url: to``
``PatchLocation`` replace      ``HX-Replace-Url: to``
``NavigateToView`` push        ``HX-Location: to``
``NavigateToView`` replace     ``HX-Location: to`` + ``HX-Replace-Url: to``
``HardRedirect``               ``HX-Redirect: to | external``
=============================  ==========================================
"""

from __future__ import annotations

from liveurl.errors import InvariantViolation
from liveurl.http.response import Response
from liveurl.instructions import HardRedirect, HostInstruction, NavigateToView, PatchLocation


def to_response(
    instruction: HostInstruction,
    response: Response | None = None,
    *,
    target: str | None = None,
) -> Response:
    """Return *response* (or a new empty one) carrying *instruction* as htmx headers.

    *target* is the CSS selector ``HX-Location`` swaps into; htmx uses
    ``body`` when omitted.
    """
    response = Response() if response is None else response
    match instruction:
        case PatchLocation(to=to, replace=False):
            return response.with_hx_push_url(to)
        case PatchLocation(to=to, replace=True):
            return response.with_hx_replace_url(to)
        case NavigateToView(to=to, replace=False):
            return response.with_hx_location(to, target=target)
        case NavigateToView(to=to, replace=True):
            return response.with_hx_location(to, target=target).with_hx_replace_url(to)
        case HardRedirect():
            return response.with_hx_redirect(instruction.target)
        case _:
            msg = f"Unknown host instruction: {instruction!r}"
            raise InvariantViolation(msg)


class HtmxHost:
    """``Host`` that accumulates htmx headers on a response.

    Usage::

        host = HtmxHost()
        session = Session(host=host)
        ...
        return host.response
    """

    __slots__ = ("response", "target")

    def __init__(self, response: Response | None = None, *, target: str | None = None) -> None:
        self.response = Response() if response is None else response
        self.target = target

    def patch_location(self, to: str, *, replace: bool) -> None:
        self.response = to_response(PatchLocation(to, replace), self.response)

    def navigate_to_view(self, to: str, *, replace: bool) -> None:
        self.response = to_response(NavigateToView(to, replace), self.response, target=self.target)

    def hard_redirect(self, *, to: str | None = None, external: str | None = None) -> None:
        self.response = to_response(HardRedirect(to=to, external=external), self.response)
