"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design. Only the pieces the htmx host binding
needs: status, headers, and the navigation-related htmx headers.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def header(self, name: str) -> str | None:
        """Return the last value set for *name* (case-insensitive), or ``None``."""
        lowered = name.lower()
        for key, value in reversed(self.headers):
            if key.lower() == lowered:
                return value
        return None

    # -- htmx response headers --

    def with_hx_redirect(self, url: str) -> Response:
        """Tell htmx to do a full-page redirect (like entering a URL).

        Sets the ``HX-Redirect`` response header.
        """
        return self.with_header("HX-Redirect", url)

    def with_hx_location(self, url: str, *, target: str | None = None) -> Response:
        """Tell htmx to navigate via AJAX (like clicking a boosted link).

        Sets ``HX-Location`` to the plain URL, or to a JSON object when a
        *target* selector is given.
        """
        if target is None:
            return self.with_header("HX-Location", url)
        return self.with_header("HX-Location", json_module.dumps({"path": url, "target": target}))

    def with_hx_push_url(self, url: str) -> Response:
        """Push a URL into the browser history stack (``HX-Push-Url``)."""
        return self.with_header("HX-Push-Url", url)

    def with_hx_replace_url(self, url: str) -> Response:
        """Replace the current URL in the location bar (``HX-Replace-Url``)."""
        return self.with_header("HX-Replace-Url", url)
