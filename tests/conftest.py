"""Shared fixtures: a session at /base?x=y and a host that records calls."""

from typing import Any

import pytest

from liveurl.session import Session


class RecordingHost:
    """Host that records every call as (method, args) instead of navigating."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def patch_location(self, to: str, *, replace: bool) -> None:
        self.calls.append(("patch_location", {"to": to, "replace": replace}))

    def navigate_to_view(self, to: str, *, replace: bool) -> None:
        self.calls.append(("navigate_to_view", {"to": to, "replace": replace}))

    def hard_redirect(self, *, to: str | None = None, external: str | None = None) -> None:
        self.calls.append(("hard_redirect", {"to": to, "external": external}))


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def session(host: RecordingHost) -> Session:
    s = Session(host=host, name="test")
    s.handle_params({"x": "y"}, "https://example.com/base")
    return s
