"""Tests for liveurl.htmx — host instructions as htmx response headers."""

import json

import pytest

from liveurl.errors import InvariantViolation
from liveurl.htmx import HtmxHost, to_response
from liveurl.http.response import Response
from liveurl.instructions import HardRedirect, NavigateToView, PatchLocation
from liveurl.operation import push_navigate, push_patch, redirect
from liveurl.session import Session


class TestToResponse:
    def test_patch_push(self) -> None:
        response = to_response(PatchLocation("/a?b=c"))
        assert response.headers == (("HX-Push-Url", "/a?b=c"),)

    def test_patch_replace(self) -> None:
        response = to_response(PatchLocation("/a", replace=True))
        assert response.headers == (("HX-Replace-Url", "/a"),)

    def test_navigate_push(self) -> None:
        response = to_response(NavigateToView("/other"))
        assert response.headers == (("HX-Location", "/other"),)

    def test_navigate_replace(self) -> None:
        response = to_response(NavigateToView("/other", replace=True))
        assert response.header("HX-Location") == "/other"
        assert response.header("HX-Replace-Url") == "/other"

    def test_navigate_with_target(self) -> None:
        response = to_response(NavigateToView("/other"), target="#main")
        assert json.loads(response.header("HX-Location") or "") == {
            "path": "/other",
            "target": "#main",
        }

    @pytest.mark.parametrize(
        ("instruction", "location"),
        [
            (HardRedirect(to="/login"), "/login"),
            (HardRedirect(external="https://example.org"), "https://example.org"),
        ],
    )
    def test_redirect(self, instruction: HardRedirect, location: str) -> None:
        assert to_response(instruction).header("HX-Redirect") == location

    def test_keeps_existing_response(self) -> None:
        base = Response("<p>ok</p>", status=200).with_header("X-Custom", "1")
        response = to_response(PatchLocation("/a"), base)
        assert response.body == "<p>ok</p>"
        assert response.header("X-Custom") == "1"
        assert response.header("HX-Push-Url") == "/a"
        assert base.header("HX-Push-Url") is None

    def test_unknown_instruction(self) -> None:
        with pytest.raises(InvariantViolation):
            to_response("/a")  # type: ignore[arg-type]


class TestHtmxHost:
    @pytest.fixture
    def bound(self) -> tuple[HtmxHost, Session]:
        host = HtmxHost(target="#content")
        session = Session(host=host)
        session.handle_params({"page": "1"}, "https://example.com/items")
        return host, session

    def test_patch(self, bound: tuple[HtmxHost, Session]) -> None:
        host, session = bound
        session.apply(push_patch(lambda url, _s: url.with_params({"page": "2"})))
        assert host.response.header("HX-Push-Url") == "/items?page=2"

    def test_navigate_uses_target(self, bound: tuple[HtmxHost, Session]) -> None:
        host, session = bound
        session.apply(push_navigate("/other", replace=True))
        location = json.loads(host.response.header("HX-Location") or "")
        assert location == {"path": "/other", "target": "#content"}
        assert host.response.header("HX-Replace-Url") == "/other"

    def test_redirect(self, bound: tuple[HtmxHost, Session]) -> None:
        host, session = bound
        session.apply(redirect(external="https://example.org/bye"))
        assert host.response.header("HX-Redirect") == "https://example.org/bye"

    def test_wraps_given_response(self) -> None:
        host = HtmxHost(Response("body"))
        host.patch_location("/a", replace=False)
        assert host.response.body == "body"
        assert host.response.header("HX-Push-Url") == "/a"
