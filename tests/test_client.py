"""Tests for liveurl.client — enqueueing navigation requests."""

from collections.abc import Iterator
from typing import Any

import anyio
import pytest
from anyio.streams.memory import MemoryObjectReceiveStream

from liveurl.client import send, send_navigate, send_operation, send_patch, send_redirect
from liveurl.errors import OperationError
from liveurl.messages import PROTOCOL_TAG, NavigationRequest, match_request
from liveurl.operation import OperationKind, push_patch
from liveurl.session import Session, SessionHandle, session_scope


@pytest.fixture
def probe() -> Iterator[tuple[SessionHandle, MemoryObjectReceiveStream[Any]]]:
    send_stream, receive_stream = anyio.create_memory_object_stream[Any](10)
    handle = SessionHandle(send_stream, "probe")
    yield handle, receive_stream
    handle.close()
    receive_stream.close()


def _build(url: Any) -> Any:
    return push_patch("/built")


class TestSendOperation:
    def test_enqueues_build_request(self, probe: Any) -> None:
        handle, received = probe
        send_operation(_build, handle)
        message = received.receive_nowait()
        assert message == (PROTOCOL_TAG, OperationKind.BUILD, _build)
        assert isinstance(message, NavigationRequest)
        assert match_request(message) == message

    def test_returns_none(self, probe: Any) -> None:
        handle, _ = probe
        assert send_operation(_build, handle) is None

    def test_rejects_non_callable(self, probe: Any) -> None:
        handle, received = probe
        with pytest.raises(TypeError, match="build function"):
            send_operation(push_patch("/a"), handle)  # type: ignore[arg-type]
        with pytest.raises(anyio.WouldBlock):
            received.receive_nowait()

    def test_requires_handle_outside_session(self) -> None:
        with pytest.raises(LookupError, match="No active session"):
            send_operation(_build)

    def test_defaults_to_current_session(self, session: Session) -> None:
        with session_scope(session):
            send_operation(_build)
        assert len(session.process_pending()) == 1


class TestSendHelpers:
    def test_send_patch(self, probe: Any) -> None:
        handle, received = probe
        send_patch("/a", replace=True, handle=handle)
        tag, kind, operation = received.receive_nowait()
        assert (tag, kind) == (PROTOCOL_TAG, OperationKind.PATCH)
        assert operation == push_patch("/a", replace=True)

    def test_send_navigate(self, probe: Any) -> None:
        handle, received = probe
        send_navigate("/b", handle=handle)
        assert received.receive_nowait().kind is OperationKind.NAVIGATE

    def test_send_redirect(self, probe: Any) -> None:
        handle, received = probe
        send_redirect(external="https://example.org", handle=handle)
        message = received.receive_nowait()
        assert message.kind is OperationKind.REDIRECT
        assert message.payload.target == "https://example.org"

    def test_shape_errors_raise_at_caller(self, probe: Any) -> None:
        handle, received = probe
        with pytest.raises(OperationError):
            send_patch("https://a.com", handle=handle)
        with pytest.raises(OperationError):
            send_redirect(handle=handle)
        with pytest.raises(anyio.WouldBlock):
            received.receive_nowait()

    def test_send_rejects_non_operation(self, probe: Any) -> None:
        handle, _ = probe
        with pytest.raises(TypeError, match="expects an Operation"):
            send("/a", handle)  # type: ignore[arg-type]

    def test_order_preserved(self, probe: Any) -> None:
        handle, received = probe
        send_patch("/1", handle=handle)
        send_navigate("/2", handle=handle)
        send_redirect(to="/3", handle=handle)
        targets = [received.receive_nowait().payload.target for _ in range(3)]
        assert targets == ["/1", "/2", "/3"]


class TestHandle:
    def test_send_after_receiver_gone_is_dropped(self, probe: Any) -> None:
        handle, received = probe
        received.close()
        send_patch("/a", handle=handle)

    def test_repr_names_session(self, probe: Any) -> None:
        handle, _ = probe
        assert "probe" in repr(handle)
