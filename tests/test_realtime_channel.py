"""Tests for the Socket.IO realtime channel."""

import logging

import pytest

from fila_client.adapters.realtime import RealtimeChannel
from fila_client.domain.errors import ConnectionFailed
from fila_client.domain.models import ConnectionState, EventKind
from tests.fakes import WS_URL, FakeSocketClient, make_resolver


class Harness:
    """A channel wired to a fake socket client and a recording sleep."""

    def __init__(self, outcomes: list[bool] | None = None) -> None:
        self.socket = FakeSocketClient(outcomes=list(outcomes or []))
        self.delays: list[float] = []
        self.states: list[ConnectionState] = []
        self.channel = RealtimeChannel(
            make_resolver(),
            client_factory=lambda: self.socket,  # type: ignore[arg-type, return-value]
            max_attempts=5,
            delay_seconds=3.0,
            sleep=self._sleep,
        )
        self.channel.add_state_listener(self.states.append)

    async def _sleep(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.mark.asyncio
async def test_connect_uses_websocket_transport() -> None:
    """Given a fresh channel, when connecting, then it becomes connected to the configured URL."""
    harness = Harness()

    await harness.channel.connect()

    assert harness.channel.is_connected()
    assert harness.channel.url == WS_URL
    assert harness.states == [ConnectionState.CONNECTING, ConnectionState.CONNECTED]


@pytest.mark.asyncio
async def test_connect_when_connected_is_noop() -> None:
    harness = Harness()
    await harness.channel.connect()

    await harness.channel.connect()

    assert harness.socket.connect_calls == 1


@pytest.mark.asyncio
async def test_subscribe_before_connect_fails() -> None:
    """Given no connection, when joining a room, then ConnectionFailed is raised."""
    harness = Harness()

    with pytest.raises(ConnectionFailed) as exc_info:
        await harness.channel.subscribe_to_client("11999990000")

    assert exc_info.value.message == "WebSocket não conectado"
    assert harness.socket.emitted == []


@pytest.mark.asyncio
async def test_duplicate_joins_are_emitted_each_time() -> None:
    """Given a connected channel, when joining the same room twice, then both joins are sent."""
    harness = Harness()
    await harness.channel.connect()

    await harness.channel.subscribe_to_queue("q1")
    await harness.channel.subscribe_to_queue("q1")
    await harness.channel.subscribe_to_client("11999990000")

    assert harness.socket.emitted == [
        ("join-queue", "q1"),
        ("join-queue", "q1"),
        ("join-client", "11999990000"),
    ]


@pytest.mark.asyncio
async def test_leave_emits_and_forgets_room() -> None:
    harness = Harness()
    await harness.channel.connect()
    await harness.channel.subscribe_to_queue("q1")

    await harness.channel.unsubscribe_from_queue("q1")
    await harness.socket.drop()
    assert await harness.channel.wait_reconnected() is True

    assert harness.socket.emitted == [("join-queue", "q1"), ("leave-queue", "q1")]


@pytest.mark.asyncio
async def test_left_client_room_is_not_rejoined_after_reconnect() -> None:
    """Given a left client room, when the socket reconnects, then only the other rooms return."""
    harness = Harness()
    await harness.channel.connect()
    await harness.channel.subscribe_to_client("11999990000")
    await harness.channel.subscribe_to_queue("q1")

    await harness.channel.unsubscribe_from_client("11999990000")
    await harness.socket.drop()
    assert await harness.channel.wait_reconnected() is True

    assert harness.socket.emitted == [
        ("join-client", "11999990000"),
        ("join-queue", "q1"),
        ("leave-client", "11999990000"),
        ("join-queue", "q1"),
    ]


@pytest.mark.asyncio
async def test_initial_connect_failure_retries_then_raises() -> None:
    """Given an unreachable server, when connecting, then retries run and the channel fails."""
    harness = Harness(outcomes=[False] * 6)

    with pytest.raises(ConnectionFailed):
        await harness.channel.connect()

    assert harness.socket.connect_calls == 6
    assert harness.delays == [3.0] * 5
    assert harness.channel.state == ConnectionState.FAILED


@pytest.mark.asyncio
async def test_drop_retries_exactly_five_times_then_fails() -> None:
    """Given a connected channel, when the server goes away for good, then it gives up."""
    harness = Harness(outcomes=[True] + [False] * 10)
    await harness.channel.connect()

    await harness.socket.drop()
    connected = await harness.channel.wait_reconnected()

    assert connected is False
    assert harness.socket.connect_calls == 1 + 5
    assert harness.delays == [3.0] * 5
    assert harness.channel.state == ConnectionState.FAILED
    assert harness.states[-2:] == [ConnectionState.RECONNECTING, ConnectionState.FAILED]


@pytest.mark.asyncio
async def test_failed_channel_does_not_retry_on_its_own() -> None:
    harness = Harness(outcomes=[True] + [False] * 5)
    await harness.channel.connect()
    await harness.socket.drop()
    await harness.channel.wait_reconnected()

    with pytest.raises(ConnectionFailed):
        await harness.channel.subscribe_to_queue("q1")

    assert harness.socket.connect_calls == 6


@pytest.mark.asyncio
async def test_reconnect_rejoins_rooms() -> None:
    """Given joined rooms, when the socket reconnects, then every room is joined again."""
    harness = Harness(outcomes=[True, False, True])
    await harness.channel.connect()
    await harness.channel.subscribe_to_client("11999990000")
    await harness.channel.subscribe_to_queue("q1")
    harness.socket.emitted.clear()

    await harness.socket.drop()
    connected = await harness.channel.wait_reconnected()

    assert connected is True
    assert harness.channel.is_connected()
    assert harness.delays == [3.0, 3.0]
    assert harness.socket.emitted == [("join-client", "11999990000"), ("join-queue", "q1")]


@pytest.mark.asyncio
async def test_reconnect_after_failure_via_connect() -> None:
    """Given a failed channel, when connect is called again, then a new cycle starts."""
    harness = Harness(outcomes=[False] * 6 + [True])
    with pytest.raises(ConnectionFailed):
        await harness.channel.connect()

    await harness.channel.connect()

    assert harness.channel.is_connected()


@pytest.mark.asyncio
async def test_handler_registration_replaces_previous() -> None:
    """Given two handlers for one kind, when an event arrives, then only the last one runs."""
    harness = Harness()
    await harness.channel.connect()
    first: list[dict] = []
    second: list[dict] = []

    harness.channel.on_ticket_called(first.append)
    harness.channel.on_ticket_called(second.append)
    await harness.socket.receive("ticket-called", {"ticketId": "a", "number": 1})

    assert first == []
    assert second == [{"ticketId": "a", "number": 1}]


@pytest.mark.asyncio
async def test_async_handlers_are_awaited() -> None:
    harness = Harness()
    await harness.channel.connect()
    seen: list[dict] = []

    async def handler(payload: dict) -> None:
        seen.append(payload)

    harness.channel.on_queue_update(handler)
    await harness.socket.receive("queue-update", {"queueId": "q1"})

    assert seen == [{"queueId": "q1"}]


@pytest.mark.asyncio
async def test_event_streams_receive_every_event() -> None:
    """Given an open stream, when events arrive, then each is queued with its kind."""
    harness = Harness()
    await harness.channel.connect()
    stream = harness.channel.open_event_stream()

    await harness.socket.receive("ticket-update", {"id": "a", "position": 1})
    await harness.socket.receive("client-update", "refresh")

    first = stream.get_nowait()
    second = stream.get_nowait()
    assert first.kind == EventKind.TICKET_UPDATE
    assert first.payload == {"id": "a", "position": 1}
    assert second.kind == EventKind.CLIENT_UPDATE
    assert second.payload == {"data": "refresh"}
    assert second.received_at.tzinfo is not None


@pytest.mark.asyncio
async def test_closed_stream_receives_nothing() -> None:
    harness = Harness()
    await harness.channel.connect()
    stream = harness.channel.open_event_stream()
    harness.channel.close_event_stream(stream)

    await harness.socket.receive("ticket-update", {"id": "a"})

    assert stream.empty()


@pytest.mark.asyncio
async def test_handler_exception_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Given a failing handler, when its event arrives, then the error is logged and swallowed."""
    harness = Harness()
    await harness.channel.connect()
    stream = harness.channel.open_event_stream()

    def broken(payload: dict) -> None:
        raise ValueError("bad payload")

    harness.channel.on_client_update(broken)
    with caplog.at_level(logging.ERROR, logger="fila_client.adapters.realtime.socketio_channel"):
        await harness.socket.receive("client-update", {"identifier": "x"})

    assert "Handler for client-update failed: bad payload" in caplog.text
    assert stream.qsize() == 1


@pytest.mark.asyncio
async def test_disconnect_drops_handlers_and_is_idempotent() -> None:
    """Given a connected channel, when disconnecting twice, then both calls succeed."""
    harness = Harness()
    await harness.channel.connect()
    seen: list[dict] = []
    harness.channel.on_ticket_update(seen.append)

    await harness.channel.disconnect()
    await harness.channel.disconnect()

    assert harness.channel.state == ConnectionState.DISCONNECTED
    assert harness.socket.connected is False
    await harness.channel.dispatch(EventKind.TICKET_UPDATE, {"id": "a"})
    assert seen == []


@pytest.mark.asyncio
async def test_disconnect_does_not_trigger_reconnect() -> None:
    harness = Harness()
    await harness.channel.connect()

    await harness.channel.disconnect()

    assert await harness.channel.wait_reconnected() is False
    assert harness.socket.connect_calls == 1
    assert harness.delays == []
