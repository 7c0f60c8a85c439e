"""Socket.IO realtime channel with a fixed reconnection policy."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError

from fila_client.domain.errors import ConnectionFailed
from fila_client.domain.models.realtime import ConnectionState, EventKind, RealtimeEvent

if TYPE_CHECKING:
    from fila_client.adapters.config.environment import ConfigResolver
    from fila_client.domain.contracts.realtime_channel import ConnectionStateListener

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], Awaitable[None] | None]
ClientFactory = Callable[[], socketio.AsyncClient]
Sleep = Callable[[float], Awaitable[None]]

NOT_CONNECTED_MESSAGE = "WebSocket não conectado"


def _default_client() -> socketio.AsyncClient:
    # Reconnection is driven by RealtimeChannel, not by the library.
    return socketio.AsyncClient(reconnection=False)


class RealtimeChannel:
    """Owns the single socket of the process, its room joins and event dispatch.

    Events are delivered to the one handler registered per kind and to every
    open event stream. After an unexpected disconnect the channel retries up to
    ``max_attempts`` times, waiting ``delay_seconds`` before each attempt, and
    re-joins every room it had joined. When all attempts fail it settles in
    :attr:`ConnectionState.FAILED` and does not retry again on its own.
    """

    def __init__(
        self,
        resolver: ConfigResolver,
        client_factory: ClientFactory | None = None,
        max_attempts: int | None = None,
        delay_seconds: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the channel.

        Args:
            resolver: Source of the WebSocket URL and reconnection settings.
            client_factory: Builds the socket client; a Socket.IO AsyncClient by default.
            max_attempts: Reconnection attempts before giving up.
            delay_seconds: Fixed wait before each reconnection attempt.
            sleep: Awaitable used for the wait between attempts.
        """
        config = resolver.app_config
        self._url = resolver.websocket_url
        self._client_factory = client_factory or _default_client
        self._max_attempts = config.ws_reconnect_attempts if max_attempts is None else max_attempts
        self._delay_seconds = (
            config.ws_reconnect_delay_seconds if delay_seconds is None else delay_seconds
        )
        self._sleep = sleep

        self._client: socketio.AsyncClient | None = None
        self._state = ConnectionState.DISCONNECTED
        self._closing = False
        self._connect_lock = asyncio.Lock()
        self._reconnect_task: asyncio.Task[bool] | None = None

        self._handlers: dict[EventKind, EventHandler] = {}
        self._streams: list[asyncio.Queue[RealtimeEvent]] = []
        self._state_listeners: list[ConnectionStateListener] = []
        # Ordered sets of joined rooms, replayed after a reconnect
        self._client_rooms: dict[str, None] = {}
        self._queue_rooms: dict[str, None] = {}

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def url(self) -> str:
        return self._url

    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    def add_state_listener(self, listener: ConnectionStateListener) -> None:
        self._state_listeners.append(listener)

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        logger.debug(f"Realtime channel {self._state.value} -> {state.value}")
        self._state = state
        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Connection state listener failed: {e}", exc_info=True)

    # Connection management

    async def connect(self, url: str | None = None) -> None:
        """Open the socket, retrying per the reconnection policy.

        Calling this while connected is a no-op. If a reconnection is already
        running, its outcome is awaited instead of starting a second one.

        Raises:
            ConnectionFailed: The initial attempt and every retry failed.
        """
        async with self._connect_lock:
            if self.is_connected():
                logger.debug("Realtime channel already connected")
                return

            if self._reconnect_task is not None and not self._reconnect_task.done():
                connected = await asyncio.shield(self._reconnect_task)
            else:
                if url:
                    self._url = url
                self._closing = False
                if self._client is None:
                    self._client = self._build_client()
                connected = await self._connect_with_retries(initial=True)

            if not connected and not self._closing:
                raise ConnectionFailed()

    async def disconnect(self) -> None:
        """Close the socket and drop all event handlers and room joins.

        Safe to call when already disconnected. State listeners and open event
        streams stay registered.
        """
        self._closing = True
        task = self._reconnect_task
        self._reconnect_task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.debug("Reconnection cancelled by disconnect")

        client = self._client
        self._client = None
        self._handlers.clear()
        self._client_rooms.clear()
        self._queue_rooms.clear()

        if client is not None and client.connected:
            await client.disconnect()
            logger.info("Realtime channel disconnected")
        self._set_state(ConnectionState.DISCONNECTED)

    def _build_client(self) -> socketio.AsyncClient:
        client = self._client_factory()
        for kind in EventKind:
            client.on(kind.value, self._make_dispatcher(kind))
        client.on("disconnect", self._on_disconnect)
        return client

    async def _try_connect(self) -> bool:
        client = self._client
        if client is None:
            return False
        try:
            await client.connect(self._url, transports=["websocket"])
        except SocketConnectionError as e:
            logger.warning(f"WebSocket connection to {self._url} failed: {e}")
            return False

        if self._closing:
            await client.disconnect()
            return False
        logger.info(f"WebSocket connected to {self._url}")
        self._set_state(ConnectionState.CONNECTED)
        return True

    async def _connect_with_retries(self, initial: bool) -> bool:
        if initial:
            self._set_state(ConnectionState.CONNECTING)
            if await self._try_connect():
                return True

        for attempt in range(1, self._max_attempts + 1):
            if self._closing:
                return False
            self._set_state(ConnectionState.RECONNECTING)
            logger.info(
                f"Reconnecting in {self._delay_seconds}s "
                f"(attempt {attempt}/{self._max_attempts})"
            )
            await self._sleep(self._delay_seconds)
            if self._closing:
                return False
            if await self._try_connect():
                await self._rejoin_rooms()
                return True

        logger.error(f"WebSocket gave up after {self._max_attempts} reconnection attempts")
        self._set_state(ConnectionState.FAILED)
        return False

    async def _on_disconnect(self, *args: Any) -> None:
        if self._closing:
            return
        logger.warning(f"WebSocket disconnected unexpectedly: {args[0] if args else 'unknown'}")
        if self._reconnect_task is None or self._reconnect_task.done():
            self._reconnect_task = asyncio.create_task(
                self._connect_with_retries(initial=False)
            )

    async def wait_reconnected(self) -> bool:
        """Await a running reconnection; True if the socket ends up connected."""
        task = self._reconnect_task
        if task is None:
            return self.is_connected()
        return await asyncio.shield(task)

    # Rooms

    async def subscribe_to_client(self, identifier: str) -> None:
        """Emit ``join-client``. Repeated joins are sent again, not deduplicated."""
        await self._join("join-client", identifier, self._client_rooms)

    async def subscribe_to_queue(self, queue_id: str) -> None:
        """Emit ``join-queue``. Repeated joins are sent again, not deduplicated."""
        await self._join("join-queue", queue_id, self._queue_rooms)

    async def unsubscribe_from_client(self, identifier: str) -> None:
        await self._leave("leave-client", identifier, self._client_rooms)

    async def unsubscribe_from_queue(self, queue_id: str) -> None:
        await self._leave("leave-queue", queue_id, self._queue_rooms)

    async def _join(self, event: str, room: str, rooms: dict[str, None]) -> None:
        if self._client is None or self._state in (
            ConnectionState.DISCONNECTED,
            ConnectionState.FAILED,
        ):
            raise ConnectionFailed(NOT_CONNECTED_MESSAGE)
        rooms[room] = None
        if self.is_connected():
            await self._client.emit(event, room)
            logger.debug(f"Sent {event} for {room}")

    async def _leave(self, event: str, room: str, rooms: dict[str, None]) -> None:
        rooms.pop(room, None)
        if self._client is not None and self.is_connected():
            await self._client.emit(event, room)
            logger.debug(f"Sent {event} for {room}")

    async def _rejoin_rooms(self) -> None:
        client = self._client
        if client is None:
            return
        joins = [("join-client", room) for room in self._client_rooms] + [
            ("join-queue", room) for room in self._queue_rooms
        ]
        for event, room in joins:
            try:
                await client.emit(event, room)
            except Exception as e:
                logger.error(f"Failed to re-join {room} after reconnect: {e}", exc_info=True)
        if joins:
            logger.info(f"Re-joined {len(joins)} room(s) after reconnect")

    # Inbound events

    def on(self, kind: EventKind, handler: EventHandler) -> None:
        """Register the handler for ``kind``, replacing any previous one."""
        self._handlers[kind] = handler

    def on_ticket_called(self, handler: EventHandler) -> None:
        self.on(EventKind.TICKET_CALLED, handler)

    def on_ticket_update(self, handler: EventHandler) -> None:
        self.on(EventKind.TICKET_UPDATE, handler)

    def on_client_update(self, handler: EventHandler) -> None:
        self.on(EventKind.CLIENT_UPDATE, handler)

    def on_queue_update(self, handler: EventHandler) -> None:
        self.on(EventKind.QUEUE_UPDATE, handler)

    def open_event_stream(self) -> asyncio.Queue[RealtimeEvent]:
        """Return a new unbounded queue that receives every inbound event."""
        stream: asyncio.Queue[RealtimeEvent] = asyncio.Queue()
        self._streams.append(stream)
        return stream

    def close_event_stream(self, stream: asyncio.Queue[RealtimeEvent]) -> None:
        if stream in self._streams:
            self._streams.remove(stream)

    def _make_dispatcher(self, kind: EventKind) -> Callable[..., Awaitable[None]]:
        async def dispatcher(data: Any = None, *_: Any) -> None:
            await self.dispatch(kind, data)

        return dispatcher

    async def dispatch(self, kind: EventKind, data: Any) -> None:
        """Deliver one inbound event to the streams and the registered handler."""
        payload = data if isinstance(data, dict) else {"data": data}
        event = RealtimeEvent(kind=kind, payload=payload, received_at=datetime.now(UTC))
        logger.debug(f"Received {kind.value}")

        for stream in list(self._streams):
            stream.put_nowait(event)

        handler = self._handlers.get(kind)
        if handler is None:
            return
        try:
            result = handler(payload)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Handler for {kind.value} failed: {e}", exc_info=True)
