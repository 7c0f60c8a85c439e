"""Protocol for the push event channel consumed by the sync engine."""

import asyncio
from collections.abc import Callable
from typing import Protocol

from fila_client.domain.models.realtime import ConnectionState, RealtimeEvent

ConnectionStateListener = Callable[[ConnectionState], None]


class RealtimeChannelProtocol(Protocol):
    """Protocol for one persistent socket with topic subscriptions."""

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        ...

    async def connect(self, url: str | None = None) -> None:
        """Open the connection; a no-op when already connected."""
        ...

    async def disconnect(self) -> None:
        """Close the connection and drop all event handlers."""
        ...

    def is_connected(self) -> bool:
        """True while the socket is connected."""
        ...

    async def subscribe_to_client(self, identifier: str) -> None:
        """Join the client's room."""
        ...

    async def subscribe_to_queue(self, queue_id: str) -> None:
        """Join a queue's room."""
        ...

    def open_event_stream(self) -> "asyncio.Queue[RealtimeEvent]":
        """Return a new queue receiving every inbound event."""
        ...

    def close_event_stream(self, stream: "asyncio.Queue[RealtimeEvent]") -> None:
        """Stop delivering events to ``stream``."""
        ...

    def add_state_listener(self, listener: ConnectionStateListener) -> None:
        """Register an observer of connection state changes."""
        ...
