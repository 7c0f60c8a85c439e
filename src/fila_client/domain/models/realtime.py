"""Realtime channel domain models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class ConnectionState(str, Enum):
    """State of the persistent socket connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


class EventKind(str, Enum):
    """Inbound push event names as sent by the server."""

    TICKET_CALLED = "ticket-called"
    TICKET_UPDATE = "ticket-update"
    CLIENT_UPDATE = "client-update"
    QUEUE_UPDATE = "queue-update"


@dataclass(frozen=True)
class RealtimeEvent:
    """A push event tagged with its kind and local arrival time."""

    kind: EventKind
    payload: dict[str, Any]
    received_at: datetime
