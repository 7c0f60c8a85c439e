"""Contracts (protocols) between application services and adapters."""

from fila_client.domain.contracts.auth_api import AuthApiProtocol, SessionStoreProtocol
from fila_client.domain.contracts.auth_session import AuthSessionProtocol, SessionListener
from fila_client.domain.contracts.queue_api import QueueApiProtocol
from fila_client.domain.contracts.realtime_channel import (
    ConnectionStateListener,
    RealtimeChannelProtocol,
)

__all__ = [
    "AuthApiProtocol",
    "AuthSessionProtocol",
    "ConnectionStateListener",
    "QueueApiProtocol",
    "RealtimeChannelProtocol",
    "SessionListener",
    "SessionStoreProtocol",
]
