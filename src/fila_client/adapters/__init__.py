"""Adapters layer - external system integrations."""

from fila_client.adapters.api import QueueApiClient
from fila_client.adapters.config import AppConfig, ConfigResolver
from fila_client.adapters.notifications import LoggingTicketNotifier
from fila_client.adapters.oauth import build_oauth_provider
from fila_client.adapters.realtime import RealtimeChannel
from fila_client.adapters.storage import SessionStore

__all__ = [
    "AppConfig",
    "ConfigResolver",
    "LoggingTicketNotifier",
    "QueueApiClient",
    "RealtimeChannel",
    "SessionStore",
    "build_oauth_provider",
]
