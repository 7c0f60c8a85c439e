"""Domain layer - core models, failure taxonomy and ports."""

from fila_client.domain.models import (
    ClientIdentity,
    DashboardSnapshot,
    Session,
    SessionState,
    Ticket,
)
from fila_client.domain.ports import (
    AuthorizationPrompt,
    KeyValueStore,
    OAuthProvider,
    TicketNotifier,
)

__all__ = [
    "AuthorizationPrompt",
    "ClientIdentity",
    "DashboardSnapshot",
    "KeyValueStore",
    "OAuthProvider",
    "Session",
    "SessionState",
    "Ticket",
    "TicketNotifier",
]
