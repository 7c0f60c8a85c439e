"""Domain models for the fila client."""

from fila_client.domain.models.client_identity import ClientIdentity
from fila_client.domain.models.dashboard import (
    DashboardSnapshot,
    DashboardStatus,
    DashboardSummary,
    QueueTickets,
    TenantTickets,
)
from fila_client.domain.models.error_details import ErrorDetails
from fila_client.domain.models.oauth import (
    AuthorizationRequest,
    AuthorizationResult,
    DiscoveryDocument,
    ProviderUser,
)
from fila_client.domain.models.realtime import ConnectionState, EventKind, RealtimeEvent
from fila_client.domain.models.session import DEMO_TOKEN_PREFIX, Session, SessionState
from fila_client.domain.models.ticket import NewTicketRequest, Queue, Tenant, Ticket, TicketStatus
from fila_client.domain.models.user_queues import UserQueue, UserQueuesData, UserQueueTicket

__all__ = [
    "DEMO_TOKEN_PREFIX",
    "AuthorizationRequest",
    "AuthorizationResult",
    "ClientIdentity",
    "ConnectionState",
    "DashboardSnapshot",
    "DashboardStatus",
    "DashboardSummary",
    "DiscoveryDocument",
    "ErrorDetails",
    "EventKind",
    "NewTicketRequest",
    "ProviderUser",
    "Queue",
    "QueueTickets",
    "RealtimeEvent",
    "Session",
    "SessionState",
    "Tenant",
    "TenantTickets",
    "Ticket",
    "TicketStatus",
    "UserQueue",
    "UserQueueTicket",
    "UserQueuesData",
]
