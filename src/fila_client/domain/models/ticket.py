"""Ticket, queue and tenant domain models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TicketStatus(str, Enum):
    """Status of a ticket in its queue."""

    WAITING = "WAITING"
    CALLED = "CALLED"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class Tenant:
    """Establishment that owns one or more queues."""

    id: str
    name: str
    phone: str | None = None
    email: str | None = None
    slug: str | None = None


@dataclass(frozen=True)
class Queue:
    """A service queue belonging to a tenant."""

    id: str
    name: str
    capacity: int
    avg_service_time_minutes: float
    tenant_id: str
    description: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Ticket:
    """Point-in-time snapshot of a single queue ticket."""

    id: str
    number: int
    status: TicketStatus
    priority: int
    queue_id: str
    created_at: datetime
    position: int | None = None
    estimated_time_minutes: int | None = None
    called_at: datetime | None = None
    completed_at: datetime | None = None
    updated_at: datetime | None = None
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None
    queue_name: str | None = None  # Denormalized for notifications


@dataclass(frozen=True)
class NewTicketRequest:
    """Body of a ticket creation request."""

    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None
    priority: int | None = None
