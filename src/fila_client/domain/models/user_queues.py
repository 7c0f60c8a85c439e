"""Per-user queue listing returned by ``/clients/my-queues``."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserQueueTicket:
    """Ticket entry inside a user queue listing."""

    id: str
    number: int
    status: str
    created_at: datetime
    token: str
    validated_at: datetime | None = None


@dataclass(frozen=True)
class UserQueue:
    """A queue the user holds tickets in."""

    id: str
    name: str
    tenant_id: str
    tenant_name: str
    tickets: tuple[UserQueueTicket, ...]
    description: str | None = None


@dataclass(frozen=True)
class UserQueuesData:
    """Alternate view of the user's queues and tickets."""

    identifier: str
    queues: tuple[UserQueue, ...]
    name: str | None = None
    phone: str | None = None
    email: str | None = None
