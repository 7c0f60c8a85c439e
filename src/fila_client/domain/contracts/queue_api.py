"""Protocol for the queue service REST API used by the sync engine."""

from typing import Protocol

from fila_client.domain.models.dashboard import DashboardSnapshot
from fila_client.domain.models.ticket import NewTicketRequest, Queue, Ticket
from fila_client.domain.models.user_queues import UserQueuesData


class QueueApiProtocol(Protocol):
    """Protocol for authenticated queue service calls."""

    async def get_client_dashboard(
        self, phone: str | None = None, email: str | None = None
    ) -> DashboardSnapshot:
        """Fetch and normalize the authoritative dashboard for a client."""
        ...

    async def get_user_queues(self) -> UserQueuesData:
        """Fetch the per-user queue listing."""
        ...

    async def get_ticket(self, ticket_id: str) -> Ticket:
        """Fetch a single ticket."""
        ...

    async def create_ticket(self, queue_id: str, request: NewTicketRequest) -> Ticket:
        """Create a ticket in a queue."""
        ...

    async def get_active_queues(self) -> list[Queue]:
        """List active queues."""
        ...
