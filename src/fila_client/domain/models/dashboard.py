"""Dashboard read model."""

from dataclasses import dataclass, field, replace
from datetime import datetime

from fila_client.domain.models.session import SessionState
from fila_client.domain.models.ticket import Queue, Tenant, Ticket


@dataclass(frozen=True)
class DashboardStatus:
    """Loading, error and connectivity status exposed alongside the snapshot."""

    loading: bool = False
    error: str | None = None
    is_connected: bool = False
    session_state: SessionState = SessionState.UNAUTHENTICATED
    last_event_at: datetime | None = None


@dataclass(frozen=True)
class DashboardSummary:
    """Aggregate numbers reported by the dashboard endpoint."""

    total_waiting: int = 0
    total_called: int = 0
    avg_wait_time: float = 0.0
    next_call_estimate: float = 0.0
    establishments_count: int = 0


@dataclass(frozen=True)
class QueueTickets:
    """Tickets of one queue, in the order the server sent them."""

    queue: Queue
    tickets: tuple[Ticket, ...]


@dataclass(frozen=True)
class TenantTickets:
    """Queues of one tenant, keyed by queue id."""

    tenant: Tenant
    queues: dict[str, QueueTickets]


@dataclass(frozen=True)
class DashboardSnapshot:
    """Normalized, point-in-time view of the user's tickets, queues and tenants.

    ``flat_tickets`` follows tenant order, then queue order, then ticket order
    exactly as received. The nested map is retained for summary display.
    """

    summary: DashboardSummary
    tickets_by_tenant: dict[str, TenantTickets]
    flat_tickets: tuple[Ticket, ...]
    client_identifier: str | None = None
    total_active_tickets: int = 0
    queue_ids: tuple[str, ...] = field(default=())

    def find_ticket(self, ticket_id: str) -> Ticket | None:
        """Return the ticket with the given id, if present."""
        for ticket in self.flat_tickets:
            if ticket.id == ticket_id:
                return ticket
        return None

    def with_ticket(self, updated: Ticket) -> "DashboardSnapshot":
        """Return a copy where the entry with ``updated.id`` is replaced.

        Both the flat list and the nested map are updated. All other tickets are
        carried over unchanged. If the id is unknown the snapshot is returned as is.
        """
        if self.find_ticket(updated.id) is None:
            return self

        flat = tuple(updated if t.id == updated.id else t for t in self.flat_tickets)

        tenants: dict[str, TenantTickets] = {}
        for tenant_id, tenant_group in self.tickets_by_tenant.items():
            queues: dict[str, QueueTickets] = {}
            for queue_id, queue_group in tenant_group.queues.items():
                if any(t.id == updated.id for t in queue_group.tickets):
                    queue_group = replace(
                        queue_group,
                        tickets=tuple(
                            updated if t.id == updated.id else t for t in queue_group.tickets
                        ),
                    )
                queues[queue_id] = queue_group
            tenants[tenant_id] = replace(tenant_group, queues=queues)

        return replace(self, tickets_by_tenant=tenants, flat_tickets=flat)
