"""Parser for queue service payloads (dashboard, tickets, queues)."""

import logging
from typing import Any

from fila_client.domain.errors import MalformedResponse
from fila_client.domain.models.dashboard import (
    DashboardSnapshot,
    DashboardSummary,
    QueueTickets,
    TenantTickets,
)
from fila_client.domain.models.ticket import Queue, Tenant, Ticket, TicketStatus
from fila_client.domain.models.user_queues import UserQueue, UserQueuesData, UserQueueTicket
from fila_client.domain.ticket_payload import EPOCH, parse_time, ticket_from_payload

logger = logging.getLogger(__name__)


class DashboardParser:
    """Parses queue service JSON into domain models.

    Structural problems raise :class:`MalformedResponse` so a misrouted or
    half-broken payload is never mistaken for an empty dashboard.
    """

    @staticmethod
    def parse_tenant(data: dict[str, Any]) -> Tenant:
        return Tenant(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            phone=data.get("phone"),
            email=data.get("email"),
            slug=data.get("slug"),
        )

    @staticmethod
    def parse_queue(data: dict[str, Any]) -> Queue:
        return Queue(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            capacity=int(data.get("capacity") or 0),
            avg_service_time_minutes=float(data.get("avgServiceTime") or 0),
            tenant_id=str(data.get("tenantId", "")),
            description=data.get("description"),
            is_active=bool(data.get("isActive", True)),
        )

    @staticmethod
    def parse_ticket(
        data: dict[str, Any],
        base: Ticket | None = None,
        status_override: TicketStatus | None = None,
    ) -> Ticket:
        return ticket_from_payload(data, base=base, status_override=status_override)

    @staticmethod
    def parse_summary(data: dict[str, Any]) -> DashboardSummary:
        return DashboardSummary(
            total_waiting=int(data.get("totalWaiting") or 0),
            total_called=int(data.get("totalCalled") or 0),
            avg_wait_time=float(data.get("avgWaitTime") or 0),
            next_call_estimate=float(data.get("nextCallEstimate") or 0),
            establishments_count=int(data.get("establishmentsCount") or 0),
        )

    @staticmethod
    def parse_dashboard(payload: Any, raw_body: str | None = None) -> DashboardSnapshot:
        """Flatten the nested ``tenant -> queue -> ticket[]`` payload.

        Args:
            payload: Decoded dashboard JSON.
            raw_body: Original body, attached to errors for diagnostics.

        Returns:
            Snapshot whose ``flat_tickets`` preserves tenant, queue and ticket order.
        """
        if not isinstance(payload, dict):
            raise MalformedResponse("Dashboard payload is not an object", raw_body=raw_body)

        try:
            tenants: dict[str, TenantTickets] = {}
            flat: list[Ticket] = []
            queue_ids: list[str] = []

            for tenant_id, tenant_data in (payload.get("tickets") or {}).items():
                tenant = DashboardParser.parse_tenant(
                    tenant_data.get("tenant") or {"id": tenant_id}
                )
                queues: dict[str, QueueTickets] = {}

                for queue_id, queue_data in (tenant_data.get("queues") or {}).items():
                    queue = DashboardParser.parse_queue(
                        queue_data.get("queue") or {"id": queue_id, "tenantId": tenant.id}
                    )
                    tickets = tuple(
                        DashboardParser._parse_nested_ticket(ticket_data, queue)
                        for ticket_data in queue_data.get("tickets") or []
                    )
                    queues[str(queue_id)] = QueueTickets(queue=queue, tickets=tickets)
                    queue_ids.append(queue.id)
                    flat.extend(tickets)

                tenants[str(tenant_id)] = TenantTickets(tenant=tenant, queues=queues)

            client = payload.get("client") or {}
            return DashboardSnapshot(
                summary=DashboardParser.parse_summary(payload.get("summary") or {}),
                tickets_by_tenant=tenants,
                flat_tickets=tuple(flat),
                client_identifier=client.get("identifier"),
                total_active_tickets=int(client.get("totalActiveTickets") or len(flat)),
                queue_ids=tuple(dict.fromkeys(queue_ids)),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MalformedResponse(
                f"Dashboard payload has an unexpected shape: {e}", raw_body=raw_body
            ) from e

    @staticmethod
    def _parse_nested_ticket(data: dict[str, Any], queue: Queue) -> Ticket:
        merged = {"queueId": queue.id, **data}
        nested_queue = merged.get("queue")
        if not isinstance(nested_queue, dict) or not nested_queue.get("name"):
            merged["queue"] = {"id": queue.id, "name": queue.name}
        return DashboardParser.parse_ticket(merged)

    @staticmethod
    def parse_queues(payload: Any, raw_body: str | None = None) -> list[Queue]:
        if not isinstance(payload, list):
            raise MalformedResponse("Queue listing is not a list", raw_body=raw_body)
        try:
            return [DashboardParser.parse_queue(q) for q in payload]
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponse(
                f"Queue listing has an unexpected shape: {e}", raw_body=raw_body
            ) from e

    @staticmethod
    def parse_single_ticket(payload: Any, raw_body: str | None = None) -> Ticket:
        if not isinstance(payload, dict):
            raise MalformedResponse("Ticket payload is not an object", raw_body=raw_body)
        try:
            return DashboardParser.parse_ticket(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponse(
                f"Ticket payload has an unexpected shape: {e}", raw_body=raw_body
            ) from e

    @staticmethod
    def parse_user_queues(payload: Any, raw_body: str | None = None) -> UserQueuesData:
        if not isinstance(payload, dict):
            raise MalformedResponse("User queues payload is not an object", raw_body=raw_body)
        try:
            client = payload.get("client") or {}
            queues = []
            for q in payload.get("queues") or []:
                tenant = q.get("tenant") or {}
                queues.append(
                    UserQueue(
                        id=str(q["id"]),
                        name=str(q.get("name", "")),
                        tenant_id=str(tenant.get("id", "")),
                        tenant_name=str(tenant.get("name", "")),
                        description=q.get("description"),
                        tickets=tuple(
                            UserQueueTicket(
                                id=str(t["id"]),
                                number=int(t["number"]),
                                status=str(t.get("status", "")),
                                created_at=parse_time(t.get("createdAt")) or EPOCH,
                                validated_at=parse_time(t.get("validatedAt")),
                                token=str(t.get("token", "")),
                            )
                            for t in q.get("tickets") or []
                        ),
                    )
                )
            return UserQueuesData(
                identifier=str(client.get("identifier", "")),
                name=client.get("name"),
                phone=client.get("phone"),
                email=client.get("email"),
                queues=tuple(queues),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MalformedResponse(
                f"User queues payload has an unexpected shape: {e}", raw_body=raw_body
            ) from e
