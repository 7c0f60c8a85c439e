"""Tests for DashboardParser."""

from datetime import UTC, datetime

import pytest

from fila_client.adapters.api import DashboardParser
from fila_client.domain.errors import MalformedResponse
from fila_client.domain.models import TicketStatus
from tests.fakes import dashboard_payload, ticket_json


def _nested_ticket_count(payload: dict) -> int:
    return sum(
        len(queue["tickets"])
        for tenant in payload["tickets"].values()
        for queue in tenant["queues"].values()
    )


def test_flatten_preserves_cardinality() -> None:
    """Given a nested payload, when flattening, then every ticket appears exactly once."""
    payload = dashboard_payload()

    snapshot = DashboardParser.parse_dashboard(payload)

    assert len(snapshot.flat_tickets) == _nested_ticket_count(payload)
    assert len({t.id for t in snapshot.flat_tickets}) == len(snapshot.flat_tickets)


def test_flatten_follows_tenant_then_queue_then_ticket_order() -> None:
    """Given a nested payload, when flattening, then order is tenant, queue, ticket as received."""
    snapshot = DashboardParser.parse_dashboard(dashboard_payload())

    assert [t.id for t in snapshot.flat_tickets] == ["a", "b", "c", "d"]
    assert snapshot.queue_ids == ("q1", "q2", "q3")


def test_flatten_with_many_queues_keeps_count() -> None:
    """Given several queues with uneven ticket lists, when flattening, then counts add up."""
    payload = {
        "summary": {},
        "tickets": {
            f"t{i}": {
                "tenant": {"id": f"t{i}", "name": f"Tenant {i}"},
                "queues": {
                    f"q{i}-{j}": {
                        "queue": {"id": f"q{i}-{j}", "name": "Fila"},
                        "tickets": [ticket_json(f"{i}-{j}-{k}", k + 1) for k in range(j)],
                    }
                    for j in range(4)
                },
            }
            for i in range(3)
        },
    }

    snapshot = DashboardParser.parse_dashboard(payload)

    assert len(snapshot.flat_tickets) == _nested_ticket_count(payload) == 18


def test_nested_map_is_retained() -> None:
    """Given a payload, when parsing, then the tenant -> queue -> tickets map is kept."""
    snapshot = DashboardParser.parse_dashboard(dashboard_payload())

    clinic = snapshot.tickets_by_tenant["t1"]
    assert clinic.tenant.name == "Clínica Central"
    assert [t.number for t in clinic.queues["q1"].tickets] == [1, 2]
    assert clinic.queues["q1"].queue.capacity == 50
    assert clinic.queues["q1"].queue.avg_service_time_minutes == 10.0


def test_nested_tickets_inherit_queue_id_and_name() -> None:
    """Given tickets without queue fields, when parsing, then the enclosing queue fills them in."""
    snapshot = DashboardParser.parse_dashboard(dashboard_payload())

    ticket = snapshot.find_ticket("c")
    assert ticket is not None
    assert ticket.queue_id == "q2"
    assert ticket.queue_name == "Exames"
    assert ticket.status == TicketStatus.CALLED


def test_summary_is_parsed() -> None:
    """Given a summary block, when parsing, then all numbers are carried over."""
    snapshot = DashboardParser.parse_dashboard(dashboard_payload())

    assert snapshot.summary.total_waiting == 3
    assert snapshot.summary.total_called == 1
    assert snapshot.summary.avg_wait_time == 12.5
    assert snapshot.summary.next_call_estimate == 4
    assert snapshot.client_identifier == "11999990000"


def test_ticket_fields_are_mapped() -> None:
    """Given a full ticket, when parsing, then camelCase keys map onto ticket fields."""
    ticket = DashboardParser.parse_ticket(
        ticket_json("x", 4, "CALLED", calledAt="2024-05-01T12:30:00Z", queueId="q9")
    )

    assert ticket.estimated_time_minutes == 20
    assert ticket.position == 4
    assert ticket.queue_id == "q9"
    assert ticket.created_at == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    assert ticket.called_at == datetime(2024, 5, 1, 12, 30, tzinfo=UTC)


def test_partial_ticket_layers_over_base() -> None:
    """Given a partial payload and a base ticket, when parsing, then absent fields are kept."""
    base = DashboardParser.parse_ticket(ticket_json("x", 4, queueId="q9"))

    updated = DashboardParser.parse_ticket({"id": "x", "position": 1}, base=base)

    assert updated.position == 1
    assert updated.number == 4
    assert updated.queue_id == "q9"


def test_empty_dashboard_is_valid() -> None:
    """Given a payload with no tickets, when parsing, then an empty snapshot is returned."""
    snapshot = DashboardParser.parse_dashboard({"summary": {}, "tickets": {}})

    assert snapshot.flat_tickets == ()
    assert snapshot.tickets_by_tenant == {}


@pytest.mark.parametrize(
    "payload",
    [
        ["not", "an", "object"],
        {"tickets": {"t1": {"queues": {"q1": {"tickets": [{"number": 1}]}}}}},
        {"tickets": {"t1": {"queues": {"q1": {"tickets": [ticket_json("a", 1, "LOST")]}}}}},
    ],
)
def test_unexpected_shape_raises_malformed_response(payload: object) -> None:
    """Given a structurally wrong payload, when parsing, then MalformedResponse keeps the body."""
    with pytest.raises(MalformedResponse) as exc_info:
        DashboardParser.parse_dashboard(payload, raw_body="<raw body>")

    assert exc_info.value.raw_body == "<raw body>"


def test_user_queues_are_parsed() -> None:
    """Given the my-queues payload, when parsing, then queues and tickets are mapped."""
    payload = {
        "client": {"identifier": "maria@example.com", "name": "Maria"},
        "queues": [
            {
                "id": "q1",
                "name": "Triagem",
                "tenant": {"id": "t1", "name": "Clínica Central"},
                "tickets": [
                    {
                        "id": "a",
                        "number": 12,
                        "status": "WAITING",
                        "createdAt": "2024-05-01T12:00:00Z",
                        "token": "abc",
                    }
                ],
            }
        ],
    }

    data = DashboardParser.parse_user_queues(payload)

    assert data.identifier == "maria@example.com"
    assert data.queues[0].tenant_name == "Clínica Central"
    assert data.queues[0].tickets[0].number == 12
    assert data.queues[0].tickets[0].validated_at is None
