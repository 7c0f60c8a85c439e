"""Mapping between ticket JSON payloads and Ticket snapshots.

Shared by the REST parser and by push event handling, which receive the
same ticket shape.
"""

import logging
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any

from fila_client.domain.models.ticket import Ticket, TicketStatus

logger = logging.getLogger(__name__)

EPOCH = datetime.fromtimestamp(0, UTC)

# Ticket JSON key -> Ticket field, for fields parsed as plain values
_SCALAR_FIELDS = {
    "position": "position",
    "estimatedTime": "estimated_time_minutes",
    "clientName": "client_name",
    "clientPhone": "client_phone",
    "clientEmail": "client_email",
}
_TIME_FIELDS = {
    "createdAt": "created_at",
    "calledAt": "called_at",
    "completedAt": "completed_at",
    "updatedAt": "updated_at",
}


def parse_time(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp, returning an aware UTC datetime."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable timestamp in payload: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def ticket_from_payload(
    data: dict[str, Any],
    base: Ticket | None = None,
    status_override: TicketStatus | None = None,
) -> Ticket:
    """Build a Ticket from its JSON form, optionally layered over ``base``.

    Push events may omit fields; anything absent from ``data`` keeps the value
    ``base`` already had.

    Raises:
        KeyError: A required field is missing and there is no ``base``.
        ValueError: A field has a value of the wrong kind (e.g. unknown status).
    """
    fields: dict[str, Any] = asdict(base) if base is not None else {}

    if "id" in data:
        fields["id"] = str(data["id"])
    if "number" in data:
        fields["number"] = int(data["number"])
    if "status" in data:
        fields["status"] = TicketStatus(data["status"])
    if "priority" in data:
        fields["priority"] = int(data["priority"] or 0)
    if "queueId" in data:
        fields["queue_id"] = str(data["queueId"])

    for key, field_name in _SCALAR_FIELDS.items():
        if key in data:
            fields[field_name] = data[key]
    for key, field_name in _TIME_FIELDS.items():
        if key in data:
            fields[field_name] = parse_time(data[key])

    queue = data.get("queue")
    if isinstance(queue, dict):
        if queue.get("name"):
            fields["queue_name"] = str(queue["name"])
        if "queue_id" not in fields and queue.get("id"):
            fields["queue_id"] = str(queue["id"])

    if status_override is not None:
        fields["status"] = status_override

    fields.setdefault("priority", 0)
    if fields.get("created_at") is None:
        fields["created_at"] = EPOCH

    try:
        return Ticket(**fields)
    except TypeError as e:
        raise KeyError(f"ticket payload is missing fields: {e}") from e
