"""Ticket notifier that writes to the log."""

import logging

logger = logging.getLogger(__name__)


class LoggingTicketNotifier:
    """Shows the "ticket called" notification as a log line."""

    async def show_ticket_called(self, ticket_number: int, queue_name: str | None) -> None:
        where = f" na fila {queue_name}" if queue_name else ""
        logger.warning(f"Sua senha {ticket_number} foi chamada{where}!")
