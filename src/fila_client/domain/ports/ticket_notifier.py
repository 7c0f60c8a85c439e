"""Ticket notification port."""

from typing import Protocol


class TicketNotifier(Protocol):
    """Port for displaying a local "your ticket was called" notification."""

    async def show_ticket_called(self, ticket_number: int, queue_name: str | None) -> None:
        """Show the notification for a called ticket."""
        ...
