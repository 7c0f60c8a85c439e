"""Notification adapters."""

from fila_client.adapters.notifications.logging_notifier import LoggingTicketNotifier

__all__ = ["LoggingTicketNotifier"]
