"""Ports (interfaces) for the ports-and-adapters architecture."""

from fila_client.domain.ports.authorization_prompt import AuthorizationPrompt
from fila_client.domain.ports.key_value_store import KeyValueStore
from fila_client.domain.ports.oauth_provider import OAuthLogin, OAuthProvider
from fila_client.domain.ports.ticket_notifier import TicketNotifier

__all__ = [
    "AuthorizationPrompt",
    "KeyValueStore",
    "OAuthLogin",
    "OAuthProvider",
    "TicketNotifier",
]
