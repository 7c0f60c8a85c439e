"""Storage adapters."""

from fila_client.adapters.storage.json_file_store import JsonFileKeyValueStore
from fila_client.adapters.storage.memory_store import InMemoryKeyValueStore
from fila_client.adapters.storage.session_store import IDENTITY_KEY, TOKEN_KEY, SessionStore

__all__ = [
    "IDENTITY_KEY",
    "TOKEN_KEY",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "SessionStore",
]
