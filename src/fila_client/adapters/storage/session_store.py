"""Persisted holder of the session token and client identity."""

import logging

from pydantic import ValidationError

from fila_client.domain.models.client_identity import ClientIdentity
from fila_client.domain.ports.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"
IDENTITY_KEY = "clientInfo"


class SessionStore:
    """Reads and writes ``{sessionToken, clientIdentity}`` as one unit.

    Both keys are written together and removed together; a partial state found
    on load is treated as no session at all.
    """

    def __init__(self, store: KeyValueStore) -> None:
        """Initialize with the key-value storage port."""
        self._store = store

    async def load_token(self) -> str | None:
        return await self._store.get_item(TOKEN_KEY)

    async def load_identity(self) -> ClientIdentity | None:
        raw = await self._store.get_item(IDENTITY_KEY)
        if raw is None:
            return None
        try:
            return ClientIdentity.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Stored client identity is unreadable, clearing session: {e}")
            await self.clear()
            return None

    async def load(self) -> tuple[str, ClientIdentity] | None:
        """Return ``(token, identity)`` or None if either half is missing."""
        token = await self.load_token()
        identity = await self.load_identity()
        if token and identity is not None:
            return token, identity
        if token or identity is not None:
            logger.warning("Found half-persisted session, clearing it")
            await self.clear()
        return None

    async def save(self, token: str, identity: ClientIdentity) -> None:
        """Persist token and identity; on failure neither is left behind."""
        try:
            await self._store.set_item(TOKEN_KEY, token)
            await self._store.set_item(IDENTITY_KEY, identity.model_dump_json())
        except Exception:
            logger.error("Failed to persist session, rolling back", exc_info=True)
            await self.clear()
            raise

    async def clear(self) -> None:
        """Remove both keys."""
        await self._store.remove_item(TOKEN_KEY)
        await self._store.remove_item(IDENTITY_KEY)
