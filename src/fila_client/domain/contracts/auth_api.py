"""Protocols for the authentication endpoints and the persisted session."""

from typing import Any, Protocol

from fila_client.domain.models.client_identity import ClientIdentity


class AuthApiProtocol(Protocol):
    """Protocol for the backend's authentication endpoints."""

    async def login_client(self, credentials: dict[str, str]) -> dict[str, Any]:
        """Exchange credentials for ``{access_token, user}``."""
        ...

    async def validate_token(self, token: str) -> bool:
        """True if the backend still accepts ``token``."""
        ...

    async def logout(self, token: str) -> None:
        """Invalidate ``token`` server-side."""
        ...


class SessionStoreProtocol(Protocol):
    """Protocol for the persisted ``{token, identity}`` pair."""

    async def load_token(self) -> str | None:
        """Stored session token, if any."""
        ...

    async def load(self) -> tuple[str, ClientIdentity] | None:
        """Stored token and identity, or None unless both are present."""
        ...

    async def save(self, token: str, identity: ClientIdentity) -> None:
        """Persist token and identity together."""
        ...

    async def clear(self) -> None:
        """Remove token and identity together."""
        ...
