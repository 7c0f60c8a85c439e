"""OAuth login provider port."""

from dataclasses import dataclass
from typing import Protocol

from fila_client.domain.models.client_identity import ClientIdentity


@dataclass(frozen=True)
class OAuthLogin:
    """Backend-issued session token plus the normalized identity."""

    token: str
    identity: ClientIdentity


class OAuthProvider(Protocol):
    """Port for one OAuth login variant (real provider or development mock)."""

    async def authenticate(self) -> OAuthLogin:
        """Run the full login flow and return the backend session."""
        ...
