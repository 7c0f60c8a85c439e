"""Session domain models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

from fila_client.domain.models.client_identity import ClientIdentity

DEMO_TOKEN_PREFIX = "demo_token_"


class SessionState(str, Enum):
    """Lifecycle states of the authenticated session."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"
    LOGGED_OUT = "logged_out"


class Session(BaseModel):
    """Authenticated, persisted credential proving the user's identity."""

    model_config = ConfigDict(frozen=True)

    token: str | None = None
    is_valid: bool = False
    identity: ClientIdentity | None = None

    @model_validator(mode="after")
    def _token_required_when_valid(self) -> "Session":
        if self.is_valid and not self.token:
            raise ValueError("a session without a token can never be valid")
        return self

    @property
    def is_demo(self) -> bool:
        """True for sessions fabricated by the development mock login."""
        return bool(self.token and self.token.startswith(DEMO_TOKEN_PREFIX))
