"""Client identity domain model."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class ClientIdentity(BaseModel):
    """Identifies the end user across REST and WebSocket calls."""

    model_config = ConfigDict(frozen=True)

    phone: str | None = None
    email: str | None = None
    name: str | None = None
    document_number: str | None = None
    picture: str | None = None
    kind: Literal["client"] = "client"

    @property
    def identifier(self) -> str | None:
        """Room identifier used for the client topic (phone first, then email)."""
        return self.phone or self.email

    @property
    def is_addressable(self) -> bool:
        """True if the identity can key a dashboard request."""
        return bool(self.phone or self.email)
