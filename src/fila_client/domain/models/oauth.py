"""OAuth flow domain models."""

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict

PromptResultType = Literal["success", "cancel", "dismiss", "error", "locked"]


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization request handed to the user-facing prompt."""

    url: str
    redirect_uri: str
    state: str
    nonce: str
    code_verifier: str = field(repr=False)


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of prompting the user at the identity provider."""

    type: PromptResultType
    params: dict[str, str] = field(default_factory=dict)


class DiscoveryDocument(BaseModel):
    """Subset of the OpenID Connect discovery document used by the flow."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    authorization_endpoint: str
    token_endpoint: str
    userinfo_endpoint: str | None = None
    revocation_endpoint: str | None = None


class ProviderUser(BaseModel):
    """Profile returned by the identity provider's user-info endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    email: str
    name: str
    picture: str | None = None
