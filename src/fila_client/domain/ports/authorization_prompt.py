"""Authorization prompt port."""

from typing import Protocol

from fila_client.domain.models.oauth import AuthorizationRequest, AuthorizationResult


class AuthorizationPrompt(Protocol):
    """Port for sending the user to the identity provider and awaiting the redirect."""

    async def prompt(self, request: AuthorizationRequest) -> AuthorizationResult:
        """Present ``request.url`` to the user and return the redirect outcome.

        A user who closes or cancels the prompt yields a non-``success`` result.
        """
        ...
