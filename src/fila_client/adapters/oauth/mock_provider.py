"""Development stand-in for the Google login."""

import asyncio
import logging
import time

from fila_client.domain.models.client_identity import ClientIdentity
from fila_client.domain.models.session import DEMO_TOKEN_PREFIX
from fila_client.domain.ports.oauth_provider import OAuthLogin

logger = logging.getLogger(__name__)

DEMO_IDENTITY = ClientIdentity(
    email="usuario.demo@gmail.com",
    name="Usuário Demo",
    picture="https://via.placeholder.com/150",
)


class MockOAuthProvider:
    """Fabricates a demo login after a fixed delay, without any network call.

    Tokens carry the ``demo_token_`` prefix so they can never be mistaken for
    a backend-issued session.
    """

    def __init__(self, delay_seconds: float = 2.0) -> None:
        self._delay_seconds = delay_seconds

    async def authenticate(self) -> OAuthLogin:
        logger.warning("Google OAuth is not configured, using the demo login")
        await asyncio.sleep(self._delay_seconds)
        token = f"{DEMO_TOKEN_PREFIX}{int(time.time() * 1000)}"
        return OAuthLogin(token=token, identity=DEMO_IDENTITY)
