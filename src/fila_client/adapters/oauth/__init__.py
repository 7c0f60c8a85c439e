"""OAuth login adapters."""

from fila_client.adapters.oauth.factory import build_oauth_provider
from fila_client.adapters.oauth.google_provider import GoogleOAuthProvider
from fila_client.adapters.oauth.loopback_prompt import LoopbackAuthorizationPrompt
from fila_client.adapters.oauth.mock_provider import DEMO_IDENTITY, MockOAuthProvider

__all__ = [
    "DEMO_IDENTITY",
    "GoogleOAuthProvider",
    "LoopbackAuthorizationPrompt",
    "MockOAuthProvider",
    "build_oauth_provider",
]
