"""Selects the OAuth login variant once at startup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fila_client.adapters.oauth.google_provider import GoogleOAuthProvider
from fila_client.adapters.oauth.mock_provider import MockOAuthProvider

if TYPE_CHECKING:
    from fila_client.adapters.api.http_client import QueueApiClient
    from fila_client.adapters.config.environment import ConfigResolver
    from fila_client.domain.ports.authorization_prompt import AuthorizationPrompt
    from fila_client.domain.ports.oauth_provider import OAuthProvider

logger = logging.getLogger(__name__)


def build_oauth_provider(
    resolver: ConfigResolver,
    api_client: QueueApiClient,
    prompt: AuthorizationPrompt,
) -> OAuthProvider | None:
    """Return the real provider, the development mock, or None.

    The real provider is used whenever a client id is configured. Without one,
    development builds get the mock and every other environment gets no OAuth
    login at all.
    """
    config = resolver.app_config
    if config.google_oauth_configured:
        return GoogleOAuthProvider(api_client, config, prompt)
    if resolver.is_development():
        logger.info("Google client id not configured, using the demo OAuth login")
        return MockOAuthProvider(config.oauth_mock_delay_seconds)
    logger.warning(
        f"Google client id not configured, OAuth login disabled in {resolver.environment}"
    )
    return None
