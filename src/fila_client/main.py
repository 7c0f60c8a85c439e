"""Composition root: builds the service objects shared by the whole process."""

import logging
import sys
from dataclasses import dataclass

import aiohttp

from fila_client.adapters.api import QueueApiClient
from fila_client.adapters.config import AppConfig, ConfigResolver
from fila_client.adapters.notifications import LoggingTicketNotifier
from fila_client.adapters.oauth import LoopbackAuthorizationPrompt, build_oauth_provider
from fila_client.adapters.realtime import RealtimeChannel
from fila_client.adapters.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    SessionStore,
)
from fila_client.application.services import AuthSessionManager, DashboardSyncEngine
from fila_client.domain.ports import AuthorizationPrompt, KeyValueStore, TicketNotifier

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """One instance of every service, constructed once per process."""

    config: AppConfig
    resolver: ConfigResolver
    session_store: SessionStore
    api: QueueApiClient
    auth: AuthSessionManager
    channel: RealtimeChannel
    engine: DashboardSyncEngine


def configure_logging(resolver: ConfigResolver) -> None:
    """Configure the root logger for the active environment."""
    logging.basicConfig(
        level=resolver.logging_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def build_store(config: AppConfig) -> KeyValueStore:
    if config.storage_file:
        return JsonFileKeyValueStore(config.storage_file)
    logger.info("No storage file configured, the session will not survive a restart")
    return InMemoryKeyValueStore()


def build_services(
    http_session: aiohttp.ClientSession,
    config: AppConfig | None = None,
    store: KeyValueStore | None = None,
    prompt: AuthorizationPrompt | None = None,
    notifier: TicketNotifier | None = None,
) -> Services:
    """Wire the services together.

    Any 401 received on an authenticated REST call expires the session, which
    in turn clears the dashboard and disconnects the realtime channel.
    """
    config = config or AppConfig()
    resolver = ConfigResolver(config)
    session_store = SessionStore(store or build_store(config))
    api = QueueApiClient(http_session, resolver, session_store)

    oauth_provider = build_oauth_provider(
        resolver,
        api,
        prompt or LoopbackAuthorizationPrompt(config.oauth_prompt_timeout_seconds),
    )
    auth = AuthSessionManager(api, session_store, resolver.environment, oauth_provider)

    async def expire_on_unauthorized() -> None:
        await auth.expire("queue service answered 401")

    api.add_unauthorized_handler(expire_on_unauthorized)

    channel = RealtimeChannel(resolver)
    engine = DashboardSyncEngine(auth, api, channel, notifier or LoggingTicketNotifier())

    return Services(
        config=config,
        resolver=resolver,
        session_store=session_store,
        api=api,
        auth=auth,
        channel=channel,
        engine=engine,
    )
