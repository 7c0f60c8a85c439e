"""Application layer - session and dashboard services."""

from fila_client.application.services import (
    AuthSessionManager,
    DashboardSyncEngine,
    SessionLifecycle,
)

__all__ = ["AuthSessionManager", "DashboardSyncEngine", "SessionLifecycle"]
