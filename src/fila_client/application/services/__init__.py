"""Application services."""

from fila_client.application.services.auth_session_manager import AuthSessionManager
from fila_client.application.services.dashboard_sync_engine import DashboardSyncEngine
from fila_client.application.services.session_lifecycle import SessionLifecycle

__all__ = ["AuthSessionManager", "DashboardSyncEngine", "SessionLifecycle"]
