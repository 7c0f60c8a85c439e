"""Queue service REST API adapter."""

from fila_client.adapters.api.dashboard_parser import DashboardParser
from fila_client.adapters.api.http_client import HttpResponse, QueueApiClient

__all__ = ["DashboardParser", "HttpResponse", "QueueApiClient"]
