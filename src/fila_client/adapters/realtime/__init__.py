"""Realtime push channel adapter."""

from fila_client.adapters.realtime.socketio_channel import RealtimeChannel

__all__ = ["RealtimeChannel"]
