"""Session and realtime sync core of the fila queue-ticketing client."""

__version__ = "0.1.0"
