"""Test doubles shared across the test modules."""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

from socketio.exceptions import ConnectionError as SocketConnectionError

from fila_client.adapters.config import AppConfig, ConfigResolver

API_BASE = "http://api.test/api/v1"
WS_URL = "ws://api.test"


def make_resolver(**overrides: Any) -> ConfigResolver:
    """Resolver for a development environment pointing at fake endpoints."""
    settings: dict[str, Any] = {
        "app_env": "development",
        "api_base_url_dev": API_BASE,
        "websocket_url_dev": WS_URL,
        "ws_reconnect_delay_seconds": 0,
        "oauth_mock_delay_seconds": 0,
    }
    settings.update(overrides)
    return ConfigResolver(AppConfig.for_testing(**settings))


class FakeResponse:
    """Minimal stand-in for an aiohttp response used as an async context manager."""

    def __init__(
        self,
        status: int = 200,
        body: Any = None,
        text: str | None = None,
        content_type: str = "application/json",
        gate: asyncio.Event | None = None,
    ) -> None:
        self.status = status
        self._text = text if text is not None else ("" if body is None else json.dumps(body))
        self.headers = {"Content-Type": content_type}
        self._gate = gate

    async def text(self) -> str:
        if self._gate is not None:
            await self._gate.wait()
        return self._text

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info: object) -> bool:
        return False


@dataclass
class RecordedRequest:
    method: str
    url: str
    kwargs: dict[str, Any]

    @property
    def headers(self) -> dict[str, str]:
        return self.kwargs.get("headers") or {}


class FakeHttpSession:
    """Routes ``request(method, url)`` to scripted responses and records every call.

    A route's responses are served in order; the last one keeps being served.
    Exceptions in the script are raised instead of returning a response.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Any]] = {}
        self.requests: list[RecordedRequest] = []

    def add(self, method: str, url: str, *responses: Any) -> None:
        if not url.startswith("http"):
            url = f"{API_BASE}{url}"
        self.routes.setdefault((method, url), []).extend(responses)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append(RecordedRequest(method, url, kwargs))
        script = self.routes.get((method, url))
        if not script:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(response, BaseException):
            raise response
        return response

    def calls_to(self, method: str, url: str) -> list[RecordedRequest]:
        if not url.startswith("http"):
            url = f"{API_BASE}{url}"
        return [r for r in self.requests if r.method == method and r.url == url]


@dataclass
class FakeSocketClient:
    """Stand-in for ``socketio.AsyncClient`` with scripted connection outcomes.

    ``outcomes`` holds one entry per connect attempt: True for success, False
    for a refused connection. When exhausted, attempts succeed.
    """

    outcomes: list[bool] = field(default_factory=list)
    handlers: dict[str, Any] = field(default_factory=dict)
    emitted: list[tuple[str, Any]] = field(default_factory=list)
    connect_calls: int = 0
    connected: bool = False

    def on(self, event: str, handler: Any) -> None:
        self.handlers[event] = handler

    async def connect(self, url: str, transports: list[str] | None = None) -> None:
        self.connect_calls += 1
        ok = self.outcomes.pop(0) if self.outcomes else True
        if not ok:
            raise SocketConnectionError("Connection refused")
        self.connected = True

    async def emit(self, event: str, data: Any = None) -> None:
        self.emitted.append((event, data))

    async def disconnect(self) -> None:
        was_connected = self.connected
        self.connected = False
        if was_connected and "disconnect" in self.handlers:
            await self.handlers["disconnect"]("client disconnect")

    async def drop(self) -> None:
        """Simulate the server closing the connection."""
        self.connected = False
        await self.handlers["disconnect"]("transport close")

    async def receive(self, event: str, data: Any) -> None:
        """Simulate an inbound event from the server."""
        await self.handlers[event](data)


def ticket_json(
    ticket_id: str, number: int, status: str = "WAITING", **extra: Any
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": ticket_id,
        "number": number,
        "status": status,
        "priority": 1,
        "createdAt": "2024-05-01T12:00:00Z",
        "position": number,
        "estimatedTime": 5 * number,
    }
    data.update(extra)
    return data


def dashboard_payload() -> dict[str, Any]:
    """Two tenants, three queues, four tickets."""
    return {
        "client": {"identifier": "11999990000", "totalActiveTickets": 4},
        "summary": {
            "totalWaiting": 3,
            "totalCalled": 1,
            "avgWaitTime": 12.5,
            "nextCallEstimate": 4,
            "establishmentsCount": 2,
        },
        "tickets": {
            "t1": {
                "tenant": {"id": "t1", "name": "Clínica Central"},
                "queues": {
                    "q1": {
                        "queue": {
                            "id": "q1",
                            "name": "Triagem",
                            "capacity": 50,
                            "avgServiceTime": 10,
                            "tenantId": "t1",
                        },
                        "tickets": [ticket_json("a", 1), ticket_json("b", 2)],
                    },
                    "q2": {
                        "queue": {"id": "q2", "name": "Exames", "tenantId": "t1"},
                        "tickets": [ticket_json("c", 7, "CALLED")],
                    },
                },
            },
            "t2": {
                "tenant": {"id": "t2", "name": "Cartório"},
                "queues": {
                    "q3": {
                        "queue": {"id": "q3", "name": "Atendimento", "tenantId": "t2"},
                        "tickets": [ticket_json("d", 3)],
                    },
                },
            },
        },
    }
