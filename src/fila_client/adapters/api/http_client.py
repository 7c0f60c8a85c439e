"""HTTP client for the queue service REST API."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import aiohttp

from fila_client.adapters.api.api_request_logger import RequestLogger
from fila_client.adapters.api.dashboard_parser import DashboardParser
from fila_client.domain.errors import (
    MalformedResponse,
    MisconfiguredEndpoint,
    RequestRejected,
    ServerError,
    Timeout,
    Unauthorized,
    Unreachable,
)
from fila_client.domain.models.error_details import ErrorDetails

if TYPE_CHECKING:
    from fila_client.adapters.config.environment import ConfigResolver
    from fila_client.adapters.storage.session_store import SessionStore
    from fila_client.domain.models.dashboard import DashboardSnapshot
    from fila_client.domain.models.ticket import NewTicketRequest, Queue, Ticket
    from fila_client.domain.models.user_queues import UserQueuesData

logger = logging.getLogger(__name__)

UnauthorizedHandler = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class HttpResponse:
    """Status and raw body of a completed exchange."""

    status: int
    text: str
    url: str
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def extract_message(text: str) -> str | None:
    """Pull a ``message`` field out of a JSON error body, if there is one."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    message = data.get("message")
    if isinstance(message, list):
        return "; ".join(str(m) for m in message)
    return str(message) if message else None


def decode_json(response: HttpResponse) -> Any:
    """Decode a JSON body, keeping the raw text when it is not JSON."""
    if not response.text.strip():
        return None
    try:
        return json.loads(response.text)
    except ValueError as e:
        logger.error(
            f"Expected JSON from {response.url} but got "
            f"(Content-Type: {response.content_type or 'unknown'}): {response.text[:200]}"
        )
        raise MalformedResponse(
            details=ErrorDetails(
                status_code=response.status, reason="Non-JSON body", url=response.url
            ),
            raw_body=response.text,
        ) from e


class QueueApiClient:
    """Client for the queue service REST API.

    Attaches the stored bearer token to authenticated calls and maps failures to
    the client error taxonomy. Any 401 on an authenticated call runs the
    registered unauthorized handlers before :class:`Unauthorized` is raised.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        resolver: ConfigResolver,
        session_store: SessionStore,
    ) -> None:
        """Initialize with a shared aiohttp session."""
        self._session = session
        self._resolver = resolver
        self._session_store = session_store
        self._timeout_seconds = resolver.app_config.api_timeout_seconds
        self._unauthorized_handlers: list[UnauthorizedHandler] = []
        self._trace = RequestLogger(resolver.should_log_network())

    @property
    def http_session(self) -> aiohttp.ClientSession:
        return self._session

    def add_unauthorized_handler(self, handler: UnauthorizedHandler) -> None:
        """Register a coroutine run whenever an authenticated call gets a 401."""
        self._unauthorized_handlers.append(handler)

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._resolver.api_base_url}/{path.lstrip('/')}"

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        form_body: dict[str, str] | str | None = None,
        headers: dict[str, str] | None = None,
        authenticated: bool = False,
        timeout_seconds: float | None = None,
    ) -> HttpResponse:
        """Perform one request and return its raw outcome.

        Only transport failures raise here: :class:`Timeout` when the deadline
        passes, :class:`Unreachable` when no response arrives at all.
        """
        url = self.url_for(path)
        request_headers = {"Accept": "application/json", **(headers or {})}
        if json_body is not None:
            request_headers.setdefault("Content-Type", "application/json")
        if authenticated:
            token = await self._session_store.load_token()
            if token:
                request_headers["Authorization"] = f"Bearer {token}"

        self._trace.request(
            method,
            url,
            params=params,
            headers=request_headers,
            body=json_body if json_body is not None else form_body,
        )
        started = time.monotonic()

        timeout = aiohttp.ClientTimeout(total=timeout_seconds or self._timeout_seconds)
        try:
            async with self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                data=form_body,
                headers=request_headers,
                timeout=timeout,
            ) as response:
                text = await response.text()
                self._trace.response(
                    method, url, response.status, (time.monotonic() - started) * 1000
                )
                return HttpResponse(
                    status=response.status,
                    text=text,
                    url=url,
                    content_type=response.headers.get("Content-Type", ""),
                )
        except asyncio.TimeoutError as e:
            logger.warning(f"{method} {url} timed out after {timeout.total}s")
            raise Timeout(details=ErrorDetails(reason="Request timed out", url=url)) from e
        except aiohttp.ClientError as e:
            logger.warning(f"{method} {url} failed without a response: {e}")
            reason = str(e) or type(e).__name__
            raise Unreachable(details=ErrorDetails(reason=reason, url=url)) from e

    async def raise_for_status(self, response: HttpResponse, *, authenticated: bool) -> None:
        """Map a non-2xx response to the error taxonomy."""
        if response.ok:
            return

        message = extract_message(response.text)
        status = response.status

        if status == 401:
            details = ErrorDetails(status_code=401, reason="Unauthorized", url=response.url)
            if authenticated:
                logger.info(f"Received 401 from {response.url}, tearing down session")
                for handler in list(self._unauthorized_handlers):
                    await handler()
                raise Unauthorized(details=details)
            raise Unauthorized(message, details=details)
        if status == 404:
            raise MisconfiguredEndpoint(
                f"Serviço não encontrado: {response.url}",
                details=ErrorDetails(status_code=404, reason="Not found", url=response.url),
            )
        if status >= 500:
            logger.error(f"Server error {status} from {response.url}: {response.text[:200]}")
            raise ServerError(
                details=ErrorDetails(status_code=status, reason=f"HTTP {status}", url=response.url)
            )
        raise RequestRejected(
            message,
            details=ErrorDetails(status_code=status, reason=f"HTTP {status}", url=response.url),
        )

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
        authenticated: bool = True,
        timeout_seconds: float | None = None,
    ) -> tuple[Any, HttpResponse]:
        """Send a request, check its status and decode the JSON body."""
        response = await self.send(
            method,
            path,
            params=params,
            json_body=json_body,
            headers=headers,
            authenticated=authenticated,
            timeout_seconds=timeout_seconds,
        )
        await self.raise_for_status(response, authenticated=authenticated)
        return decode_json(response), response

    # Authentication endpoints

    async def login_client(self, credentials: dict[str, str]) -> dict[str, Any]:
        """POST ``/auth/client/login`` and return the decoded body."""
        data, response = await self.request_json(
            "POST", "/auth/client/login", json_body=credentials, authenticated=False
        )
        if not isinstance(data, dict):
            raise MalformedResponse("Login response is not an object", raw_body=response.text)
        return data

    async def validate_token(self, token: str) -> bool:
        """GET ``/auth/validate`` with ``token``; True only for ``{"valid": true}``."""
        data, _ = await self.request_json(
            "GET",
            "/auth/validate",
            headers={"Authorization": f"Bearer {token}"},
            authenticated=False,
            timeout_seconds=self._resolver.app_config.validate_timeout_seconds,
        )
        return isinstance(data, dict) and data.get("valid") is True

    async def logout(self, token: str) -> None:
        """POST ``/auth/logout`` for ``token``."""
        await self.request_json(
            "POST",
            "/auth/logout",
            json_body={},
            headers={"Authorization": f"Bearer {token}"},
            authenticated=False,
        )

    # Client data endpoints

    async def get_client_dashboard(
        self, phone: str | None = None, email: str | None = None
    ) -> DashboardSnapshot:
        params: dict[str, Any] = {}
        if phone:
            params["phone"] = phone
        if email:
            params["email"] = email
        data, response = await self.request_json("GET", "/clients/dashboard", params=params)
        return DashboardParser.parse_dashboard(data, raw_body=response.text)

    async def get_user_queues(self) -> UserQueuesData:
        data, response = await self.request_json("GET", "/clients/my-queues")
        return DashboardParser.parse_user_queues(data, raw_body=response.text)

    async def get_ticket(self, ticket_id: str) -> Ticket:
        data, response = await self.request_json("GET", f"/tickets/{ticket_id}")
        return DashboardParser.parse_single_ticket(data, raw_body=response.text)

    async def create_ticket(self, queue_id: str, request: NewTicketRequest) -> Ticket:
        body = {
            key: value
            for key, value in {
                "clientName": request.client_name,
                "clientPhone": request.client_phone,
                "clientEmail": request.client_email,
                "priority": request.priority,
            }.items()
            if value is not None
        }
        data, response = await self.request_json(
            "POST", f"/queues/{queue_id}/tickets", json_body=body
        )
        return DashboardParser.parse_single_ticket(data, raw_body=response.text)

    async def get_active_queues(self) -> list[Queue]:
        data, response = await self.request_json("GET", "/queues")
        return DashboardParser.parse_queues(data, raw_body=response.text)

    async def get_queues_by_tenant(self, tenant_id: str) -> list[Queue]:
        data, response = await self.request_json("GET", f"/tenants/{tenant_id}/queues")
        return DashboardParser.parse_queues(data, raw_body=response.text)
