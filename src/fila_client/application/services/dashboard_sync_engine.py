"""Keeps the dashboard read model in sync with REST fetches and push events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from fila_client.domain.errors import SESSION_EXPIRED_MESSAGE, FilaClientError, Unauthorized
from fila_client.domain.models.dashboard import DashboardSnapshot, DashboardStatus
from fila_client.domain.models.realtime import ConnectionState, EventKind
from fila_client.domain.models.session import SessionState
from fila_client.domain.models.ticket import TicketStatus
from fila_client.domain.ticket_payload import ticket_from_payload

if TYPE_CHECKING:
    from fila_client.domain.contracts.auth_session import AuthSessionProtocol
    from fila_client.domain.contracts.queue_api import QueueApiProtocol
    from fila_client.domain.contracts.realtime_channel import RealtimeChannelProtocol
    from fila_client.domain.models.client_identity import ClientIdentity
    from fila_client.domain.models.realtime import RealtimeEvent
    from fila_client.domain.models.ticket import NewTicketRequest, Queue, Ticket
    from fila_client.domain.models.user_queues import UserQueuesData
    from fila_client.domain.ports.ticket_notifier import TicketNotifier

logger = logging.getLogger(__name__)

DashboardListener = Callable[[DashboardSnapshot | None, DashboardStatus], None]

_TICKET_EVENTS = (EventKind.TICKET_CALLED, EventKind.TICKET_UPDATE)


class DashboardSyncEngine:
    """Single consistent view of the user's tickets plus connection/error status.

    The snapshot is replaced wholesale by every REST fetch. Push events patch a
    single ticket or trigger a re-fetch; they are applied in arrival order and
    only after any in-flight fetch has resolved. When the session is torn down
    the snapshot is cleared and results of fetches started before the teardown
    are discarded.
    """

    def __init__(
        self,
        auth: AuthSessionProtocol,
        api: QueueApiProtocol,
        channel: RealtimeChannelProtocol,
        notifier: TicketNotifier,
    ) -> None:
        """Initialize the engine.

        Args:
            auth: Session owner, consulted before every fetch.
            api: Queue service REST client.
            channel: Push event channel.
            notifier: Shows the "ticket called" notification.
        """
        self._auth = auth
        self._api = api
        self._channel = channel
        self._notifier = notifier

        self._snapshot: DashboardSnapshot | None = None
        self._status = DashboardStatus(session_state=auth.state)
        self._identity: ClientIdentity | None = None
        self._listeners: list[DashboardListener] = []

        self._fetch_task: asyncio.Task[DashboardSnapshot] | None = None
        self._fetch_key: tuple[str | None, str | None] | None = None
        self._pump_task: asyncio.Task[None] | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._stream: asyncio.Queue[RealtimeEvent] | None = None
        self._background: set[asyncio.Task[Any]] = set()
        self._joined_client: str | None = None
        self._joined_queues: set[str] = set()

        auth.add_session_listener(self._on_session_change)
        channel.add_state_listener(self._on_connection_change)

    @property
    def snapshot(self) -> DashboardSnapshot | None:
        return self._snapshot

    @property
    def status(self) -> DashboardStatus:
        return self._status

    def add_listener(self, listener: DashboardListener) -> None:
        """Register an observer called with ``(snapshot, status)`` after every change."""
        self._listeners.append(listener)

    def _publish(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._snapshot, self._status)
            except Exception as e:
                logger.error(f"Dashboard listener failed: {e}", exc_info=True)

    def _set_status(self, **changes: Any) -> None:
        self._status = replace(self._status, **changes)
        self._publish()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    # Loading

    async def load_dashboard(self, identity: ClientIdentity | None = None) -> DashboardSnapshot:
        """Fetch and normalize the dashboard.

        Concurrent callers for the same identity share one in-flight request.
        A call for another identity waits for the running fetch, then starts
        its own.

        Raises:
            Unauthorized: The session is not valid; it has been logged out.
            ServerError: The backend failed.
        """
        key = _identity_key(identity or self._auth.identity)
        while True:
            task = self._fetch_task
            if task is None or task.done():
                task = asyncio.create_task(self._fetch(identity))
                task.add_done_callback(_retrieve_exception)
                self._fetch_task = task
                self._fetch_key = key
                break
            if self._fetch_key == key:
                logger.debug("Dashboard fetch already in flight, joining it")
                break
            logger.debug("Dashboard fetch for another identity in flight, waiting for it")
            await asyncio.wait([task])
        return await asyncio.shield(task)

    async def _fetch(self, identity: ClientIdentity | None) -> DashboardSnapshot:
        generation = self._auth.generation
        self._set_status(loading=True, error=None)
        try:
            if not await self._auth.is_authenticated():
                logger.info("Dashboard requested without a valid session, logging out")
                await self._auth.logout()
                self._set_status(error=SESSION_EXPIRED_MESSAGE)
                raise Unauthorized()

            identity = identity or self._auth.identity
            if identity is None or not identity.is_addressable:
                raise Unauthorized("Dados do cliente indisponíveis. Faça login novamente.")

            snapshot = await self._api.get_client_dashboard(
                phone=identity.phone, email=identity.email
            )
            if generation != self._auth.generation:
                logger.info("Discarding dashboard fetched before the session ended")
                raise Unauthorized()

            self._snapshot = snapshot
            self._identity = identity
            logger.info(
                f"Dashboard loaded: {len(snapshot.flat_tickets)} ticket(s) "
                f"in {len(snapshot.queue_ids)} queue(s)"
            )
            return snapshot
        except FilaClientError as e:
            if generation == self._auth.generation:
                self._set_status(error=e.message)
            raise
        finally:
            self._set_status(loading=False)

    async def refresh(self) -> DashboardSnapshot:
        """Re-fetch the dashboard and join any queue that appeared since the last fetch."""
        snapshot = await self.load_dashboard(self._identity)
        if self._channel.is_connected():
            await self._subscribe(snapshot)
        return snapshot

    async def _refetch(self, reason: str) -> None:
        logger.info(f"Reloading dashboard after {reason}")
        try:
            await self.refresh()
        except FilaClientError as e:
            logger.warning(f"Dashboard reload after {reason} failed: {e.message}")

    # Push events

    async def apply_push_event(
        self,
        kind: EventKind | str,
        payload: dict[str, Any],
        received_at: datetime | None = None,
    ) -> None:
        """Apply one push event to the snapshot.

        ``ticket-called`` and ``ticket-update`` replace the named ticket in
        place; ``ticket-called`` also raises a notification. ``client-update``
        re-fetches the whole dashboard, ``queue-update`` does so only for a
        queue that is part of the snapshot.
        """
        kind = EventKind(kind)
        in_flight = self._fetch_task
        if in_flight is not None and not in_flight.done():
            try:
                await asyncio.shield(in_flight)
            except FilaClientError as e:
                logger.debug(f"In-flight fetch failed ({e.message}), applying {kind.value} anyway")

        self._set_status(last_event_at=received_at or datetime.now(UTC))

        if kind in _TICKET_EVENTS:
            await self._apply_ticket_event(kind, payload)
        elif kind == EventKind.CLIENT_UPDATE:
            await self._refetch(kind.value)
        elif kind == EventKind.QUEUE_UPDATE:
            queue = payload.get("queue")
            queue_id = payload.get("queueId")
            if queue_id is None and isinstance(queue, dict):
                queue_id = queue.get("id")
            if self._snapshot is not None and str(queue_id) in self._snapshot.queue_ids:
                await self._refetch(kind.value)
            else:
                logger.debug(f"Ignoring queue-update for queue {queue_id} outside the dashboard")

    async def _apply_ticket_event(self, kind: EventKind, payload: dict[str, Any]) -> None:
        data = payload.get("ticket")
        if not isinstance(data, dict) or not data.get("id"):
            logger.warning(f"Ignoring {kind.value} without a ticket id")
            return

        if kind == EventKind.TICKET_CALLED and data.get("number") is not None:
            try:
                number = int(data["number"])
            except (TypeError, ValueError):
                logger.warning(f"Ignoring {kind.value} with malformed number {data['number']!r}")
                return
            queue = data.get("queue")
            queue_name = queue.get("name") if isinstance(queue, dict) else None
            current = self._snapshot.find_ticket(str(data["id"])) if self._snapshot else None
            if queue_name is None and current is not None:
                queue_name = current.queue_name
            self._spawn(self._notify(number, queue_name))

        if self._snapshot is None:
            logger.debug(f"No dashboard loaded, ignoring {kind.value}")
            return

        current = self._snapshot.find_ticket(str(data["id"]))
        if current is None:
            await self._refetch(f"{kind.value} for unknown ticket {data['id']}")
            return

        status = TicketStatus.CALLED if kind == EventKind.TICKET_CALLED else None
        try:
            updated = ticket_from_payload(data, base=current, status_override=status)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed {kind.value} payload: {e}")
            return

        if (
            current.updated_at is not None
            and updated.updated_at is not None
            and updated.updated_at < current.updated_at
        ):
            logger.debug(f"Ignoring stale {kind.value} for ticket {current.id}")
            return

        self._snapshot = self._snapshot.with_ticket(updated)
        logger.info(f"Ticket {updated.number} is now {updated.status.value}")
        self._publish()

    async def _notify(self, number: int, queue_name: str | None) -> None:
        try:
            await self._notifier.show_ticket_called(number, queue_name)
        except Exception as e:
            logger.error(f"Ticket notification failed: {e}", exc_info=True)

    # Realtime wiring

    async def start(self, identity: ClientIdentity | None = None) -> DashboardSnapshot:
        """Load the dashboard, then connect the channel and start applying events.

        The connection is made in the background; the dashboard is usable
        while it is still connecting or after it failed.
        """
        snapshot = await self.load_dashboard(identity)
        if self._stream is None:
            self._stream = self._channel.open_event_stream()
        if self._pump_task is None or self._pump_task.done():
            self._pump_task = asyncio.create_task(self._pump(self._stream))
        if self._connect_task is None or self._connect_task.done():
            self._connect_task = asyncio.create_task(self._connect_and_subscribe())
        return snapshot

    async def stop(self) -> None:
        """Stop applying events and disconnect the channel."""
        current = asyncio.current_task()
        for task in (self._connect_task, self._pump_task):
            if task is not None and task is not current and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    logger.debug("Dashboard background task cancelled")
        self._connect_task = None
        self._pump_task = None

        if self._stream is not None:
            self._channel.close_event_stream(self._stream)
            self._stream = None
        self._joined_client = None
        self._joined_queues.clear()
        await self._channel.disconnect()

    async def wait_connected(self) -> None:
        """Await the background connection started by :meth:`start`."""
        if self._connect_task is not None:
            await asyncio.shield(self._connect_task)

    async def _connect_and_subscribe(self) -> None:
        try:
            await self._channel.connect()
            if self._snapshot is not None:
                await self._subscribe(self._snapshot)
        except FilaClientError as e:
            logger.warning(f"Realtime updates unavailable: {e.message}")

    async def _subscribe(self, snapshot: DashboardSnapshot) -> None:
        identifier = self._identity.identifier if self._identity else None
        if identifier and identifier != self._joined_client:
            await self._channel.subscribe_to_client(identifier)
            self._joined_client = identifier
        for queue_id in snapshot.queue_ids:
            if queue_id not in self._joined_queues:
                await self._channel.subscribe_to_queue(queue_id)
                self._joined_queues.add(queue_id)

    async def _pump(self, stream: asyncio.Queue[RealtimeEvent]) -> None:
        while True:
            event = await stream.get()
            try:
                await self.apply_push_event(event.kind, event.payload, event.received_at)
            except Exception as e:
                logger.error(f"Failed to apply {event.kind.value}: {e}", exc_info=True)

    def _on_connection_change(self, state: ConnectionState) -> None:
        self._set_status(is_connected=state == ConnectionState.CONNECTED)

    def _on_session_change(self, old: SessionState, new: SessionState) -> None:
        if new in (SessionState.EXPIRED, SessionState.LOGGED_OUT):
            self._snapshot = None
            self._identity = None
            error = SESSION_EXPIRED_MESSAGE if new == SessionState.EXPIRED else None
            self._set_status(session_state=new, error=error)
            self._spawn(self.stop())
        else:
            self._set_status(session_state=new)

    # Pass-through queries

    async def fetch_user_queues(self) -> UserQueuesData:
        return await self._api.get_user_queues()

    async def get_ticket(self, ticket_id: str) -> Ticket:
        return await self._api.get_ticket(ticket_id)

    async def create_ticket(self, queue_id: str, request: NewTicketRequest) -> Ticket:
        ticket = await self._api.create_ticket(queue_id, request)
        logger.info(f"Created ticket {ticket.number} in queue {queue_id}")
        return ticket

    async def get_active_queues(self) -> list[Queue]:
        return await self._api.get_active_queues()


def _retrieve_exception(task: asyncio.Task[Any]) -> None:
    # Failures reach callers through shield(); consume them here too so an
    # abandoned fetch does not log "exception was never retrieved".
    if not task.cancelled():
        task.exception()


def _identity_key(identity: ClientIdentity | None) -> tuple[str | None, str | None] | None:
    if identity is None:
        return None
    return identity.phone, identity.email
