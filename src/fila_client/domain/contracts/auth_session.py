"""Protocol for the session owner consumed by the sync engine."""

from collections.abc import Callable
from typing import Protocol

from fila_client.domain.models.client_identity import ClientIdentity
from fila_client.domain.models.session import SessionState

SessionListener = Callable[[SessionState, SessionState], None]


class AuthSessionProtocol(Protocol):
    """Protocol for session validity checks and teardown."""

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        ...

    @property
    def generation(self) -> int:
        """Counter incremented whenever the session is torn down."""
        ...

    @property
    def identity(self) -> ClientIdentity | None:
        """Identity of the signed-in user, if any."""
        ...

    async def is_authenticated(self) -> bool:
        """True only if a token is stored and the server confirms it."""
        ...

    async def logout(self) -> None:
        """Tear the session down locally, notifying the backend best-effort."""
        ...

    def add_session_listener(self, listener: SessionListener) -> None:
        """Register an observer called with ``(old_state, new_state)``."""
        ...
