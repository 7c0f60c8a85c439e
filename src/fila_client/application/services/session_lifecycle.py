"""Session lifecycle state machine."""

import logging

from fila_client.domain.contracts.auth_session import SessionListener
from fila_client.domain.errors import InvalidSessionTransition
from fila_client.domain.models.session import SessionState

logger = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.UNAUTHENTICATED: frozenset(
        {SessionState.AUTHENTICATING, SessionState.LOGGED_OUT}
    ),
    SessionState.AUTHENTICATING: frozenset(
        {
            SessionState.AUTHENTICATED,
            SessionState.UNAUTHENTICATED,
            SessionState.EXPIRED,
            SessionState.LOGGED_OUT,
        }
    ),
    SessionState.AUTHENTICATED: frozenset(
        {SessionState.AUTHENTICATING, SessionState.EXPIRED, SessionState.LOGGED_OUT}
    ),
    SessionState.EXPIRED: frozenset({SessionState.UNAUTHENTICATED}),
    SessionState.LOGGED_OUT: frozenset({SessionState.UNAUTHENTICATED}),
}

# Entering one of these invalidates everything started under the previous session.
_TEARDOWN_STATES = frozenset({SessionState.EXPIRED, SessionState.LOGGED_OUT})


class SessionLifecycle:
    """Explicit state machine for the authenticated session.

    ``generation`` increases every time the session is torn down; work started
    under an older generation must discard its results.
    """

    def __init__(self, initial: SessionState = SessionState.UNAUTHENTICATED) -> None:
        self._state = initial
        self._generation = 0
        self._listeners: list[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def can_transition(self, target: SessionState) -> bool:
        return target in _ALLOWED_TRANSITIONS[self._state]

    def transition(self, target: SessionState) -> None:
        """Move to ``target`` and notify listeners.

        Raises:
            InvalidSessionTransition: If ``target`` is not reachable from the current state.
        """
        if not self.can_transition(target):
            raise InvalidSessionTransition(
                f"Transição inválida: {self._state.value} -> {target.value}"
            )

        previous = self._state
        self._state = target
        if target in _TEARDOWN_STATES:
            self._generation += 1
        logger.debug(f"Session state {previous.value} -> {target.value} (gen {self._generation})")

        for listener in list(self._listeners):
            try:
                listener(previous, target)
            except Exception as e:
                logger.error(f"Session listener failed: {e}", exc_info=True)

    def reset_to(self, state: SessionState) -> None:
        """Set the state without notifying, used when restoring a persisted session."""
        self._state = state
