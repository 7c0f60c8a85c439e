"""Authentication and session management service."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fila_client.application.services.session_lifecycle import SessionLifecycle
from fila_client.domain.contracts.auth_api import AuthApiProtocol, SessionStoreProtocol
from fila_client.domain.contracts.auth_session import SessionListener
from fila_client.domain.cpf import looks_like_email, validate_cpf
from fila_client.domain.errors import (
    AuthorizationFailed,
    FilaClientError,
    InvalidCredentials,
    InvalidDocumentNumber,
    MalformedResponse,
    Unauthorized,
)
from fila_client.domain.models.client_identity import ClientIdentity
from fila_client.domain.models.session import Session, SessionState
from fila_client.domain.ports.oauth_provider import OAuthProvider

logger = logging.getLogger(__name__)

LoginAttempt = Callable[[], Awaitable[tuple[str, ClientIdentity]]]


def identity_from_user(user: dict[str, Any]) -> ClientIdentity:
    """Normalize a backend ``user`` object into a ClientIdentity."""
    return ClientIdentity(
        phone=user.get("phone") or None,
        email=user.get("email") or None,
        name=user.get("name") or None,
        document_number=user.get("cpf") or None,
        picture=user.get("picture") or None,
    )


class AuthSessionManager:
    """Performs logins, validates the stored session and logs out.

    Only one login runs at a time; a second caller waits for the first to
    finish. A logout or expiry that happens while a login is in flight makes
    that login discard its result instead of persisting it.
    """

    def __init__(
        self,
        auth_api: AuthApiProtocol,
        session_store: SessionStoreProtocol,
        environment: str,
        oauth_provider: OAuthProvider | None = None,
        lifecycle: SessionLifecycle | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            auth_api: Backend authentication endpoints.
            session_store: Persisted token and identity.
            environment: Deployment environment name, used for CPF bypass rules.
            oauth_provider: OAuth variant chosen at startup, or None if OAuth is unavailable.
            lifecycle: Session state machine; a fresh one is created if omitted.
        """
        self._auth_api = auth_api
        self._session_store = session_store
        self._environment = environment
        self._oauth_provider = oauth_provider
        self._lifecycle = lifecycle or SessionLifecycle()
        self._login_lock = asyncio.Lock()
        self._identity: ClientIdentity | None = None

    @property
    def state(self) -> SessionState:
        return self._lifecycle.state

    @property
    def generation(self) -> int:
        return self._lifecycle.generation

    @property
    def identity(self) -> ClientIdentity | None:
        return self._identity

    def add_session_listener(self, listener: SessionListener) -> None:
        self._lifecycle.add_listener(listener)

    async def restore(self) -> Session | None:
        """Load a persisted session on cold start without contacting the server."""
        stored = await self._session_store.load()
        if stored is None:
            self._identity = None
            self._lifecycle.reset_to(SessionState.UNAUTHENTICATED)
            return None

        token, identity = stored
        self._identity = identity
        self._lifecycle.reset_to(SessionState.AUTHENTICATED)
        logger.info("Restored persisted session")
        return Session(token=token, is_valid=False, identity=identity)

    def _build_credentials(self, identifier: str, secret: str) -> dict[str, str]:
        if looks_like_email(identifier):
            return {"email": identifier.strip(), "password": secret}
        if not validate_cpf(identifier, self._environment):
            raise InvalidDocumentNumber()
        return {"cpf": identifier, "password": secret}

    async def login_with_credential(self, identifier: str, secret: str) -> Session:
        """Log in with a CPF (or e-mail) and password.

        The CPF is validated locally before any request is sent.

        Raises:
            InvalidCredentials: Wrong credentials (401) or an invalid CPF.
            MisconfiguredEndpoint: The login endpoint answered 404.
            ServerError: The backend answered with a 5xx.
            Timeout: The request timed out.
            Unreachable: No response was received.
        """
        credentials = self._build_credentials(identifier, secret)

        async def attempt() -> tuple[str, ClientIdentity]:
            try:
                data = await self._auth_api.login_client(credentials)
            except Unauthorized as e:
                raise InvalidCredentials(details=e.details) from e

            token = data.get("access_token")
            user = data.get("user")
            if not token or not isinstance(user, dict):
                raise MalformedResponse(
                    data.get("message") or "Resposta de login incompleta",
                    raw_body=json.dumps(data, ensure_ascii=False),
                )
            return str(token), identity_from_user(user)

        async with self._login_lock:
            return await self._run_login(attempt)

    async def login_with_oauth(self) -> Session:
        """Log in through the OAuth variant selected at startup.

        Raises:
            UserCancelled: The user closed the provider prompt.
            AuthorizationFailed: No authorization code was returned.
            TokenExchangeFailed: The provider's token endpoint rejected the code.
            BackendRejected: The backend refused the provider token.
            MalformedResponse: The backend answered with something other than JSON.
        """
        provider = self._oauth_provider
        if provider is None:
            raise AuthorizationFailed("Login com Google não está configurado")

        async def attempt() -> tuple[str, ClientIdentity]:
            login = await provider.authenticate()
            return login.token, login.identity

        async with self._login_lock:
            return await self._run_login(attempt)

    async def _run_login(self, attempt: LoginAttempt) -> Session:
        previous = self._lifecycle.state
        self._lifecycle.transition(SessionState.AUTHENTICATING)
        generation = self._lifecycle.generation

        try:
            token, identity = await attempt()
            if not identity.is_addressable:
                raise MalformedResponse("Identidade do cliente sem telefone ou e-mail")
            if generation != self._lifecycle.generation:
                raise Unauthorized("Sessão encerrada durante o login")
            await self._session_store.save(token, identity)
            if generation != self._lifecycle.generation:
                await self._session_store.clear()
                raise Unauthorized("Sessão encerrada durante o login")
        except (Exception, asyncio.CancelledError) as e:
            logger.info(f"Login failed: {e}")
            self._settle_failed_login(previous, generation)
            raise

        self._identity = identity
        self._lifecycle.transition(SessionState.AUTHENTICATED)
        logger.info("Login succeeded")
        return Session(token=token, is_valid=True, identity=identity)

    def _settle_failed_login(self, previous: SessionState, generation: int) -> None:
        if generation != self._lifecycle.generation:
            # A logout or expiry already settled the state.
            return
        if previous == SessionState.AUTHENTICATED:
            self._lifecycle.transition(SessionState.AUTHENTICATED)
        else:
            self._lifecycle.transition(SessionState.UNAUTHENTICATED)

    async def is_authenticated(self) -> bool:
        """True only if a token is stored and the server confirms it.

        Any validation failure clears the stored session.
        """
        token = await self._session_store.load_token()
        if not token:
            return False

        if Session(token=token).is_demo and self._environment == "development":
            return True

        try:
            valid = await self._auth_api.validate_token(token)
        except FilaClientError as e:
            logger.info(f"Token validation failed: {e.message}")
            valid = False

        if not valid:
            await self.expire()
            return False

        if self._lifecycle.state == SessionState.UNAUTHENTICATED:
            await self.restore()
        return True

    def _tear_down(self, via: SessionState) -> None:
        # No suspension between the two transitions: EXPIRED and LOGGED_OUT are
        # never observable from another task.
        self._identity = None
        if self._lifecycle.can_transition(via):
            self._lifecycle.transition(via)
            self._lifecycle.transition(SessionState.UNAUTHENTICATED)

    async def expire(self, reason: str | None = None) -> None:
        """Tear down the session after the backend rejected it."""
        await self._session_store.clear()
        if self._lifecycle.state != SessionState.UNAUTHENTICATED:
            logger.info(f"Session expired: {reason or 'token rejected'}")
        self._tear_down(SessionState.EXPIRED)

    async def logout(self) -> None:
        """Log out locally, then notify the backend best-effort.

        Local teardown always happens; a failing server call is only logged.
        """
        token = await self._session_store.load_token()
        await self._session_store.clear()
        self._tear_down(SessionState.LOGGED_OUT)

        if token and not Session(token=token).is_demo:
            try:
                await self._auth_api.logout(token)
            except Exception as e:
                logger.warning(f"Server-side logout failed, session cleared locally: {e}")
