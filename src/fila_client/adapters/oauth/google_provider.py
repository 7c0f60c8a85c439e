"""Google sign-in through the authorization-code flow with PKCE."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from oauthlib.common import generate_token
from oauthlib.oauth2 import WebApplicationClient
from pydantic import ValidationError

from fila_client.adapters.api.http_client import HttpResponse, decode_json, extract_message
from fila_client.domain.errors import (
    AuthorizationFailed,
    BackendRejected,
    MalformedResponse,
    TokenExchangeFailed,
    UserCancelled,
)
from fila_client.domain.models.client_identity import ClientIdentity
from fila_client.domain.models.error_details import ErrorDetails
from fila_client.domain.models.oauth import (
    AuthorizationRequest,
    DiscoveryDocument,
    ProviderUser,
)
from fila_client.domain.ports.oauth_provider import OAuthLogin

if TYPE_CHECKING:
    from fila_client.adapters.api.http_client import QueueApiClient
    from fila_client.adapters.config.app_config import AppConfig
    from fila_client.domain.ports.authorization_prompt import AuthorizationPrompt

logger = logging.getLogger(__name__)

SCOPES = ["openid", "profile", "email"]
CODE_VERIFIER_LENGTH = 64
BACKEND_TOKEN_PATH = "/auth/google/token"
FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


def _details(response: HttpResponse, reason: str) -> ErrorDetails:
    return ErrorDetails(status_code=response.status, reason=reason, url=response.url)


class GoogleOAuthProvider:
    """Runs the full Google login and exchanges the result for a backend session.

    The sequence is: fresh ``state``/``nonce`` and PKCE pair, discovery
    document, user prompt, code exchange at the token endpoint, user-info
    fetch, and finally ``POST /auth/google/token`` on the backend.
    """

    def __init__(
        self,
        api_client: QueueApiClient,
        config: AppConfig,
        prompt: AuthorizationPrompt,
    ) -> None:
        """Initialize the provider.

        Args:
            api_client: Used for every request so timeouts and logging are shared.
            config: Client id, redirect URI and discovery URL.
            prompt: Sends the user to Google and waits for the redirect.
        """
        self._api = api_client
        self._config = config
        self._prompt = prompt

    async def authenticate(self) -> OAuthLogin:
        client = WebApplicationClient(self._config.google_client_id)
        state = generate_token()
        nonce = generate_token()
        code_verifier = client.create_code_verifier(CODE_VERIFIER_LENGTH)
        code_challenge = client.create_code_challenge(code_verifier, "S256")

        discovery = await self.fetch_discovery()
        request = AuthorizationRequest(
            url=client.prepare_request_uri(
                discovery.authorization_endpoint,
                redirect_uri=self._config.google_redirect_uri,
                scope=SCOPES,
                state=state,
                code_challenge=code_challenge,
                code_challenge_method="S256",
                nonce=nonce,
            ),
            redirect_uri=self._config.google_redirect_uri,
            state=state,
            nonce=nonce,
            code_verifier=code_verifier,
        )

        code = await self._authorize(request)
        access_token = await self._exchange_code(client, discovery, request, code)
        user = await self._fetch_user(discovery, access_token)
        return await self._exchange_with_backend(access_token, user)

    async def fetch_discovery(self) -> DiscoveryDocument:
        """Fetch the provider's OpenID configuration."""
        response = await self._api.send("GET", self._config.google_discovery_url)
        if not response.ok:
            raise AuthorizationFailed(
                "Não foi possível obter a configuração do Google",
                details=_details(response, "Discovery document unavailable"),
            )
        try:
            return DiscoveryDocument.model_validate(decode_json(response))
        except ValidationError as e:
            raise MalformedResponse(
                "Documento de descoberta inválido", raw_body=response.text
            ) from e

    async def _authorize(self, request: AuthorizationRequest) -> str:
        result = await self._prompt.prompt(request)
        if result.type != "success":
            logger.info(f"Authorization prompt ended with '{result.type}'")
            raise UserCancelled()

        if "error" in result.params:
            raise AuthorizationFailed(f"Autorização negada: {result.params['error']}")
        if result.params.get("state") != request.state:
            logger.warning("Authorization response state does not match the request")
            raise AuthorizationFailed("Resposta de autorização com state inválido")
        code = result.params.get("code")
        if not code:
            raise AuthorizationFailed()
        return code

    async def _exchange_code(
        self,
        client: WebApplicationClient,
        discovery: DiscoveryDocument,
        request: AuthorizationRequest,
        code: str,
    ) -> str:
        body = client.prepare_request_body(
            code=code,
            redirect_uri=request.redirect_uri,
            code_verifier=request.code_verifier,
            include_client_id=True,
        )
        response = await self._api.send(
            "POST", discovery.token_endpoint, form_body=body, headers=FORM_HEADERS
        )

        if not response.ok:
            logger.error(f"Token endpoint answered {response.status}: {response.text[:200]}")
            raise TokenExchangeFailed(
                f"Erro ao trocar código por token: {response.status}",
                details=_details(response, f"HTTP {response.status}"),
                raw_body=response.text,
            )
        try:
            data = json.loads(response.text)
        except ValueError as e:
            logger.error(
                f"Token endpoint returned non-JSON "
                f"(Content-Type: {response.content_type or 'unknown'})"
            )
            raise TokenExchangeFailed(
                "Resposta do servidor de token não é um JSON válido",
                details=_details(response, "Non-JSON body"),
                raw_body=response.text,
            ) from e

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise TokenExchangeFailed(
                "Token de acesso ausente na resposta",
                details=_details(response, "Missing access_token"),
                raw_body=response.text,
            )
        return str(access_token)

    async def _fetch_user(self, discovery: DiscoveryDocument, access_token: str) -> ProviderUser:
        url = discovery.userinfo_endpoint or self._config.google_userinfo_url
        response = await self._api.send(
            "GET", url, headers={"Authorization": f"Bearer {access_token}"}
        )
        if not response.ok:
            raise AuthorizationFailed(
                "Erro ao obter dados do usuário do Google",
                details=_details(response, f"HTTP {response.status}"),
            )
        data = decode_json(response)
        if isinstance(data, dict) and "id" not in data and data.get("sub"):
            # OpenID Connect userinfo uses ``sub`` for the subject id
            data = {**data, "id": data["sub"]}
        try:
            return ProviderUser.model_validate(data)
        except ValidationError as e:
            raise MalformedResponse(
                "Dados do usuário do Google incompletos", raw_body=response.text
            ) from e

    async def _exchange_with_backend(self, access_token: str, user: ProviderUser) -> OAuthLogin:
        response = await self._api.send(
            "POST",
            BACKEND_TOKEN_PATH,
            json_body={"access_token": access_token, "user": user.model_dump()},
        )
        if not response.ok:
            message = extract_message(response.text) or (
                f"Erro na autenticação com API: {response.text[:200]}"
            )
            logger.warning(f"Backend rejected the Google token ({response.status}): {message}")
            raise BackendRejected(message, details=_details(response, f"HTTP {response.status}"))

        data = decode_json(response)
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise MalformedResponse("Resposta sem token de sessão", raw_body=response.text)

        backend_user: dict[str, Any] = data.get("user") or {}
        identity = ClientIdentity(
            phone=backend_user.get("phone") or None,
            email=backend_user.get("email") or user.email,
            name=backend_user.get("name") or user.name,
            document_number=backend_user.get("cpf") or None,
            picture=backend_user.get("picture") or user.picture,
        )
        logger.info("Google login accepted by the backend")
        return OAuthLogin(token=str(token), identity=identity)
