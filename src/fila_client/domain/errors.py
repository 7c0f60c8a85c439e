"""Failure taxonomy of the session and sync core.

Every error carries a human-readable ``message`` suitable for display. Errors
derived from an HTTP exchange also carry :class:`ErrorDetails`.
"""

from fila_client.domain.models.error_details import ErrorDetails

RAW_BODY_LIMIT = 200

SESSION_EXPIRED_MESSAGE = "Sessão expirada. Faça login novamente."


def truncate_body(body: str | None, limit: int = RAW_BODY_LIMIT) -> str:
    """Shorten a raw response body for diagnostics."""
    if not body:
        return ""
    return body if len(body) <= limit else body[:limit]


class FilaClientError(Exception):
    """Base class for all errors raised by the client core."""

    default_message = "Erro inesperado"

    def __init__(self, message: str | None = None, details: ErrorDetails | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def status_code(self) -> int | None:
        return self.details.status_code if self.details else None


class InvalidCredentials(FilaClientError):
    default_message = "CPF ou senha incorretos"


class InvalidDocumentNumber(InvalidCredentials):
    default_message = "CPF inválido"


class Unauthorized(FilaClientError):
    default_message = SESSION_EXPIRED_MESSAGE


class Timeout(FilaClientError):
    default_message = "Timeout na conexão. Verifique sua internet."


class Unreachable(FilaClientError):
    default_message = "Não foi possível conectar ao servidor. Verifique sua internet."


class ServerError(FilaClientError):
    default_message = "Erro no servidor. Tente novamente mais tarde."


class MisconfiguredEndpoint(ServerError):
    default_message = "Serviço não encontrado"


class RequestRejected(FilaClientError):
    """Non-401 4xx answer carrying the backend's own message."""

    default_message = "Requisição rejeitada pelo servidor"


class MalformedResponse(FilaClientError):
    """A non-JSON (or structurally wrong) body where JSON was expected."""

    default_message = "Resposta do servidor não é um JSON válido"

    def __init__(
        self,
        message: str | None = None,
        details: ErrorDetails | None = None,
        raw_body: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.raw_body = truncate_body(raw_body)


class UserCancelled(FilaClientError):
    default_message = "Autenticação cancelada pelo usuário"


class AuthorizationFailed(FilaClientError):
    default_message = "Código de autorização não recebido"


class TokenExchangeFailed(FilaClientError):
    default_message = "Erro ao trocar código por token"

    def __init__(
        self,
        message: str | None = None,
        details: ErrorDetails | None = None,
        raw_body: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.raw_body = truncate_body(raw_body)


class BackendRejected(FilaClientError):
    default_message = "Erro na autenticação com API"


class ConnectionFailed(FilaClientError):
    default_message = "Não foi possível conectar ao WebSocket"


class InvalidSessionTransition(FilaClientError):
    default_message = "Transição de sessão inválida"
