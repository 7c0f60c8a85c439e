"""12-factor configuration adapter using environment variables and an optional .env file."""

from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVIRONMENTS = ("development", "staging", "production")


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Deployment environment
    app_env: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "EXPO_ENV", "app_env"),
        description="Deployment environment: development, staging or production",
    )

    # Backend endpoints per environment
    api_base_url_dev: str = Field(default="http://192.168.1.111:3001/api/v1")
    websocket_url_dev: str = Field(default="ws://192.168.1.111:3001")
    api_base_url_staging: str = Field(default="https://fila-api-stage.cloudrun.app/api/v1")
    websocket_url_staging: str = Field(default="wss://fila-api-stage.cloudrun.app")
    api_base_url_prod: str = Field(default="https://fila-api-prod.cloudrun.app/api/v1")
    websocket_url_prod: str = Field(default="wss://fila-api-prod.cloudrun.app")

    # Logging
    log_level: str | None = Field(
        default=None,
        description="Log level; defaults to debug/info/warn depending on app_env",
    )
    enable_network_logs: bool = Field(
        default=False, description="Log every outgoing API request (headers redacted)"
    )

    # REST client
    api_timeout_seconds: float = Field(default=10.0, description="Timeout for API requests")
    validate_timeout_seconds: float = Field(
        default=5.0, description="Timeout for the lightweight token validation call"
    )

    # Google OAuth
    google_client_id: str = Field(
        default="",
        description="OAuth client id; unset or a YOUR_... placeholder means not configured",
    )
    google_redirect_uri: str = Field(default="http://127.0.0.1:8765/auth")
    google_discovery_url: str = Field(
        default="https://accounts.google.com/.well-known/openid-configuration"
    )
    google_userinfo_url: str = Field(
        default="https://www.googleapis.com/oauth2/v2/userinfo",
        description="Used when the discovery document has no userinfo_endpoint",
    )
    oauth_prompt_timeout_seconds: float = Field(default=300.0)
    oauth_mock_delay_seconds: float = Field(default=2.0)

    # WebSocket reconnection policy
    ws_reconnect_attempts: int = Field(default=5, ge=0)
    ws_reconnect_delay_seconds: float = Field(default=3.0, ge=0)

    # Persistent storage
    storage_file: str | None = Field(
        default=None, description="JSON file for the session; in-memory when unset"
    )

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate the environment is one of development, staging or production."""
        if v.lower() not in ENVIRONMENTS:
            raise ValueError("app_env must be either 'development', 'staging' or 'production'")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str | None:
        """Normalize the log level name."""
        if v is None:
            return None
        level = v.lower()
        if level == "warning":
            level = "warn"
        if level not in ("debug", "info", "warn", "error"):
            raise ValueError("log_level must be one of 'debug', 'info', 'warn' or 'error'")
        return level

    @property
    def google_oauth_configured(self) -> bool:
        """True if a real OAuth client id is set (not empty, not a placeholder)."""
        client_id = self.google_client_id.strip()
        return bool(client_id) and "YOUR_" not in client_id

    @classmethod
    def for_testing(cls, **overrides: Any) -> "AppConfig":
        """Build a config that ignores the process .env file."""
        return cls(_env_file=None, **overrides)  # type: ignore[call-arg]
