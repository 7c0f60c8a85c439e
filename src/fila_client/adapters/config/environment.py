"""Resolves the active endpoints for the current deployment environment."""

import logging

from pydantic import BaseModel, ConfigDict

from fila_client.adapters.config.app_config import AppConfig

logger = logging.getLogger(__name__)

_DEFAULT_LOG_LEVELS = {
    "development": "debug",
    "staging": "info",
    "production": "warn",
}


class EnvironmentConfig(BaseModel):
    """Endpoints and logging settings of one deployment environment."""

    model_config = ConfigDict(frozen=True)

    api_base_url: str
    websocket_url: str
    environment: str
    log_level: str
    enable_network_logs: bool


class ConfigResolver:
    """Exposes the REST base URL and WebSocket URL of the active environment."""

    def __init__(self, config: AppConfig) -> None:
        """Initialize with application configuration."""
        self._app_config = config
        self._config = self._detect_environment(config)
        if self._config.enable_network_logs:
            logger.info(
                f"Environment detected: {self._config.environment} "
                f"(api: {self._config.api_base_url}, websocket: {self._config.websocket_url})"
            )

    @staticmethod
    def _detect_environment(config: AppConfig) -> EnvironmentConfig:
        env = config.app_env
        if env == "production":
            api_base_url, websocket_url = config.api_base_url_prod, config.websocket_url_prod
        elif env == "staging":
            api_base_url, websocket_url = config.api_base_url_staging, config.websocket_url_staging
        else:
            api_base_url, websocket_url = config.api_base_url_dev, config.websocket_url_dev

        return EnvironmentConfig(
            api_base_url=api_base_url.rstrip("/"),
            websocket_url=websocket_url,
            environment=env,
            log_level=config.log_level or _DEFAULT_LOG_LEVELS[env],
            enable_network_logs=config.enable_network_logs,
        )

    @property
    def app_config(self) -> AppConfig:
        return self._app_config

    def get_config(self) -> EnvironmentConfig:
        return self._config

    @property
    def api_base_url(self) -> str:
        return self._config.api_base_url

    @property
    def websocket_url(self) -> str:
        return self._config.websocket_url

    @property
    def environment(self) -> str:
        return self._config.environment

    def is_development(self) -> bool:
        return self._config.environment == "development"

    def is_production(self) -> bool:
        return self._config.environment == "production"

    def should_log_network(self) -> bool:
        return self._config.enable_network_logs

    def logging_level(self) -> int:
        """Map the configured level name to a ``logging`` level."""
        return {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warn": logging.WARNING,
            "error": logging.ERROR,
        }[self._config.log_level]
