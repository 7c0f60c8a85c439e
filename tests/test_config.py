"""Tests for configuration adapter."""

import logging

import pytest

from fila_client.adapters.config import AppConfig, ConfigResolver


def test_config_loads_defaults() -> None:
    """Given no environment variables, when loading config, then defaults are used."""
    config = AppConfig.for_testing()

    assert config.app_env == "development"
    assert config.api_timeout_seconds == 10.0
    assert config.validate_timeout_seconds == 5.0
    assert config.ws_reconnect_attempts == 5
    assert config.ws_reconnect_delay_seconds == 3.0
    assert config.oauth_mock_delay_seconds == 2.0
    assert config.storage_file is None


def test_config_loads_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given environment variables, when loading config, then they are used."""
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("API_BASE_URL_STAGING", "https://stage.example/api/v1")
    monkeypatch.setenv("WS_RECONNECT_ATTEMPTS", "2")

    config = AppConfig.for_testing()

    assert config.app_env == "staging"
    assert config.api_base_url_staging == "https://stage.example/api/v1"
    assert config.ws_reconnect_attempts == 2


def test_config_accepts_expo_env_alias(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given only EXPO_ENV, when loading config, then it selects the environment."""
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.setenv("EXPO_ENV", "Production")

    config = AppConfig.for_testing()

    assert config.app_env == "production"


def test_config_validates_app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given an unknown environment name, when loading config, then validation error is raised."""
    monkeypatch.setenv("APP_ENV", "qa")

    with pytest.raises(ValueError, match="app_env must be either"):
        AppConfig.for_testing()


def test_config_normalizes_log_level() -> None:
    """Given 'WARNING', when loading config, then it is stored as 'warn'."""
    config = AppConfig.for_testing(log_level="WARNING")

    assert config.log_level == "warn"


@pytest.mark.parametrize(
    ("client_id", "configured"),
    [
        ("", False),
        ("YOUR_GOOGLE_CLIENT_ID.apps.googleusercontent.com", False),
        ("1234-abc.apps.googleusercontent.com", True),
    ],
)
def test_google_oauth_configured(client_id: str, configured: bool) -> None:
    """Given a client id, when checking OAuth configuration, then placeholders do not count."""
    config = AppConfig.for_testing(google_client_id=client_id)

    assert config.google_oauth_configured is configured


def test_resolver_selects_urls_for_environment() -> None:
    """Given production, when resolving, then production endpoints are used."""
    config = AppConfig.for_testing(
        app_env="production",
        api_base_url_prod="https://prod.example/api/v1/",
        websocket_url_prod="wss://prod.example",
    )

    resolver = ConfigResolver(config)

    assert resolver.api_base_url == "https://prod.example/api/v1"
    assert resolver.websocket_url == "wss://prod.example"
    assert resolver.is_production()
    assert not resolver.is_development()


@pytest.mark.parametrize(
    ("env", "level"),
    [
        ("development", logging.DEBUG),
        ("staging", logging.INFO),
        ("production", logging.WARNING),
    ],
)
def test_resolver_default_log_level_per_environment(env: str, level: int) -> None:
    """Given no LOG_LEVEL, when resolving, then the environment's default level is used."""
    resolver = ConfigResolver(AppConfig.for_testing(app_env=env))

    assert resolver.logging_level() == level


def test_resolver_explicit_log_level_wins() -> None:
    """Given LOG_LEVEL=error, when resolving, then it overrides the environment default."""
    resolver = ConfigResolver(AppConfig.for_testing(app_env="development", log_level="error"))

    assert resolver.logging_level() == logging.ERROR
    assert resolver.get_config().log_level == "error"
