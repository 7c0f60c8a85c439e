"""Configuration adapters."""

from fila_client.adapters.config.app_config import AppConfig
from fila_client.adapters.config.environment import ConfigResolver, EnvironmentConfig

__all__ = ["AppConfig", "ConfigResolver", "EnvironmentConfig"]
