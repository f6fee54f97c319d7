"""Runtime configuration: pydantic models and the YAML/env loader."""

from slashcord.config.interfaces import ConfigLoader
from slashcord.config.loader import YamlConfigLoader
from slashcord.config.models import AppConfig, ConfigLoadRequest, DiscordSettings, LoggingSettings

__all__ = [
    "AppConfig",
    "ConfigLoadRequest",
    "ConfigLoader",
    "DiscordSettings",
    "LoggingSettings",
    "YamlConfigLoader",
]
