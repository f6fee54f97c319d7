from __future__ import annotations

from typing import Protocol

from slashcord.config.models import AppConfig, ConfigLoadRequest


class ConfigLoader(Protocol):
    """
    Loads effective runtime configuration.

    Precedence, lowest first: model defaults, YAML file, environment overrides
    (a .env file only fills variables that are not already set).
    """

    async def load(self, request: ConfigLoadRequest = ConfigLoadRequest()) -> AppConfig:
        ...
