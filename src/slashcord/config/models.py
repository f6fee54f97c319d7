from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FileRotationSettings(BaseModel):
    """
    Date-based rotation settings (daily).

    Maps onto the standard library TimedRotatingFileHandler.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    backup_count: int = Field(default=5, ge=0)


class FileLoggingSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Optional[str] = None
    rotation: FileRotationSettings = Field(default_factory=FileRotationSettings)


class LoggingSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    level: str = "INFO"
    file: FileLoggingSettings = Field(default_factory=FileLoggingSettings)


class DiscordSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    token: str = "REPLACE_ME"
    application_id: str = "REPLACE_ME"
    api_base_url: str = "https://discord.com/api/v8"

    # One worker keeps command registration calls strictly ordered.
    workers: int = Field(default=1, ge=1)

    # Passed to the default aiohttp session; None keeps aiohttp's own default.
    request_timeout_seconds: Optional[float] = Field(default=None, gt=0)

    # Embed rendering
    default_embed_colour: Optional[int] = Field(default=None, ge=0, le=0xFFFFFF)
    pretty_json: bool = False


class AppConfig(BaseModel):
    """Effective runtime configuration after applying all precedence rules."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    discord: DiscordSettings = Field(default_factory=DiscordSettings)


@dataclass(frozen=True, slots=True)
class ConfigLoadRequest:
    """
    Inputs for a configuration loader.

    ``yaml_path=None`` skips the YAML file; ``dotenv_path=None`` skips the .env file.
    """

    yaml_path: Optional[str] = "slashcord.yaml"
    env_prefix: str = "SLASHCORD__"
    dotenv_path: Optional[str] = ".env"
