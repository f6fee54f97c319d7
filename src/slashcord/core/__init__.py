"""Wire enums and domain models for application commands and interactions."""

from slashcord.core.enums import (
    ApplicationCommandOptionType,
    InteractionResponseType,
    InteractionType,
    WireEnum,
)
from slashcord.core.models import (
    EPHEMERAL,
    ApplicationCommand,
    ApplicationCommandInteractionData,
    ApplicationCommandInteractionDataOption,
    ApplicationCommandOption,
    ApplicationCommandOptionChoice,
    Interaction,
    InteractionApplicationCommandCallbackData,
    InteractionResponse,
)

__all__ = [
    "EPHEMERAL",
    "ApplicationCommand",
    "ApplicationCommandInteractionData",
    "ApplicationCommandInteractionDataOption",
    "ApplicationCommandOption",
    "ApplicationCommandOptionChoice",
    "ApplicationCommandOptionType",
    "Interaction",
    "InteractionApplicationCommandCallbackData",
    "InteractionResponse",
    "InteractionResponseType",
    "InteractionType",
    "WireEnum",
]
