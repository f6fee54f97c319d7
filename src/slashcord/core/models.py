from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

import discord

from slashcord.core.enums import ApplicationCommandOptionType, InteractionResponseType, InteractionType

OptionValue = Union[str, int]

# Message flag: only the invoking user sees the reply.
EPHEMERAL = 1 << 6


@dataclass(frozen=True, slots=True)
class ApplicationCommandOptionChoice:
    name: str
    value: OptionValue


@dataclass(frozen=True, slots=True)
class ApplicationCommandOption:
    type: Optional[ApplicationCommandOptionType]
    name: str
    description: str
    required: bool = False
    default: bool = False
    choices: Sequence[ApplicationCommandOptionChoice] = ()
    options: Sequence[ApplicationCommandOption] = ()


@dataclass(frozen=True, slots=True)
class ApplicationCommand:
    name: str
    description: str
    options: Sequence[ApplicationCommandOption] = ()
    # Assigned by Discord; unset on commands that were never submitted.
    id: Optional[int] = None
    application_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class InteractionApplicationCommandCallbackData:
    content: Optional[str] = None
    embeds: Sequence[discord.Embed] = ()
    tts: bool = False
    flags: Optional[int] = None
    allowed_mentions: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True, slots=True)
class InteractionResponse:
    type: InteractionResponseType
    data: Optional[InteractionApplicationCommandCallbackData] = None

    @classmethod
    def pong(cls) -> InteractionResponse:
        return cls(type=InteractionResponseType.PONG)

    @classmethod
    def acknowledge(cls, *, with_source: bool = False) -> InteractionResponse:
        if with_source:
            return cls(type=InteractionResponseType.ACKNOWLEDGE_WITH_SOURCE)
        return cls(type=InteractionResponseType.ACKNOWLEDGE)

    @classmethod
    def message(
        cls,
        content: Optional[str] = None,
        *,
        embeds: Sequence[discord.Embed] = (),
        tts: bool = False,
        ephemeral: bool = False,
        with_source: bool = True,
    ) -> InteractionResponse:
        response_type = (
            InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE if with_source else InteractionResponseType.CHANNEL_MESSAGE
        )
        return cls(
            type=response_type,
            data=InteractionApplicationCommandCallbackData(
                content=content,
                embeds=tuple(embeds),
                tts=tts,
                flags=EPHEMERAL if ephemeral else None,
            ),
        )


@dataclass(frozen=True, slots=True)
class ApplicationCommandInteractionDataOption:
    name: str
    value: Optional[Any] = None
    options: Sequence[ApplicationCommandInteractionDataOption] = ()


@dataclass(frozen=True, slots=True)
class ApplicationCommandInteractionData:
    id: int
    name: str
    options: Sequence[ApplicationCommandInteractionDataOption] = ()


@dataclass(frozen=True, slots=True)
class Interaction:
    """
    An inbound interaction as Discord delivers it.

    ``type`` is None when Discord sends an interaction kind this client does not know.
    The token is single-use: it authenticates exactly one reply.
    """

    id: int
    type: Optional[InteractionType]
    token: str
    data: Optional[ApplicationCommandInteractionData] = None
    guild_id: Optional[int] = None
    channel_id: Optional[int] = None
    member: Optional[Mapping[str, Any]] = None
    version: int = 1
