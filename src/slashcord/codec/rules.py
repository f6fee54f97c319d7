from __future__ import annotations

from typing import Any, Mapping, Optional, Type

import discord

from slashcord.codec.embeds import embed_rule
from slashcord.codec.registry import CodecRule, WireCodec
from slashcord.core.enums import (
    ApplicationCommandOptionType,
    InteractionResponseType,
    InteractionType,
    WireEnum,
)
from slashcord.core.models import (
    ApplicationCommand,
    ApplicationCommandInteractionData,
    ApplicationCommandInteractionDataOption,
    ApplicationCommandOption,
    ApplicationCommandOptionChoice,
    Interaction,
    InteractionApplicationCommandCallbackData,
    InteractionResponse,
)
from slashcord.errors import DecodingError, EncodingError


def _require(data: Mapping[str, Any], key: str, owner: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise DecodingError(f"{owner} payload is missing '{key}'.") from None


def _as_mapping(data: Any, owner: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise DecodingError(f"{owner} payload must be an object, got {type(data).__name__}.")
    return data


def _as_list(data: Any, owner: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise DecodingError(f"{owner} must be an array, got {type(data).__name__}.")
    return data


def _snowflake(value: Any, owner: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise DecodingError(f"{owner} is not a valid snowflake: {value!r}") from None


def _optional_snowflake(value: Any, owner: str) -> Optional[int]:
    return None if value is None else _snowflake(value, owner)


def enum_rule(enum_cls: Type[WireEnum]) -> CodecRule:
    """Enum variants travel as their bound integer; unknown integers decode to None."""

    def encode(value: WireEnum, codec: WireCodec) -> int:
        return int(value.value)

    def decode(data: Any, codec: WireCodec) -> Optional[WireEnum]:
        return enum_cls.lookup(data)

    return CodecRule(encode=encode, decode=decode)


# Application commands


def _encode_choice(choice: ApplicationCommandOptionChoice, codec: WireCodec) -> dict[str, Any]:
    return {"name": choice.name, "value": choice.value}


def _decode_choice(data: Any, codec: WireCodec) -> ApplicationCommandOptionChoice:
    data = _as_mapping(data, "Option choice")
    return ApplicationCommandOptionChoice(
        name=_require(data, "name", "Option choice"),
        value=_require(data, "value", "Option choice"),
    )


def _check_option(option: ApplicationCommandOption, parent: Optional[ApplicationCommandOptionType]) -> None:
    if option.type is None:
        raise EncodingError(f"Option '{option.name}' has no type.")
    if option.options and not option.type.nests_options:
        raise EncodingError(f"Option '{option.name}' of type {option.type.name} cannot carry nested options.")
    if option.choices and not option.type.accepts_choices:
        raise EncodingError(f"Option '{option.name}' of type {option.type.name} cannot carry choices.")
    if parent is ApplicationCommandOptionType.SUB_COMMAND_GROUP and option.type is not ApplicationCommandOptionType.SUB_COMMAND:
        raise EncodingError(f"Option '{option.name}' inside a SUB_COMMAND_GROUP must be a SUB_COMMAND.")
    if parent is ApplicationCommandOptionType.SUB_COMMAND and option.type.nests_options:
        raise EncodingError(f"Option '{option.name}' inside a SUB_COMMAND cannot be a {option.type.name}.")


def _encode_option(
    option: ApplicationCommandOption,
    codec: WireCodec,
    parent: Optional[ApplicationCommandOptionType] = None,
) -> dict[str, Any]:
    _check_option(option, parent)
    out: dict[str, Any] = {
        "type": codec.encode(option.type),
        "name": option.name,
        "description": option.description,
    }
    if option.required:
        out["required"] = True
    if option.default:
        out["default"] = True
    if option.choices:
        out["choices"] = [codec.encode(choice) for choice in option.choices]
    if option.type.nests_options:
        out["options"] = [_encode_option(child, codec, option.type) for child in option.options]
    return out


def _decode_option(data: Any, codec: WireCodec) -> ApplicationCommandOption:
    data = _as_mapping(data, "Command option")
    return ApplicationCommandOption(
        type=codec.decode(ApplicationCommandOptionType, data.get("type")),
        name=_require(data, "name", "Command option"),
        description=data.get("description", ""),
        required=bool(data.get("required", False)),
        default=bool(data.get("default", False)),
        choices=tuple(
            codec.decode(ApplicationCommandOptionChoice, c) for c in _as_list(data.get("choices"), "Option choices")
        ),
        options=tuple(_decode_option(o, codec) for o in _as_list(data.get("options"), "Nested options")),
    )


def _encode_command(command: ApplicationCommand, codec: WireCodec) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if command.id is not None:
        out["id"] = str(command.id)
    if command.application_id is not None:
        out["application_id"] = str(command.application_id)
    out["name"] = command.name
    out["description"] = command.description
    if command.options:
        out["options"] = [codec.encode(option) for option in command.options]
    return out


def _decode_command(data: Any, codec: WireCodec) -> ApplicationCommand:
    data = _as_mapping(data, "Application command")
    return ApplicationCommand(
        name=_require(data, "name", "Application command"),
        description=data.get("description", ""),
        options=tuple(
            codec.decode(ApplicationCommandOption, o) for o in _as_list(data.get("options"), "Command options")
        ),
        id=_optional_snowflake(data.get("id"), "Application command id"),
        application_id=_optional_snowflake(data.get("application_id"), "Application id"),
    )


# Interaction responses


def _encode_callback_data(data: InteractionApplicationCommandCallbackData, codec: WireCodec) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if data.tts:
        out["tts"] = True
    if data.content is not None:
        out["content"] = data.content
    if data.embeds:
        out["embeds"] = [codec.encode(embed) for embed in data.embeds]
    if data.allowed_mentions is not None:
        out["allowed_mentions"] = codec.encode(dict(data.allowed_mentions))
    if data.flags is not None:
        out["flags"] = int(data.flags)
    return out


def _decode_callback_data(data: Any, codec: WireCodec) -> InteractionApplicationCommandCallbackData:
    data = _as_mapping(data, "Interaction callback data")
    return InteractionApplicationCommandCallbackData(
        content=data.get("content"),
        embeds=tuple(codec.decode(discord.Embed, e) for e in _as_list(data.get("embeds"), "Embeds")),
        tts=bool(data.get("tts", False)),
        flags=data.get("flags"),
        allowed_mentions=data.get("allowed_mentions"),
    )


def _encode_interaction_response(response: InteractionResponse, codec: WireCodec) -> dict[str, Any]:
    response_type = response.type
    if not isinstance(response_type, InteractionResponseType):
        raise EncodingError(f"Interaction response has no valid type: {response_type!r}")
    out: dict[str, Any] = {"type": codec.encode(response_type)}
    if response_type.carries_data:
        if response.data is None:
            raise EncodingError(f"Interaction response of type {response_type.name} requires data.")
        out["data"] = codec.encode(response.data)
    elif response.data is not None:
        raise EncodingError(f"Interaction response of type {response_type.name} cannot carry data.")
    return out


def _decode_interaction_response(data: Any, codec: WireCodec) -> InteractionResponse:
    data = _as_mapping(data, "Interaction response")
    response_type = codec.decode(InteractionResponseType, _require(data, "type", "Interaction response"))
    if response_type is None:
        raise DecodingError(f"Unknown interaction response type: {data['type']!r}")
    raw = data.get("data")
    return InteractionResponse(
        type=response_type,
        data=None if raw is None else codec.decode(InteractionApplicationCommandCallbackData, raw),
    )


# Inbound interactions


def _decode_interaction_option(data: Any, codec: WireCodec) -> ApplicationCommandInteractionDataOption:
    data = _as_mapping(data, "Interaction option")
    return ApplicationCommandInteractionDataOption(
        name=_require(data, "name", "Interaction option"),
        value=data.get("value"),
        options=tuple(_decode_interaction_option(o, codec) for o in _as_list(data.get("options"), "Nested options")),
    )


def _decode_interaction_data(data: Any, codec: WireCodec) -> ApplicationCommandInteractionData:
    data = _as_mapping(data, "Interaction data")
    return ApplicationCommandInteractionData(
        id=_snowflake(_require(data, "id", "Interaction data"), "Interaction data id"),
        name=_require(data, "name", "Interaction data"),
        options=tuple(
            codec.decode(ApplicationCommandInteractionDataOption, o)
            for o in _as_list(data.get("options"), "Interaction options")
        ),
    )


def _decode_interaction(data: Any, codec: WireCodec) -> Interaction:
    data = _as_mapping(data, "Interaction")
    raw_data = data.get("data")
    return Interaction(
        id=_snowflake(_require(data, "id", "Interaction"), "Interaction id"),
        type=codec.decode(InteractionType, data.get("type")),
        token=_require(data, "token", "Interaction"),
        data=None if raw_data is None else codec.decode(ApplicationCommandInteractionData, raw_data),
        guild_id=_optional_snowflake(data.get("guild_id"), "Guild id"),
        channel_id=_optional_snowflake(data.get("channel_id"), "Channel id"),
        member=data.get("member"),
        version=int(data.get("version", 1)),
    )


def build_codec(*, default_colour: Optional[int] = None, pretty: bool = False) -> WireCodec:
    """Return a codec with every Discord wire rule registered."""
    codec = WireCodec(pretty=pretty)
    for enum_cls in (InteractionType, InteractionResponseType, ApplicationCommandOptionType):
        codec.register(enum_cls, enum_rule(enum_cls))
    codec.register(discord.Embed, embed_rule(default_colour=default_colour))
    codec.register(ApplicationCommandOptionChoice, CodecRule(encode=_encode_choice, decode=_decode_choice))
    codec.register(
        ApplicationCommandOption,
        CodecRule(encode=lambda option, c: _encode_option(option, c), decode=_decode_option),
    )
    codec.register(ApplicationCommand, CodecRule(encode=_encode_command, decode=_decode_command))
    codec.register(
        InteractionApplicationCommandCallbackData,
        CodecRule(encode=_encode_callback_data, decode=_decode_callback_data),
    )
    codec.register(
        InteractionResponse,
        CodecRule(encode=_encode_interaction_response, decode=_decode_interaction_response),
    )
    codec.register(ApplicationCommandInteractionDataOption, CodecRule(decode=_decode_interaction_option))
    codec.register(ApplicationCommandInteractionData, CodecRule(decode=_decode_interaction_data))
    codec.register(Interaction, CodecRule(decode=_decode_interaction))
    return codec
