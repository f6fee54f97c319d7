from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

import discord

from slashcord.codec.registry import CodecRule, WireCodec
from slashcord.errors import DecodingError, EncodingError

_FOOTER_KEYS = ("text", "icon_url")
_MEDIA_KEYS = ("url",)
_AUTHOR_KEYS = ("name", "url", "icon_url")


def _proxy_to_dict(proxy: Any, keys: Sequence[str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in keys:
        value = getattr(proxy, key, None)
        if value is not None:
            out[key] = value
    return out


def _encode_fields(embed: discord.Embed) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for index, field in enumerate(embed.fields):
        name = getattr(field, "name", None)
        value = getattr(field, "value", None)
        if name is None or value is None:
            raise EncodingError(f"Embed field {index} needs both a name and a value.")
        out.append({"name": str(name), "value": str(value), "inline": bool(getattr(field, "inline", False))})
    return out


def embed_rule(*, default_colour: Optional[int] = None) -> CodecRule:
    """
    Rule for ``discord.Embed``.

    ``default_colour`` is the rendering context's colour, applied only when the embed
    has none of its own. Unset fields are left out of the payload instead of sent as null.
    """

    def encode(embed: discord.Embed, codec: WireCodec) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key in ("title", "description", "url"):
            value = getattr(embed, key, None)
            if value is not None:
                out[key] = str(value)
        if embed.timestamp is not None:
            out["timestamp"] = embed.timestamp.isoformat()

        if embed.colour is not None:
            out["color"] = embed.colour.value
        elif default_colour is not None:
            out["color"] = int(default_colour)

        for key, proxy, keys in (
            ("footer", embed.footer, _FOOTER_KEYS),
            ("image", embed.image, _MEDIA_KEYS),
            ("thumbnail", embed.thumbnail, _MEDIA_KEYS),
            ("author", embed.author, _AUTHOR_KEYS),
        ):
            layer = _proxy_to_dict(proxy, keys)
            if layer:
                out[key] = layer

        fields = _encode_fields(embed)
        if fields:
            out["fields"] = fields
        return out

    def decode(data: Any, codec: WireCodec) -> discord.Embed:
        if not isinstance(data, Mapping):
            raise DecodingError(f"Embed payload must be an object, got {type(data).__name__}.")
        return discord.Embed.from_dict(dict(data))

    return CodecRule(encode=encode, decode=decode)
