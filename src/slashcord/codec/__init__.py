"""Wire codec: per-type rules mapping domain objects to Discord JSON and back."""

from slashcord.codec.embeds import embed_rule
from slashcord.codec.registry import CodecRule, WireCodec
from slashcord.codec.rules import build_codec, enum_rule

__all__ = ["CodecRule", "WireCodec", "build_codec", "embed_rule", "enum_rule"]
