"""Discord application command and interaction reply client."""

__version__ = "0.1.0"

from slashcord.codec import WireCodec, build_codec
from slashcord.errors import (
    ClientClosedError,
    CodecError,
    DecodingError,
    DiscordApiException,
    EncodingError,
    SlashcordError,
)
from slashcord.http import ApiRequest, ApiResponse, DiscordHttpClient, QueueWorkerPool

__all__ = [
    "ApiRequest",
    "ApiResponse",
    "ClientClosedError",
    "CodecError",
    "DecodingError",
    "DiscordApiException",
    "DiscordHttpClient",
    "EncodingError",
    "QueueWorkerPool",
    "SlashcordError",
    "WireCodec",
    "__version__",
    "build_codec",
]
