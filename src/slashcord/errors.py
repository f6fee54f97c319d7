from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from slashcord.http.messages import ApiRequest, ApiResponse


class SlashcordError(Exception):
    pass


class CodecError(SlashcordError):
    pass


class EncodingError(CodecError):
    """A domain object could not be mapped to wire JSON. Raised before any request is sent."""


class DecodingError(CodecError):
    """A wire payload does not have the shape of the requested domain type."""


class ClientClosedError(SlashcordError, RuntimeError):
    pass


class DiscordApiException(SlashcordError):
    """
    Discord answered, but with a status code outside the set the operation expects.

    The full response is carried so callers can tell "not found", "forbidden",
    "rate limited" and friends apart.
    """

    def __init__(self, expected_codes: Iterable[int], request: ApiRequest, response: ApiResponse) -> None:
        self.expected_codes = frozenset(expected_codes)
        self.request = request
        self.response = response
        expected = ",".join(str(code) for code in sorted(self.expected_codes))
        super().__init__(
            f"Discord API returned status {response.status}, expected one of {{{expected}}}. "
            f"request={request.describe()}"
        )

    @property
    def status(self) -> int:
        return self.response.status
