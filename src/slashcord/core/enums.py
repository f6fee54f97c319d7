from __future__ import annotations

from enum import IntEnum
from typing import Optional, Type, TypeVar

E = TypeVar("E", bound="WireEnum")


class WireEnum(IntEnum):
    """
    Closed set of variants, each bound to the small integer Discord uses on the wire.

    Values are explicit so reordering members never changes the wire format.
    """

    @classmethod
    def lookup(cls: Type[E], code: object) -> Optional[E]:
        """Return the variant bound to ``code``, or None when no variant matches."""
        if isinstance(code, bool) or not isinstance(code, int):
            return None
        for member in cls:
            if member.value == code:
                return member
        return None


class InteractionType(WireEnum):
    PING = 1
    APPLICATION_COMMAND = 2


class InteractionResponseType(WireEnum):
    PONG = 1
    ACKNOWLEDGE = 2
    CHANNEL_MESSAGE = 3
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    ACKNOWLEDGE_WITH_SOURCE = 5

    @property
    def carries_data(self) -> bool:
        return self in (InteractionResponseType.CHANNEL_MESSAGE, InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE)


class ApplicationCommandOptionType(WireEnum):
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8

    @property
    def nests_options(self) -> bool:
        return self in (ApplicationCommandOptionType.SUB_COMMAND, ApplicationCommandOptionType.SUB_COMMAND_GROUP)

    @property
    def accepts_choices(self) -> bool:
        return self in (ApplicationCommandOptionType.STRING, ApplicationCommandOptionType.INTEGER)
