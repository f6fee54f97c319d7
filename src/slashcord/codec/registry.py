from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Type, TypeVar, Union

from slashcord.errors import DecodingError, EncodingError

T = TypeVar("T")

Encoder = Callable[[Any, "WireCodec"], Any]
Decoder = Callable[[Any, "WireCodec"], Any]

_JSON_SCALARS = (str, int, float, bool, type(None))


@dataclass(frozen=True, slots=True)
class CodecRule:
    """Encoder/decoder pair for one domain type. Either side may be absent."""

    encode: Optional[Encoder] = None
    decode: Optional[Decoder] = None


class WireCodec:
    """
    Maps domain objects to and from Discord's JSON wire format.

    Rules are registered per type and resolved along the value's MRO at call time, so a
    new type gets a rule by registering it, without touching the existing ones.
    """

    def __init__(self, *, pretty: bool = False) -> None:
        self._rules: dict[type, CodecRule] = {}
        self._pretty = pretty

    def register(self, cls: type, rule: CodecRule) -> None:
        self._rules[cls] = rule

    def rule_for(self, cls: type) -> Optional[CodecRule]:
        for base in cls.__mro__:
            rule = self._rules.get(base)
            if rule is not None:
                return rule
        return None

    def encode(self, value: Any) -> Any:
        """Return a JSON-ready structure for ``value``."""
        rule = self.rule_for(type(value))
        if rule is not None:
            if rule.encode is None:
                raise EncodingError(f"Type {type(value).__name__} can only be decoded, not encoded.")
            return rule.encode(value, self)
        if isinstance(value, _JSON_SCALARS):
            return value
        if isinstance(value, Mapping):
            return {str(k): self.encode(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.encode(v) for v in value]
        raise EncodingError(f"No wire encoding registered for type {type(value).__name__}.")

    def decode(self, cls: Type[T], data: Any) -> T:
        rule = self.rule_for(cls)
        if rule is None or rule.decode is None:
            raise DecodingError(f"No wire decoding registered for type {cls.__name__}.")
        return rule.decode(data, self)

    def dumps(self, value: Any, *, pretty: Optional[bool] = None) -> str:
        indent = 2 if (self._pretty if pretty is None else pretty) else None
        return json.dumps(self.encode(value), indent=indent, ensure_ascii=False)

    def pretty(self, value: Any) -> str:
        return self.dumps(value, pretty=True)

    def loads(self, cls: Type[T], text: Union[str, bytes]) -> T:
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise DecodingError(f"Payload is not valid JSON for {cls.__name__}.") from exc
        return self.decode(cls, data)
