from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from multidict import CIMultiDictProxy


@dataclass(frozen=True, slots=True)
class ApiRequest:
    method: str
    url: str
    # Kept out of repr: carries the bot token.
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)
    body: Optional[bytes] = field(default=None, repr=False)

    def describe(self) -> str:
        return f"{self.method} {self.url}"


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """A fully read response. The underlying connection is already released."""

    status: int
    reason: Optional[str]
    # Case-insensitive; repeated headers keep every value.
    headers: CIMultiDictProxy[str]
    body: bytes = b""

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")

    def json(self) -> Any:
        if not self.body:
            return None
        return json.loads(self.body)
