from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass
class SmsResult:
    """Outcome of a single send attempt."""

    success: bool
    message_id: str | None = None
    error: str | None = None


class SmsSender(Protocol):
    """
    Anything that can deliver a text message.

    Implementations report delivery problems through ``SmsResult`` instead
    of raising, and must bound every network call with a timeout.
    """

    async def send(self, destination: str, message: str) -> SmsResult:  # pragma: no cover - interface
        ...
