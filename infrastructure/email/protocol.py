"""EmailProvider protocol - operations depend on this, not the concrete implementation."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class EmailMessage:
    from_: str
    to: str
    subject: str
    html: str


class EmailProvider(Protocol):
    async def send(self, message: EmailMessage) -> None:
        """Deliver *message*; raise EmailDeliveryError on failure."""
        ...
