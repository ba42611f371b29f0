"""Delivery policy on top of an EmailProvider.

await_delivery=True  - send() awaits the provider; failures propagate.
await_delivery=False - send() schedules delivery with asyncio.create_task()
                       and returns at once; failures are logged from the
                       task's done-callback.
"""

from __future__ import annotations

import asyncio

from config import EmailSettings
from infrastructure.email.console import ConsoleEmailProvider
from infrastructure.email.protocol import EmailMessage, EmailProvider
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)


class EmailDispatcher:
    def __init__(self, provider: EmailProvider, await_delivery: bool = False) -> None:
        self._provider = provider
        self.await_delivery = await_delivery
        self._pending: set[asyncio.Task] = set()

    async def send(self, message: EmailMessage) -> None:
        if self.await_delivery:
            await self._provider.send(message)
            return

        task = asyncio.create_task(self._provider.send(message))
        # keep a strong reference until the task finishes
        self._pending.add(task)
        task.add_done_callback(self._on_done(message))

    def _on_done(self, message: EmailMessage):
        def callback(task: asyncio.Task) -> None:
            self._pending.discard(task)
            if task.cancelled():
                log.warning("email_send_cancelled", to_email=message.to)
                return
            exc = task.exception()
            if exc is not None:
                log.error(
                    "email_send_failed",
                    to_email=message.to,
                    subject=message.subject,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )

        return callback

    async def drain(self) -> None:
        """Wait for background deliveries (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


def build_email_dispatcher(
    settings: EmailSettings, http_client: HttpClient | None = None
) -> EmailDispatcher:
    if settings.email_transport == "zeptomail":
        provider: EmailProvider = ZeptoMailProvider(settings, http_client or HttpClient())
    else:
        provider = ConsoleEmailProvider()
    return EmailDispatcher(provider, await_delivery=settings.email_await_delivery)
