"""Development EmailProvider that logs messages instead of sending them."""

from infrastructure.email.protocol import EmailMessage
from shared.logging import get_logger

log = get_logger(__name__)


class ConsoleEmailProvider:
    async def send(self, message: EmailMessage) -> None:
        log.info(
            "email_logged",
            from_address=message.from_,
            to_email=message.to,
            subject=message.subject,
            html=message.html,
        )
