"""ZeptoMail implementation of EmailProvider.

Delivers pre-rendered messages through the ZeptoMail HTTP API using the
shared async HttpClient. Any non-2xx response or transport failure raises
EmailDeliveryError; the dispatcher decides whether that reaches the caller.
"""

from email.utils import parseaddr

import httpx

from config import EmailSettings
from errors import EmailDeliveryError
from infrastructure.email.protocol import EmailMessage
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.in/v1.1/email"


class ZeptoMailProvider:
    def __init__(self, settings: EmailSettings, http_client: HttpClient) -> None:
        self._settings = settings
        self._http = http_client

    def _auth_header(self) -> str:
        token = self._settings.zepto_api_token
        if not token.startswith("Zoho-enczapikey "):
            token = f"Zoho-enczapikey {token}"
        return token

    async def send(self, message: EmailMessage) -> None:
        if not self._settings.zepto_api_token:
            log.error("zepto_mail_send_failed", reason="token_not_configured")
            raise EmailDeliveryError("Email transport is not configured.")

        from_name, from_address = parseaddr(message.from_)
        payload: dict = {
            "from": {
                "address": from_address or self._settings.email_from_address,
                "name": from_name or self._settings.email_from_name,
            },
            "to": [{"email_address": {"address": message.to, "name": message.to}}],
            "subject": message.subject,
            "htmlbody": message.html,
        }
        headers = {"Authorization": self._auth_header(), "Content-Type": "application/json"}

        try:
            response = await self._http.post(_ZEPTO_API_URL, json=payload, headers=headers)
        except httpx.HTTPError as e:
            log.error(
                "email_send_error",
                to_email=message.to,
                subject=message.subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise EmailDeliveryError("Email could not be sent.") from e

        if response.status_code not in (200, 201, 202):
            log.error(
                "email_sent_failed",
                to_email=message.to,
                subject=message.subject,
                status_code=response.status_code,
                response=response.text[:200],
            )
            raise EmailDeliveryError(
                "Email could not be sent.", details={"status_code": response.status_code}
            )

        log.info("email_sent_success", to_email=message.to, subject=message.subject)
