"""
Twilio SMS backend.

The Twilio SDK is blocking, so each send runs in a worker thread. The SDK's
HTTP client is given an explicit timeout so a send can never hang a request.
"""

from __future__ import annotations

import asyncio
import logging

from twilio.base.exceptions import TwilioException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from app.phone import mask_phone
from app.services.sms.base import SmsResult

logger = logging.getLogger(__name__)


class TwilioSender:
    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        *,
        timeout: float = 10.0,
        client: Client | None = None,
    ) -> None:
        self._from_number = from_number
        self._client = client or Client(
            account_sid,
            auth_token,
            http_client=TwilioHttpClient(timeout=timeout),
        )

    def _send_sync(self, destination: str, message: str) -> SmsResult:
        to = destination if destination.startswith("+") else f"+{destination}"
        try:
            result = self._client.messages.create(
                body=message,
                from_=self._from_number,
                to=to,
            )
        except (TwilioException, OSError) as exc:
            logger.warning("Twilio SMS to %s failed: %s", mask_phone(to), exc)
            return SmsResult(success=False, error=str(exc) or "Failed to send SMS")
        return SmsResult(success=True, message_id=result.sid)

    async def send(self, destination: str, message: str) -> SmsResult:
        return await asyncio.to_thread(self._send_sync, destination, message)
