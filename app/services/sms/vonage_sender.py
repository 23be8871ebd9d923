"""
Vonage (Nexmo) SMS backend using the plain REST API over httpx.

Docs: https://developer.vonage.com/en/api/sms
"""

from __future__ import annotations

import logging

import httpx

from app.phone import mask_phone
from app.services.sms.base import SmsResult

logger = logging.getLogger(__name__)

VONAGE_SMS_URL = "https://rest.nexmo.com/sms/json"


class VonageSender:
    def __init__(
        self,
        api_key: str,
        api_secret: str,
        from_number: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._from_number = from_number
        self._timeout = timeout
        self._transport = transport

    async def send(self, destination: str, message: str) -> SmsResult:
        # Vonage wants the number without the leading "+"
        to = destination.lstrip("+")
        payload = {
            "api_key": self._api_key,
            "api_secret": self._api_secret,
            "from": self._from_number,
            "to": to,
            "text": message,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(VONAGE_SMS_URL, data=payload)
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Vonage SMS to %s failed: %s", mask_phone(destination), exc)
            return SmsResult(success=False, error=str(exc) or "Failed to send SMS")

        messages = body.get("messages") or []
        if not messages:
            return SmsResult(success=False, error="Empty response from Vonage")

        first = messages[0]
        if first.get("status") != "0":
            error = first.get("error-text") or f"Vonage status {first.get('status')}"
            logger.warning("Vonage rejected SMS to %s: %s", mask_phone(destination), error)
            return SmsResult(success=False, error=error)

        return SmsResult(success=True, message_id=first.get("message-id"))
