from __future__ import annotations

import logging

from app.config import (
    SMS_FROM_NUMBER,
    SMS_PROVIDER,
    SMS_TIMEOUT,
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    TWILIO_FROM_NUMBER,
    VONAGE_API_KEY,
    VONAGE_API_SECRET,
    VONAGE_FROM_NUMBER,
)
from app.services.sms.base import SmsSender
from app.services.sms.console_sender import ConsoleSender
from app.services.sms.twilio_sender import TwilioSender
from app.services.sms.vonage_sender import VonageSender

logger = logging.getLogger(__name__)


def create_sms_sender(provider: str | None = None) -> SmsSender:
    """
    Build the sender selected by *provider* (defaults to ``SMS_PROVIDER``).

    Called once at startup; raises ValueError for an unknown provider so a
    misconfigured deployment fails fast instead of on the first login.
    """
    name = (provider or SMS_PROVIDER or "console").lower()

    if name == "console":
        sender: SmsSender = ConsoleSender()
    elif name == "twilio":
        sender = TwilioSender(
            TWILIO_ACCOUNT_SID,
            TWILIO_AUTH_TOKEN,
            SMS_FROM_NUMBER or TWILIO_FROM_NUMBER,
            timeout=SMS_TIMEOUT,
        )
    elif name == "vonage":
        sender = VonageSender(
            VONAGE_API_KEY,
            VONAGE_API_SECRET,
            SMS_FROM_NUMBER or VONAGE_FROM_NUMBER,
            timeout=SMS_TIMEOUT,
        )
    else:
        raise ValueError(f"Unsupported SMS provider: {name}")

    logger.info("SMS provider: %s", type(sender).__name__)
    return sender
