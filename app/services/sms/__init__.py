"""
Outbound SMS delivery.

One sender is built at startup from ``SMS_PROVIDER`` and injected wherever a
message has to go out; see ``create_sms_sender``.
"""

from app.services.sms.base import SmsResult, SmsSender
from app.services.sms.console_sender import ConsoleSender
from app.services.sms.factory import create_sms_sender
from app.services.sms.twilio_sender import TwilioSender
from app.services.sms.vonage_sender import VonageSender

__all__ = [
    "ConsoleSender",
    "SmsResult",
    "SmsSender",
    "TwilioSender",
    "VonageSender",
    "create_sms_sender",
]
