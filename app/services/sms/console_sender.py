"""
Console SMS backend — logs messages instead of sending them.

The default for local development so the OTP flow works without any
provider credentials.
"""

from __future__ import annotations

import logging
import time

from app.services.sms.base import SmsResult

logger = logging.getLogger(__name__)


class ConsoleSender:
    async def send(self, destination: str, message: str) -> SmsResult:
        logger.info("📱 [DEV] Would send SMS to %s: %s", destination, message)
        return SmsResult(success=True, message_id=f"console_{int(time.time() * 1000)}")
