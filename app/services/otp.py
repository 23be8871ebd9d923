"""
Phone OTP issuance and verification.

Per phone number the flow is a small state machine:

    NoCode ──issue──▶ CodeIssued ──verify(ok)──▶ Verified
                         │  ▲
                         │  └──── issue (any time, resets attempts)
                         ├── expiry passes ──▶ Expired
                         └── max wrong codes ─▶ Exhausted

Expired and Exhausted are only left by issuing a new code. Sending the SMS
is best-effort: a failed delivery is logged and the issued code stays valid,
since verification is the only gate that matters.

Concurrent requests for the same phone are not serialised. Issuances
overwrite each other (the newest code wins) and two simultaneous wrong
guesses may both read the same attempt count, so the attempt ceiling is a
soft bound under heavy concurrency. A code can still only be consumed once
(see ``db.mark_verified``).
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from app import db
from app.config import (
    OTP_COOLDOWN_SECONDS,
    OTP_LENGTH,
    OTP_MAX_ATTEMPTS,
    OTP_TTL_SECONDS,
)
from app.errors import OtpExpired, OtpMismatch, RateLimited, TooManyAttempts, UnknownPhone
from app.models import UserRecord
from app.phone import mask_phone, normalize_phone
from app.services.sms.base import SmsSender

logger = logging.getLogger(__name__)

MESSAGE_TEMPLATE = (
    "Your PropertyHub verification code is: {code}. "
    "This code will expire in {minutes} minutes."
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_otp_code(length: int = OTP_LENGTH) -> str:
    """Uniformly random numeric code, zero-padded to *length* digits."""
    return f"{secrets.randbelow(10 ** length):0{length}d}"


@dataclass
class IssuedOtp:
    phone: str
    code: str
    expires_at: datetime


class OtpService:
    """
    Issues and verifies one-time codes for phone numbers.

    *sender* delivers the SMS; *store* is the credential repository (the
    ``app.db`` module by default). *enforce_cooldown* switches the per-phone
    issuance cooldown on; the caller decides from configuration (see
    ``config.otp_cooldown_enforced``). *clock* exists so tests can move time.
    """

    def __init__(
        self,
        sender: SmsSender,
        *,
        store=db,
        enforce_cooldown: bool = True,
        code_length: int = OTP_LENGTH,
        ttl_seconds: int = OTP_TTL_SECONDS,
        cooldown_seconds: int = OTP_COOLDOWN_SECONDS,
        max_attempts: int = OTP_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._sender = sender
        self._store = store
        self.enforce_cooldown = enforce_cooldown
        self.code_length = code_length
        self.ttl_seconds = ttl_seconds
        self.cooldown_seconds = cooldown_seconds
        self.max_attempts = max_attempts
        self._clock = clock

    # ── Issuance ──────────────────────────────────────────────────────

    async def issue(self, raw_phone: str) -> IssuedOtp:
        """
        Generate, store and send a new code for *raw_phone*.

        Raises InvalidPhoneFormat or RateLimited. Delivery failures do not
        raise.
        """
        phone = normalize_phone(raw_phone)
        now = self._clock()

        if self.enforce_cooldown:
            self._check_cooldown(await self._store.get_user_by_phone(phone), now)

        code = generate_otp_code(self.code_length)
        expires_at = now + timedelta(seconds=self.ttl_seconds)
        await self._store.upsert_otp(phone, code, expires_at, now)
        logger.info("OTP issued for %s", mask_phone(phone))

        await self._deliver(phone, code)
        return IssuedOtp(phone=phone, code=code, expires_at=expires_at)

    def _check_cooldown(self, user: UserRecord | None, now: datetime) -> None:
        if user is None or user.last_otp_sent is None:
            return
        next_allowed = user.last_otp_sent + timedelta(seconds=self.cooldown_seconds)
        if next_allowed > now:
            retry_after = int((next_allowed - now).total_seconds()) + 1
            logger.info("OTP request for %s rate-limited (%ds)", mask_phone(user.phone), retry_after)
            raise RateLimited(retry_after=retry_after)

    async def _deliver(self, phone: str, code: str) -> None:
        message = MESSAGE_TEMPLATE.format(code=code, minutes=self.ttl_seconds // 60)
        try:
            result = await self._sender.send(phone, message)
        except Exception:
            logger.exception("SMS sender crashed while sending OTP to %s", mask_phone(phone))
            return
        if not result.success:
            logger.warning("Failed to send OTP SMS to %s: %s", mask_phone(phone), result.error)

    # ── Verification ──────────────────────────────────────────────────

    async def verify(self, raw_phone: str, code: str) -> UserRecord:
        """
        Check *code* for *raw_phone* and, on success, consume it.

        Returns the verified user. Raises InvalidPhoneFormat, UnknownPhone,
        OtpExpired, TooManyAttempts or OtpMismatch – in that order of
        precedence.
        """
        phone = normalize_phone(raw_phone)
        user = await self._store.get_user_by_phone(phone)
        if user is None:
            raise UnknownPhone()

        if user.otp_expiry is None or user.otp_expiry < self._clock():
            raise OtpExpired()

        # Checked before comparing, so an exhausted code reveals nothing.
        if user.otp_attempts >= self.max_attempts:
            raise TooManyAttempts()

        if user.otp_code is None or not secrets.compare_digest(user.otp_code.encode(), code.encode()):
            await self._store.record_failed_attempt(user.id, self.max_attempts)
            logger.info(
                "Wrong OTP for %s (attempt %d/%d)",
                mask_phone(phone), user.otp_attempts + 1, self.max_attempts,
            )
            raise OtpMismatch()

        if not await self._store.mark_verified(user.id, user.otp_code):
            # Another request consumed this code between our read and write.
            raise OtpExpired()

        logger.info("Phone %s verified", mask_phone(phone))
        return await self._store.get_user(user.id)  # type: ignore[return-value]
