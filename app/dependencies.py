import logging
from typing import Annotated

from fastapi import Cookie, Depends, Request

from app.config import SESSION_COOKIE_NAME, otp_cooldown_enforced
from app.errors import Unauthenticated
from app.models import SessionClaims
from app.services.otp import OtpService
from app.services.session import decode_session
from app.services.sms import SmsSender

logger = logging.getLogger(__name__)


# ── SMS / OTP ──────────────────────────────────────────────────────────────


def get_sms_sender(request: Request) -> SmsSender:
    """The sender built once in the app lifespan."""
    return request.app.state.sms_sender


def get_otp_service(
    sender: Annotated[SmsSender, Depends(get_sms_sender)],
) -> OtpService:
    return OtpService(sender, enforce_cooldown=otp_cooldown_enforced())


OtpServiceDep = Annotated[OtpService, Depends(get_otp_service)]


# ── Session ────────────────────────────────────────────────────────────────


async def get_current_session(
    auth_token: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> SessionClaims:
    claims = decode_session(auth_token)
    if claims is None:
        raise Unauthenticated()
    return claims


CurrentSession = Annotated[SessionClaims, Depends(get_current_session)]
