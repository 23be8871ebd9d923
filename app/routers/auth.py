"""
Authentication endpoints – phone OTP flow with JWT session cookies.
"""

from fastapi import APIRouter, Request, Response

from app import db
from app.config import otp_echo_enabled
from app.dependencies import CurrentSession, OtpServiceDep
from app.errors import Unauthenticated
from app.models import (
    AuthResponse,
    MeResponse,
    MessageResponse,
    SendOtpRequest,
    SendOtpResponse,
    UserInfo,
    VerifyOtpRequest,
)
from app.rate_limit import AUTH, STRICT, limiter
from app.services.session import clear_session_cookie, create_session_token, set_session_cookie

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/send-otp",
    response_model=SendOtpResponse,
    response_model_exclude_none=True,
    operation_id="sendOtp",
    summary="Send a one-time code to the given phone number",
)
@limiter.limit(STRICT)
async def send_otp(request: Request, body: SendOtpRequest, otp_service: OtpServiceDep) -> SendOtpResponse:
    """
    Normalize the phone number, store a fresh 6-digit code and text it.
    With the console SMS provider the message is only logged.
    """
    issued = await otp_service.issue(body.phone)
    return SendOtpResponse(
        phone=issued.phone,
        message="OTP sent successfully",
        expires_in_seconds=otp_service.ttl_seconds,
        otp=issued.code if otp_echo_enabled() else None,
    )


@router.post(
    "/verify-otp",
    response_model=AuthResponse,
    operation_id="verifyOtp",
    summary="Verify a one-time code and receive a session cookie",
)
@limiter.limit(AUTH)
async def verify_otp(
    request: Request,
    body: VerifyOtpRequest,
    response: Response,
    otp_service: OtpServiceDep,
) -> AuthResponse:
    """
    Validate the code. On success, mark the phone verified, set a signed
    JWT as an HTTP-only cookie and return the user.
    """
    user = await otp_service.verify(body.phone, body.otp)
    set_session_cookie(response, create_session_token(user))
    return AuthResponse(
        message="Phone verified successfully",
        user=UserInfo.from_record(user),
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    operation_id="logout",
    summary="Clear the session cookie",
)
async def logout(current_session: CurrentSession, response: Response) -> MessageResponse:
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/me",
    response_model=MeResponse,
    operation_id="getMe",
    summary="Get current authenticated user info",
)
async def get_me(current_session: CurrentSession) -> MeResponse:
    user = await db.get_user(current_session.user_id)
    if user is None:
        raise Unauthenticated()
    return MeResponse(user=UserInfo.from_record(user))
