"""
Domain errors for the phone authentication flow.

Each error carries a stable machine-readable ``code`` and the HTTP status it
maps to. The exception handlers in ``app.main`` render them as
``{"error": code, "message": message}``; nothing else from the exception
reaches the client.
"""

from __future__ import annotations


class AuthError(Exception):
    code: str = "auth_error"
    status_code: int = 400
    message: str = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidPhoneFormat(AuthError):
    code = "invalid_phone_format"
    message = "Invalid phone number format"


class RateLimited(AuthError):
    code = "rate_limited"
    status_code = 429
    message = "Please wait before requesting another OTP"

    def __init__(self, message: str | None = None, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class UnknownPhone(AuthError):
    code = "unknown_phone"
    message = "Invalid phone number"


class OtpExpired(AuthError):
    code = "otp_expired"
    message = "OTP has expired"


class TooManyAttempts(AuthError):
    code = "too_many_attempts"
    status_code = 429
    message = "Too many failed attempts. Please request a new OTP"


class OtpMismatch(AuthError):
    code = "otp_mismatch"
    message = "Invalid OTP"


class Unauthenticated(AuthError):
    code = "unauthenticated"
    status_code = 401
    message = "Not authenticated"
