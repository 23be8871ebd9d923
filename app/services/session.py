"""
Stateless session tokens.

A session is a signed JWT in an HTTP-only cookie; there is no server-side
session table. Validity is decided entirely by signature and expiry.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Response

from app.config import (
    JWT_ALGORITHM,
    JWT_EXPIRY_DAYS,
    JWT_SECRET,
    SESSION_COOKIE_NAME,
    is_production,
)
from app.models import SessionClaims, UserRecord

SESSION_MAX_AGE = JWT_EXPIRY_DAYS * 86400


def create_session_token(user: UserRecord, now: datetime | None = None) -> str:
    """Create a signed JWT for a verified user."""
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "phone": user.phone,
        "phone_verified": user.phone_verified,
        "iat": now,
        "exp": now + timedelta(days=JWT_EXPIRY_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=is_production(),
        max_age=SESSION_MAX_AGE,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=is_production(),
    )


def decode_session(token: str | None) -> SessionClaims | None:
    """
    Return the claims of a valid token, or None.

    Missing, malformed, expired and forged tokens all give the same None so
    callers cannot tell the cases apart.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat", "sub"]},
        )
        return SessionClaims(
            user_id=payload["sub"],
            phone=payload["phone"],
            phone_verified=payload["phone_verified"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (jwt.PyJWTError, KeyError, TypeError, ValueError):
        return None
