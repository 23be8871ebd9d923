"""
Application configuration from environment variables.

Defaults are safe for any environment. Local development sets
ENVIRONMENT=development to get the OTP echo and skip the cooldown.
A .env file in the project root is loaded automatically (if present).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file before reading any env vars
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# ── Environment ───────────────────────────────────────────────────────────

# Empty when unset. Development conveniences (OTP echo, no cooldown) need an
# explicit "development".
ENVIRONMENT: str = os.getenv("ENVIRONMENT") or os.getenv("NODE_ENV", "")


def is_production() -> bool:
    return ENVIRONMENT == "production"


def is_development() -> bool:
    return ENVIRONMENT == "development"


# ── Paths ─────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# SQLite database file
DB_PATH: str = os.getenv("DB_PATH", str(DATA_DIR / "propertyhub.db"))

# Seconds to wait for a locked database before giving up
DB_TIMEOUT: float = float(os.getenv("DB_TIMEOUT", "5"))

# ── JWT / Session ─────────────────────────────────────────────────────────

DEV_JWT_SECRET = "dev-secret-change-me-in-production"
JWT_SECRET: str = os.getenv("JWT_SECRET", DEV_JWT_SECRET)
JWT_ALGORITHM: str = "HS256"
JWT_EXPIRY_DAYS: int = int(os.getenv("JWT_EXPIRY_DAYS", "7"))
SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "auth-token")

# ── Phone numbers ─────────────────────────────────────────────────────────

# Canonical form is "+" + country code + local number (e.g. +97699119911)
PHONE_COUNTRY_CODE: str = os.getenv("PHONE_COUNTRY_CODE", "976")
PHONE_LOCAL_LENGTH: int = int(os.getenv("PHONE_LOCAL_LENGTH", "8"))

# ── OTP ───────────────────────────────────────────────────────────────────

OTP_LENGTH: int = int(os.getenv("OTP_LENGTH", "6"))
OTP_TTL_SECONDS: int = int(os.getenv("OTP_TTL_SECONDS", "600"))
OTP_COOLDOWN_SECONDS: int = int(os.getenv("OTP_COOLDOWN_SECONDS", "300"))
OTP_MAX_ATTEMPTS: int = int(os.getenv("OTP_MAX_ATTEMPTS", "3"))

# "auto" | "true" | "false" – see otp_cooldown_enforced() / otp_echo_enabled()
_OTP_COOLDOWN_OVERRIDE: str = os.getenv("OTP_COOLDOWN", "auto")
_OTP_ECHO_OVERRIDE: str = os.getenv("OTP_ECHO", "auto")


def otp_cooldown_enforced() -> bool:
    """True when the per-phone issuance cooldown must be applied.

    Controlled by OTP_COOLDOWN env var:
      • "auto" (default) — skip only when ENVIRONMENT is "development"
      • "true"  — enforce everywhere
      • "false" — skip outside production (automated tests, local dev)

    Production always enforces, whatever the override says.
    """
    if is_production():
        return True
    override = _OTP_COOLDOWN_OVERRIDE.lower()
    if override == "false":
        return False
    if override == "true":
        return True
    return not is_development()


def otp_echo_enabled() -> bool:
    """True when send-otp may return the generated code in its response.

    Controlled by OTP_ECHO env var:
      • "auto" (default) — echo only when ENVIRONMENT is "development"
      • "true"  — echo in any non-production environment
      • "false" — never echo

    Never echoes in production.
    """
    if is_production():
        return False
    override = _OTP_ECHO_OVERRIDE.lower()
    if override == "false":
        return False
    if override == "true":
        return True
    return is_development()


def check_production_secrets() -> None:
    """Refuse to run production with the development JWT secret."""
    if is_production() and JWT_SECRET == DEV_JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set in production")


# ── SMS ───────────────────────────────────────────────────────────────────

# "console" | "twilio" | "vonage"
SMS_PROVIDER: str = os.getenv("SMS_PROVIDER", "console")
SMS_TIMEOUT: float = float(os.getenv("SMS_TIMEOUT", "10"))
SMS_FROM_NUMBER: str = os.getenv("SMS_FROM_NUMBER", "")

TWILIO_ACCOUNT_SID: str = os.getenv("TWILIO_ACCOUNT_SID", "")
TWILIO_AUTH_TOKEN: str = os.getenv("TWILIO_AUTH_TOKEN", "")
TWILIO_FROM_NUMBER: str = os.getenv("TWILIO_FROM_NUMBER", "")

VONAGE_API_KEY: str = os.getenv("VONAGE_API_KEY", "")
VONAGE_API_SECRET: str = os.getenv("VONAGE_API_SECRET", "")
VONAGE_FROM_NUMBER: str = os.getenv("VONAGE_FROM_NUMBER", "")
