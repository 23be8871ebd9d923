"""Pydantic models for the PropertyHub auth API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


# ── Persistence ───────────────────────────────────────────────────────────


class UserRecord(BaseModel):
    """A row of the ``users`` table – one per canonical phone number."""
    id: str = Field(..., description="Unique user identifier (session subject)")
    phone: str = Field(..., description="Canonical phone number, e.g. +97699119911")
    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Contact email")
    avatar: Optional[str] = Field(None, description="Avatar URL")
    role: str = Field(default="USER", description="Account role")
    phone_verified: bool = Field(default=False, description="Whether the phone was ever verified")
    otp_code: Optional[str] = Field(None, description="Current one-time code")
    otp_expiry: Optional[datetime] = Field(None, description="When otp_code stops being valid")
    otp_attempts: int = Field(default=0, ge=0, description="Failed attempts since issuance")
    last_otp_sent: Optional[datetime] = Field(None, description="Most recent issuance time")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class SessionClaims(BaseModel):
    """Identity claims carried by a valid session token."""
    user_id: str = Field(..., description="Subject of the token")
    phone: str = Field(..., description="Canonical phone number")
    phone_verified: bool = Field(..., description="Verification state at issuance")
    issued_at: datetime = Field(..., description="Token issue time")
    expires_at: datetime = Field(..., description="Token expiry time")


# ── Requests ──────────────────────────────────────────────────────────────


class SendOtpRequest(BaseModel):
    """Request a one-time code for a phone number."""
    phone: str = Field(..., min_length=1, description="Phone number in any supported shape")


class VerifyOtpRequest(BaseModel):
    """Submit a one-time code."""
    phone: str = Field(..., min_length=1, description="Phone number in any supported shape")
    otp: str = Field(..., min_length=1, description="The code received by SMS")


# ── Responses ─────────────────────────────────────────────────────────────


class UserInfo(BaseModel):
    """Public view of a user."""
    id: str = Field(..., description="Unique user identifier")
    phone: str = Field(..., description="Canonical phone number")
    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Contact email")
    avatar: Optional[str] = Field(None, description="Avatar URL")
    role: str = Field(..., description="Account role")
    phone_verified: bool = Field(..., description="Whether the phone is verified")
    created_at: datetime = Field(..., description="Account creation time")

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserInfo":
        return cls(
            id=record.id,
            phone=record.phone,
            name=record.name,
            email=record.email,
            avatar=record.avatar,
            role=record.role,
            phone_verified=record.phone_verified,
            created_at=record.created_at,
        )


class SendOtpResponse(BaseModel):
    """Result of a successful OTP issuance."""
    phone: str = Field(..., description="Canonical phone number the code was issued for")
    message: str = Field(..., description="Human-readable status")
    expires_in_seconds: int = Field(..., description="Code validity window")
    otp: Optional[str] = Field(None, description="The issued code (development only)")


class AuthResponse(BaseModel):
    """Result of a successful verification."""
    message: str = Field(..., description="Human-readable status")
    user: UserInfo = Field(..., description="The authenticated user")


class MeResponse(BaseModel):
    """Current session owner."""
    user: UserInfo = Field(..., description="The authenticated user")


class MessageResponse(BaseModel):
    """Plain status message."""
    message: str = Field(..., description="Human-readable status")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status: ok or degraded")
    database: str = Field(..., description="Credential database: ok or unavailable")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(..., description="Current server time")


class Error(BaseModel):
    """Error response."""
    error: str = Field(..., description="Stable error code")
    message: str = Field(..., description="Short human-readable description")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
