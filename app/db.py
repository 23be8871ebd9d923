"""
SQLite database layer using aiosqlite.

Stores one credential record per canonical phone number, holding the OTP
state used by the authentication flow. Tables are created automatically on
first connect.

Nothing is cached between calls: every read goes to the database so a
request never acts on another request's stale copy of a record.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

import aiosqlite

from app.config import DB_PATH, DB_TIMEOUT
from app.models import UserRecord

logger = logging.getLogger(__name__)

# ── Module-level connection ───────────────────────────────────────────────

_db: aiosqlite.Connection | None = None


async def init_db() -> None:
    """Open the database and create tables if they don't exist."""
    global _db
    db_path = Path(DB_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    _db = await aiosqlite.connect(str(db_path), timeout=DB_TIMEOUT)
    _db.row_factory = aiosqlite.Row  # dict-like rows
    await _db.execute("PRAGMA journal_mode=WAL")

    await _db.executescript(_SCHEMA)
    await _db.commit()
    logger.info("Database initialized at %s", db_path)


async def close_db() -> None:
    """Close the database connection."""
    global _db
    if _db is not None:
        await _db.close()
        _db = None
        logger.info("Database connection closed")


def get_db() -> aiosqlite.Connection:
    """Return the active database connection (must call init_db first)."""
    assert _db is not None, "Database not initialized — call init_db() first"
    return _db


# ── Schema ────────────────────────────────────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id              TEXT PRIMARY KEY,
    phone           TEXT NOT NULL UNIQUE,   -- canonical, e.g. +97699119911
    name            TEXT,
    email           TEXT,
    avatar          TEXT,
    role            TEXT NOT NULL DEFAULT 'USER',
    phone_verified  INTEGER NOT NULL DEFAULT 0,
    otp_code        TEXT,                   -- set together with otp_expiry
    otp_expiry      TEXT,
    otp_attempts    INTEGER NOT NULL DEFAULT 0,
    last_otp_sent   TEXT,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL
);
"""


# ── Helpers ───────────────────────────────────────────────────────────────


def _iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_user(row: aiosqlite.Row) -> UserRecord:
    """Convert a database row to a UserRecord model."""
    return UserRecord(
        id=row["id"],
        phone=row["phone"],
        name=row["name"],
        email=row["email"],
        avatar=row["avatar"],
        role=row["role"],
        phone_verified=bool(row["phone_verified"]),
        otp_code=row["otp_code"],
        otp_expiry=row["otp_expiry"],
        otp_attempts=row["otp_attempts"],
        last_otp_sent=row["last_otp_sent"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# ══════════════════════════════════════════════════════════════════════════
#                    USER / CREDENTIAL REPOSITORY
# ══════════════════════════════════════════════════════════════════════════


async def get_user(user_id: str) -> UserRecord | None:
    """Fetch a single user by ID."""
    db = get_db()
    async with db.execute("SELECT * FROM users WHERE id = ?", (user_id,)) as cur:
        row = await cur.fetchone()
    return _row_to_user(row) if row else None


async def get_user_by_phone(phone: str) -> UserRecord | None:
    """Fetch a single user by canonical phone number."""
    db = get_db()
    async with db.execute("SELECT * FROM users WHERE phone = ?", (phone,)) as cur:
        row = await cur.fetchone()
    return _row_to_user(row) if row else None


async def upsert_otp(
    phone: str,
    otp_code: str,
    otp_expiry: datetime,
    sent_at: datetime,
) -> UserRecord:
    """
    Store a freshly issued code for *phone*, creating the user if needed.

    A single INSERT … ON CONFLICT statement, so two concurrent issuances for
    the same phone never produce two rows; the later write wins.
    """
    db = get_db()
    now = _now_iso()
    await db.execute(
        """
        INSERT INTO users (
            id, phone, role, phone_verified,
            otp_code, otp_expiry, otp_attempts, last_otp_sent,
            created_at, updated_at
        ) VALUES (?, ?, 'USER', 0, ?, ?, 0, ?, ?, ?)
        ON CONFLICT(phone) DO UPDATE SET
            otp_code = excluded.otp_code,
            otp_expiry = excluded.otp_expiry,
            otp_attempts = 0,
            last_otp_sent = excluded.last_otp_sent,
            updated_at = excluded.updated_at
        """,
        (
            str(uuid4()), phone,
            otp_code, _iso(otp_expiry), _iso(sent_at),
            now, now,
        ),
    )
    await db.commit()
    return await get_user_by_phone(phone)  # type: ignore[return-value]


async def record_failed_attempt(user_id: str, max_attempts: int) -> None:
    """Increment otp_attempts by one, but never past *max_attempts*."""
    db = get_db()
    await db.execute(
        """
        UPDATE users
        SET otp_attempts = otp_attempts + 1, updated_at = ?
        WHERE id = ? AND otp_attempts < ?
        """,
        (_now_iso(), user_id, max_attempts),
    )
    await db.commit()


async def mark_verified(user_id: str, otp_code: str) -> bool:
    """
    Consume *otp_code*: mark the phone verified and clear all OTP state.

    Only succeeds while the stored code is still *otp_code*, so a code can be
    consumed once even when two verifications race. Returns True if this
    call consumed it.
    """
    db = get_db()
    cur = await db.execute(
        """
        UPDATE users SET
            phone_verified = 1,
            otp_code = NULL,
            otp_expiry = NULL,
            otp_attempts = 0,
            last_otp_sent = NULL,
            updated_at = ?
        WHERE id = ? AND otp_code = ?
        """,
        (_now_iso(), user_id, otp_code),
    )
    await db.commit()
    return cur.rowcount > 0


async def ping() -> bool:
    """True when the database connection is open and answers a trivial query."""
    if _db is None:
        return False
    try:
        async with _db.execute("SELECT 1") as cur:
            await cur.fetchone()
    except aiosqlite.Error:
        logger.exception("Database ping failed")
        return False
    return True
