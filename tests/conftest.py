"""
Shared test fixtures.

Provides a FastAPI TestClient wired to:
  • a temporary SQLite database (via app lifespan)
  • an in-memory SMS sender that records every message
  • development settings (no issuance cooldown, OTP echoed back)

The `client` fixture runs the full lifespan (DB init / shutdown). Service
tests use the `store` fixture instead, which opens the same temp database
directly in the test's event loop.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app import db
from app.main import app
from tests.mocks.services import FakeSmsSender


# ── Fixtures ───────────────────────────────────────────────────────────────


@pytest.fixture()
def sms_sender() -> FakeSmsSender:
    return FakeSmsSender()


@pytest.fixture()
def _test_env(monkeypatch, tmp_path, sms_sender):
    """
    Internal fixture that patches the DB path, the SMS sender and the
    environment so that the app lifespan runs cleanly against a temp
    database without any real provider.
    """
    # ── Temp database ─────────────────────────────────────────────────
    monkeypatch.setattr(db, "DB_PATH", str(tmp_path / "test.db"))

    # ── Fake SMS sender ───────────────────────────────────────────────
    monkeypatch.setattr("app.main.create_sms_sender", lambda: sms_sender)

    # ── Development mode (cooldown off, OTP echo on) ──────────────────
    monkeypatch.setattr("app.config.ENVIRONMENT", "development")
    monkeypatch.setattr("app.config._OTP_COOLDOWN_OVERRIDE", "auto")
    monkeypatch.setattr("app.config._OTP_ECHO_OVERRIDE", "auto")

    # ── Disable rate limiting in tests ────────────────────────────────
    from app.rate_limit import limiter as _limiter
    monkeypatch.setattr(_limiter, "enabled", False)

    return sms_sender


@pytest.fixture()
def client(_test_env) -> TestClient:
    """
    FastAPI TestClient with a temp DB and a fake SMS sender.

    Uses a context manager so the lifespan runs (DB init/shutdown).
    """
    app.dependency_overrides.clear()

    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc

    app.dependency_overrides.clear()


@pytest.fixture()
def production(_test_env, monkeypatch):
    """Switch the app into production mode for one test."""
    monkeypatch.setattr("app.config.ENVIRONMENT", "production")
    monkeypatch.setattr("app.config.JWT_SECRET", "test-production-secret")


@pytest.fixture()
async def store(monkeypatch, tmp_path):
    """The credential repository backed by a fresh temp database."""
    monkeypatch.setattr(db, "DB_PATH", str(tmp_path / "store.db"))
    await db.init_db()
    yield db
    await db.close_db()
