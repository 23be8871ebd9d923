"""Tests for the /auth endpoints."""

import pytest
from fastapi.testclient import TestClient

from app import db
from app.main import app
from tests.mocks.models import CANONICAL_PHONE, LOCAL_PHONE


def _send(client, phone=LOCAL_PHONE):
    return client.post("/auth/send-otp", json={"phone": phone})


def _verify(client, otp, phone=LOCAL_PHONE):
    return client.post("/auth/verify-otp", json={"phone": phone, "otp": otp})


class TestSendOtp:
    def test_send_otp_success(self, client, sms_sender):
        resp = _send(client)
        assert resp.status_code == 200
        data = resp.json()
        assert data["phone"] == CANONICAL_PHONE
        assert data["message"] == "OTP sent successfully"
        assert data["expires_in_seconds"] == 600
        # Development echoes the code back
        assert data["otp"] == sms_sender.last_code()
        assert sms_sender.sent[-1][0] == CANONICAL_PHONE

    def test_otp_not_echoed_when_disabled(self, client, monkeypatch):
        monkeypatch.setattr("app.config._OTP_ECHO_OVERRIDE", "false")
        resp = _send(client)
        assert resp.status_code == 200
        assert "otp" not in resp.json()

    def test_send_otp_invalid_phone(self, client, sms_sender):
        resp = _send(client, phone="12345")
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_phone_format"
        assert sms_sender.sent == []

    def test_send_otp_missing_phone(self, client):
        resp = client.post("/auth/send-otp", json={})
        assert resp.status_code == 400
        data = resp.json()
        assert data["error"] == "validation_error"
        assert "phone" in data["message"]

    def test_no_cooldown_in_development(self, client):
        assert _send(client).status_code == 200
        assert _send(client).status_code == 200

    def test_sms_failure_still_succeeds(self, client, sms_sender):
        sms_sender.fail = True
        resp = _send(client)
        assert resp.status_code == 200


class TestSendOtpProduction:
    def test_cooldown_enforced(self, production, client):
        assert _send(client).status_code == 200

        resp = _send(client)
        assert resp.status_code == 429
        assert resp.json()["error"] == "rate_limited"
        assert 0 < int(resp.headers["retry-after"]) <= 300

    def test_otp_never_echoed(self, production, client):
        resp = _send(client)
        assert resp.status_code == 200
        assert "otp" not in resp.json()

    def test_secure_cookie(self, production, client, sms_sender):
        _send(client)
        resp = _verify(client, sms_sender.last_code())
        assert resp.status_code == 200
        assert "Secure" in resp.headers["set-cookie"]


class TestSendOtpUnsetEnvironment:
    @pytest.fixture()
    def unset_env(self, _test_env, monkeypatch):
        monkeypatch.setattr("app.config.ENVIRONMENT", "")

    def test_code_not_echoed(self, unset_env, client, sms_sender):
        resp = _send(client)
        assert resp.status_code == 200
        assert "otp" not in resp.json()
        assert sms_sender.last_code() is not None

    def test_cooldown_enforced(self, unset_env, client):
        assert _send(client).status_code == 200

        resp = _send(client)
        assert resp.status_code == 429
        assert resp.json()["error"] == "rate_limited"


class TestStartup:
    def test_production_refuses_placeholder_secret(self, production, monkeypatch):
        monkeypatch.setattr("app.config.JWT_SECRET", "dev-secret-change-me-in-production")

        with pytest.raises(RuntimeError, match="JWT_SECRET"):
            with TestClient(app):
                pass


class TestVerifyOtp:
    def test_verify_valid_otp(self, client, sms_sender):
        _send(client)

        resp = _verify(client, sms_sender.last_code())
        assert resp.status_code == 200
        data = resp.json()
        assert data["message"] == "Phone verified successfully"
        assert data["user"]["phone"] == CANONICAL_PHONE
        assert data["user"]["phone_verified"] is True
        assert data["user"]["role"] == "USER"

        cookie = resp.headers["set-cookie"]
        assert cookie.startswith("auth-token=")
        assert "HttpOnly" in cookie
        assert "SameSite=lax" in cookie
        assert "Max-Age=604800" in cookie
        assert "Secure" not in cookie

    def test_verify_wrong_otp(self, client, sms_sender):
        _send(client)
        wrong = "000000" if sms_sender.last_code() != "000000" else "111111"

        resp = _verify(client, wrong)
        assert resp.status_code == 400
        assert resp.json()["error"] == "otp_mismatch"
        assert "set-cookie" not in resp.headers

    def test_verify_missing_fields(self, client):
        resp = client.post("/auth/verify-otp", json={"phone": LOCAL_PHONE})
        assert resp.status_code == 400
        assert resp.json()["error"] == "validation_error"

        resp = client.post("/auth/verify-otp", json={"otp": "123456"})
        assert resp.status_code == 400

    def test_verify_unknown_phone(self, client):
        resp = _verify(client, "123456")
        assert resp.status_code == 400
        assert resp.json()["error"] == "unknown_phone"

    def test_verify_invalid_phone(self, client):
        resp = _verify(client, "123456", phone="1")
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_phone_format"

    def test_too_many_attempts(self, client, sms_sender):
        _send(client)
        code = sms_sender.last_code()
        wrong = "000000" if code != "000000" else "111111"

        for _ in range(3):
            assert _verify(client, wrong).status_code == 400

        resp = _verify(client, code)
        assert resp.status_code == 429
        assert resp.json()["error"] == "too_many_attempts"

    def test_otp_cannot_be_reused(self, client, sms_sender):
        _send(client)
        code = sms_sender.last_code()

        assert _verify(client, code).status_code == 200

        resp = _verify(client, code)
        assert resp.status_code == 400
        assert resp.json()["error"] in {"otp_expired", "otp_mismatch", "unknown_phone"}


class TestInternalErrors:
    def test_persistence_failure_is_generic_500(self, client, monkeypatch):
        async def broken(phone):
            raise RuntimeError("database is locked: /var/data/propertyhub.db")

        monkeypatch.setattr(db, "get_user_by_phone", broken)

        resp = _verify(client, "123456")
        assert resp.status_code == 500
        assert resp.json() == {"error": "internal_error", "message": "Internal server error"}
        assert "locked" not in resp.text


class TestLogout:
    def test_logout_clears_cookie(self, client, sms_sender):
        _send(client)
        _verify(client, sms_sender.last_code())

        resp = client.post("/auth/logout")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Logged out successfully"
        assert "Max-Age=0" in resp.headers["set-cookie"]

        assert client.get("/auth/me").status_code == 401

    def test_logout_requires_session(self, client):
        resp = client.post("/auth/logout")
        assert resp.status_code == 401


class TestMe:
    def test_get_me_after_login(self, client, sms_sender):
        _send(client)
        login = _verify(client, sms_sender.last_code())

        resp = client.get("/auth/me")
        assert resp.status_code == 200
        user = resp.json()["user"]
        assert user == login.json()["user"]

    def test_get_me_includes_avatar(self, client, sms_sender):
        _send(client)
        _verify(client, sms_sender.last_code())
        assert client.get("/auth/me").json()["user"]["avatar"] is None

        async def set_avatar():
            conn = db.get_db()
            await conn.execute(
                "UPDATE users SET avatar = ? WHERE phone = ?",
                ("https://cdn.propertyhub.mn/u/1.png", CANONICAL_PHONE),
            )
            await conn.commit()

        client.portal.call(set_avatar)

        user = client.get("/auth/me").json()["user"]
        assert user["avatar"] == "https://cdn.propertyhub.mn/u/1.png"

    def test_get_me_unauthenticated(self, client):
        resp = client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"] == "unauthenticated"

    @pytest.mark.parametrize("token", ["garbage", "a.b.c", ""])
    def test_bad_tokens_look_the_same(self, client, token):
        missing = client.get("/auth/me")
        client.cookies.set("auth-token", token)
        bad = client.get("/auth/me")

        assert bad.status_code == 401
        assert bad.json() == missing.json()

    def test_deleted_user_is_unauthenticated(self, client, sms_sender, monkeypatch):
        _send(client)
        _verify(client, sms_sender.last_code())

        async def gone(user_id):
            return None

        monkeypatch.setattr(db, "get_user", gone)
        resp = client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"] == "unauthenticated"
