# =============================================================================
# tests/test_auth.py - JWT Verification Tests
# =============================================================================
# Tokens are signed locally with the HS256 test secret from conftest.
# =============================================================================

import time
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from jose import jwt

from app.auth.dependencies import decode_access_token
from app.config import settings
from tests.factories import USER_ID


def make_token(**overrides):
    now = int(time.time())
    claims = {
        "sub": USER_ID,
        "email": "rivka@example.com",
        "aud": "authenticated",
        "role": "authenticated",
        "iat": now,
        "exp": now + 3600,
    }
    claims.update(overrides)
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


class TestDecodeAccessToken:
    """Test Supabase token verification."""

    def test_valid_token(self):
        user = decode_access_token(make_token())

        assert str(user.id) == USER_ID
        assert user.email == "rivka@example.com"

    def test_expired_token(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(make_token(exp=int(time.time()) - 60))

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_audience(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(make_token(aud="anon"))

        assert exc_info.value.status_code == 401

    def test_wrong_secret(self):
        token = jwt.encode({"sub": USER_ID, "aud": "authenticated"}, "another-secret", algorithm="HS256")

        with pytest.raises(HTTPException):
            decode_access_token(token)

    def test_malformed_user_id(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(make_token(sub="not-a-uuid"))

        assert "malformed" in exc_info.value.detail

    def test_garbage_token(self):
        with pytest.raises(HTTPException):
            decode_access_token("not.a.token")

    def test_hs256_without_secret(self, monkeypatch):
        token = make_token()
        monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", "")

        with pytest.raises(HTTPException):
            decode_access_token(token)

    def test_unknown_kid_rejected(self):
        token = jwt.encode(
            {"sub": USER_ID, "aud": "authenticated"},
            settings.SUPABASE_JWT_SECRET,
            algorithm="HS256",
            headers={"alg": "ES256", "kid": "missing"},
        )

        with patch("app.auth.dependencies._fetch_jwks", return_value={"keys": []}):
            with pytest.raises(HTTPException):
                decode_access_token(token)


class TestAuthModule:
    """Test the auth package surface."""

    def test_exports(self):
        import app.auth

        assert sorted(app.auth.__all__) == ["AuthUser", "UserResponse", "decode_access_token", "get_current_user"]
