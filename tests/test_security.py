"""Tests for password hashing and self-issued tokens."""

from datetime import timedelta

from jose import jwt

from app.config.settings import settings
from app.core.security import (
    access_token_expires_in,
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
    verify_token,
)


def test_password_hash_roundtrip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


def test_access_token_payload():
    token = create_access_token("user-1", email="a@example.com", company_id="c-1", role="manager")
    payload = verify_token(token)

    assert payload["sub"] == "user-1"
    assert payload["email"] == "a@example.com"
    assert payload["companyId"] == "c-1"
    assert payload["role"] == "manager"
    assert "type" not in payload


def test_expires_in_is_seconds():
    assert access_token_expires_in() == settings.access_token_expire_minutes * 60


def test_expired_token_is_rejected():
    token = create_access_token("user-1", expires_delta=timedelta(seconds=-5))
    assert verify_token(token) is None


def test_bad_signature_is_rejected():
    token = jwt.encode({"sub": "user-1"}, "other-secret", algorithm=settings.jwt_algorithm)
    assert verify_token(token) is None


def test_refresh_token_is_not_an_access_token():
    refresh = create_refresh_token("user-1")
    assert verify_token(refresh) is None
    assert verify_token(refresh, token_type="refresh")["sub"] == "user-1"


def test_access_token_is_not_a_refresh_token():
    access = create_access_token("user-1")
    assert verify_token(access, token_type="refresh") is None


def test_token_without_subject_is_rejected():
    token = jwt.encode({"email": "a@example.com"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    assert verify_token(token) is None
