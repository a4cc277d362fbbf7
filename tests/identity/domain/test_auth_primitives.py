"""Password hashing and access tokens."""

from datetime import timedelta

import pytest
from identity.auth.passwords import hash_password, verify_password
from identity.auth.tokens import InvalidTokenError, create_access_token, decode_access_token
from protean.exceptions import ValidationError


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("matkhau123")
        assert hashed != "matkhau123"
        assert verify_password("matkhau123", hashed) is True
        assert verify_password("wrong-pass", hashed) is False

    def test_hashes_are_salted(self):
        assert hash_password("matkhau123") != hash_password("matkhau123")

    def test_too_short(self):
        with pytest.raises(ValidationError):
            hash_password("12345")

    def test_missing_inputs_never_verify(self):
        assert verify_password("", "$2b$12$x") is False
        assert verify_password("matkhau123", "") is False


class TestTokens:
    def test_round_trip_claims(self):
        claims = decode_access_token(create_access_token("user-1", "admin"))
        assert claims.user_id == "user-1"
        assert claims.is_admin is True

    def test_expired(self):
        token = create_access_token("user-1", "user", expires_delta=timedelta(seconds=-1))
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_wrong_key(self, monkeypatch):
        token = create_access_token("user-1", "user")

        from shared.settings import get_settings

        monkeypatch.setenv("FURNISHOP_JWT_SECRET_KEY", "another-secret")
        get_settings.cache_clear()

        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_garbage(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("not.a.token")
