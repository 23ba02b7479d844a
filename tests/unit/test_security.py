"""
Tests for password hashing and access tokens
"""
from datetime import timedelta

import pytest
from jose import JWTError

from store_ratings.core import security


@pytest.mark.unit
class TestPasswordHashing:
    def test_hash_verifies(self):
        hashed = security.get_password_hash("Secret@123")
        assert hashed != "Secret@123"
        assert security.verify_password("Secret@123", hashed)

    def test_wrong_password_rejected(self):
        hashed = security.get_password_hash("Secret@123")
        assert not security.verify_password("Secret@124", hashed)

    def test_malformed_hash_rejected(self):
        assert not security.verify_password("Secret@123", "not-a-bcrypt-hash")

    def test_hashes_are_salted(self):
        assert security.get_password_hash("Secret@123") != security.get_password_hash("Secret@123")


@pytest.mark.unit
class TestAccessToken:
    def test_round_trip_claims(self):
        token = security.create_access_token({"sub": "42", "email": "a@example.com", "role": "normal_user"})
        payload = security.decode_access_token(token)
        assert payload["sub"] == "42"
        assert payload["role"] == "normal_user"
        assert "exp" in payload

    def test_expired_token_rejected(self):
        token = security.create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-10))
        with pytest.raises(JWTError):
            security.decode_access_token(token)

    def test_tampered_token_rejected(self):
        token = security.create_access_token({"sub": "1"})
        header, payload, signature = token.split(".")
        forged = ".".join([header, payload, signature[::-1]])
        with pytest.raises(JWTError):
            security.decode_access_token(forged)

    def test_garbage_rejected(self):
        with pytest.raises(JWTError):
            security.decode_access_token("not.a.token")
