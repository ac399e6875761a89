"""Tests for admin token handling."""
from datetime import timedelta

import pytest
from fastapi import HTTPException

from common.auth import create_access_token, verify_token
from modules.dashboard.config import AuthConfig


@pytest.fixture
def auth():
    return AuthConfig(secret_key="unit-test-secret")


class TestTokens:

    def test_round_trip(self, auth):
        token = create_access_token("staff@example.org", auth)
        data = verify_token(token, auth)
        assert data.email == "staff@example.org"
        assert data.admin is True

    def test_non_admin_token(self, auth):
        token = create_access_token("temp@example.org", auth, admin=False)
        assert verify_token(token, auth).admin is False

    def test_expired(self, auth):
        token = create_access_token("staff@example.org", auth, expires_delta=timedelta(minutes=-1))
        with pytest.raises(HTTPException) as exc:
            verify_token(token, auth)
        assert exc.value.status_code == 401

    def test_wrong_secret(self, auth):
        token = create_access_token("staff@example.org", AuthConfig(secret_key="other"))
        with pytest.raises(HTTPException) as exc:
            verify_token(token, auth)
        assert exc.value.status_code == 401

    def test_garbage(self, auth):
        with pytest.raises(HTTPException):
            verify_token("not-a-jwt", auth)
