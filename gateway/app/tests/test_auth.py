"""
Unit Tests for Token Verification
=================================

Tests for gateway/app/auth/

Test Coverage:
--------------
1. Access-token verification (missing, forged, expired, no user claim)
2. Password-reset token verification and the /api/auth/verify-reset-token route

Run tests:
----------
    pytest gateway/app/tests/test_auth.py -v
"""

import pytest
from fastapi import status

from gateway.app.auth.tokens import (
    PASSWORD_RESET_TYPE,
    TokenError,
    verify_access_token,
    verify_reset_token,
)
from gateway.app.errors import GatewayError

from .conftest import make_token


# ============================================================================
# Access Tokens
# ============================================================================

class TestAccessToken:

    def test_valid_token_returns_claims(self, settings):
        token = make_token({"userId": "u-42", "userType": "provider"})

        claims = verify_access_token(f"Bearer {token}", settings)

        assert claims["userId"] == "u-42"
        assert claims["userType"] == "provider"

    def test_missing_header(self, settings):
        with pytest.raises(GatewayError) as exc_info:
            verify_access_token(None, settings)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc_info.value.message == "No token provided"

    def test_expired_token(self, settings):
        token = make_token(expires_in=-60)

        with pytest.raises(GatewayError) as exc_info:
            verify_access_token(f"Bearer {token}", settings)

        assert exc_info.value.message == "Invalid token"

    def test_token_without_user_claim(self, settings):
        token = make_token({"userId": None})

        with pytest.raises(GatewayError) as exc_info:
            verify_access_token(f"Bearer {token}", settings)

        assert exc_info.value.message == "Invalid token"

    def test_id_claim_accepted(self, settings):
        token = make_token({"userId": None, "id": "legacy-7"})

        assert verify_access_token(f"Bearer {token}", settings)["id"] == "legacy-7"


# ============================================================================
# Password Reset Tokens
# ============================================================================

class TestResetToken:

    def test_reset_token_accepted(self, settings):
        token = make_token({"type": PASSWORD_RESET_TYPE})

        claims = verify_reset_token(token, settings)

        assert claims["email"] == "jane@example.com"

    def test_wrong_type_rejected(self, settings):
        token = make_token({"type": "access"})

        with pytest.raises(TokenError, match="Invalid token type"):
            verify_reset_token(token, settings)

    def test_expired_rejected(self, settings):
        token = make_token({"type": PASSWORD_RESET_TYPE}, expires_in=-1)

        with pytest.raises(TokenError, match="Invalid or expired token"):
            verify_reset_token(token, settings)


class TestVerifyResetTokenRoute:
    """Tests for POST /api/auth/verify-reset-token"""

    def test_valid(self, client):
        token = make_token({"type": PASSWORD_RESET_TYPE, "userId": "u-9"})

        response = client.post("/api/auth/verify-reset-token", json={"token": token})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"valid": True, "userId": "u-9", "email": "jane@example.com"}

    def test_missing_token(self, client):
        response = client.post("/api/auth/verify-reset-token", json={})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"valid": False, "message": "Token is required"}

    def test_garbage_token(self, client):
        response = client.post("/api/auth/verify-reset-token", json={"token": "not-a-jwt"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"valid": False, "message": "Invalid or expired token"}

    def test_access_token_is_not_a_reset_token(self, client):
        response = client.post("/api/auth/verify-reset-token", json={"token": make_token()})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Invalid token type"

    def test_does_not_reach_backend(self, client, respx_mock):
        client.post("/api/auth/verify-reset-token", json={"token": "x"})

        assert respx_mock.calls.call_count == 0
