"""
Token Verification
==================

Verifies tokens issued by the backend API with the shared signing secret.
The gateway never issues tokens itself.

Two kinds of token are checked here:
- access tokens carried as "Authorization: Bearer <token>" (must name a user)
- password-reset tokens (must carry type == "password-reset")
"""

import logging
from typing import Any, Dict, Optional

import jwt
from fastapi import status
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from ..config import Settings
from ..errors import GatewayError
from ..proxy.credentials import extract_bearer_token

logger = logging.getLogger(__name__)

PASSWORD_RESET_TYPE = "password-reset"


class TokenError(Exception):
    """Raised when a token fails verification."""


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    """
    Verify signature and expiry of a backend-issued JWT.

    Args:
        token: Encoded JWT
        settings: Application settings holding the signing secret

    Returns:
        Decoded claims

    Raises:
        TokenError: If the token is expired, malformed or wrongly signed
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_signature": True, "verify_exp": True},
        )
    except ExpiredSignatureError:
        logger.warning("JWT token expired")
        raise TokenError("Token has expired")
    except InvalidTokenError as e:
        logger.warning(f"Invalid JWT token: {e}")
        raise TokenError("Invalid token")


def user_id_from_claims(claims: Dict[str, Any]) -> Optional[str]:
    user_id = claims.get("userId") or claims.get("id")
    return str(user_id) if user_id else None


def verify_access_token(authorization: Optional[str], settings: Settings) -> Dict[str, Any]:
    """
    Verify the bearer token of a request that must name a user.

    Raises:
        GatewayError: 401 "No token provided" without a bearer token,
                      401 "Invalid token" if verification fails or no user claim
    """
    token = extract_bearer_token(authorization)
    if not token:
        raise GatewayError(status.HTTP_401_UNAUTHORIZED, "No token provided")

    try:
        claims = decode_token(token, settings)
    except TokenError:
        raise GatewayError(status.HTTP_401_UNAUTHORIZED, "Invalid token")

    if not user_id_from_claims(claims):
        raise GatewayError(status.HTTP_401_UNAUTHORIZED, "Invalid token")

    return claims


def verify_reset_token(token: str, settings: Settings) -> Dict[str, Any]:
    """
    Verify a password-reset token.

    Raises:
        TokenError: "Invalid or expired token" on signature/expiry failure,
                    "Invalid token type" if the token is not a reset token
    """
    try:
        claims = decode_token(token, settings)
    except TokenError:
        raise TokenError("Invalid or expired token")

    if claims.get("type") != PASSWORD_RESET_TYPE:
        raise TokenError("Invalid token type")

    return claims
