"""
Authentication routes answered by the gateway itself.

Everything else under /api/auth is forwarded through the route table.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import Settings
from ..dependencies import get_app_settings
from .tokens import TokenError, verify_reset_token

logger = logging.getLogger(__name__)

auth_router = APIRouter(tags=["authentication"])


class ResetTokenCheck(BaseModel):
    token: Optional[str] = None


@auth_router.post("/verify-reset-token")
async def verify_reset_token_route(
    payload: ResetTokenCheck,
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """
    Check a password-reset token before the reset form is shown.

    Returns:
        200 {valid: true, userId, email} or 400 {valid: false, message}
    """
    if not payload.token:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"valid": False, "message": "Token is required"},
        )

    try:
        claims = verify_reset_token(payload.token, settings)
    except TokenError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"valid": False, "message": str(e)},
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"valid": True, "userId": claims.get("userId"), "email": claims.get("email")},
    )
