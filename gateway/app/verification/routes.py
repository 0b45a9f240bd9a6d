"""
Verification Code Routes
========================

Endpoints:
----------
- POST /api/auth/send-verification:   issue a code for an email or phone
- POST /api/auth/resend-verification: issue a fresh code under an existing token
- POST /api/auth/verify-code:         check a code and consume its token
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from ..errors import GatewayError
from ..proxy.transforms import EMAIL_PATTERN
from .phone import normalize_phone_number
from .sender import CodeSender, DeliveryError
from .store import Channel, VerificationStore, generate_code, generate_token

logger = logging.getLogger(__name__)

verification_router = APIRouter(tags=["verification"])


# ============================================================================
# Request Models
# ============================================================================

class SendVerificationRequest(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None
    type: Channel = Field(default=Channel.EMAIL)


class ResendVerificationRequest(BaseModel):
    token: Optional[str] = None


class VerifyCodeRequest(BaseModel):
    token: Optional[str] = None
    code: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None


# ============================================================================
# Dependencies
# ============================================================================

def get_verification_store(request: Request) -> VerificationStore:
    return request.app.state.verification_store


def get_code_sender(request: Request) -> CodeSender:
    return request.app.state.code_sender


def _channel_label(channel: Channel) -> str:
    return "email" if channel is Channel.EMAIL else "phone"


async def _deliver(sender: CodeSender, channel: Channel, contact: str, code: str,
                   name: Optional[str] = None) -> None:
    try:
        await sender.send_code(channel, contact, code, name)
    except DeliveryError as e:
        logger.error(f"Verification delivery failed: {e}", extra={"channel": channel.value})
        raise GatewayError(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or "Failed to send verification code")


# ============================================================================
# Endpoints
# ============================================================================

@verification_router.post("/send-verification")
async def send_verification(
    payload: SendVerificationRequest,
    store: VerificationStore = Depends(get_verification_store),
    sender: CodeSender = Depends(get_code_sender),
) -> Dict[str, Any]:
    """Issue a verification code and return the token the client verifies against."""
    if payload.type is Channel.EMAIL:
        if not payload.email:
            raise GatewayError(status.HTTP_400_BAD_REQUEST, "Email is required for email verification")
        if not EMAIL_PATTERN.match(payload.email):
            raise GatewayError(status.HTTP_400_BAD_REQUEST, "Please provide a valid email address")
        contact = payload.email
    else:
        if not payload.phone:
            raise GatewayError(
                status.HTTP_400_BAD_REQUEST, "Phone number is required for SMS verification"
            )
        contact = normalize_phone_number(payload.phone)
        if contact is None:
            raise GatewayError(
                status.HTTP_400_BAD_REQUEST,
                "Invalid phone number format. Please use a valid Kenyan number.",
            )

    code = generate_code()
    token = generate_token()
    await store.store(token, code, payload.type, contact)
    await _deliver(sender, payload.type, contact, code, payload.name)

    return {
        "success": True,
        "message": f"Verification code sent to your {_channel_label(payload.type)}",
        "token": token,
        "expiresIn": store.ttl_seconds,
    }


@verification_router.post("/resend-verification")
async def resend_verification(
    payload: ResendVerificationRequest,
    store: VerificationStore = Depends(get_verification_store),
    sender: CodeSender = Depends(get_code_sender),
) -> Dict[str, Any]:
    if not payload.token:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Verification token is required")

    record = await store.details(payload.token)
    if record is None:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Invalid or expired verification session")

    code = generate_code()
    await store.store(payload.token, code, record.channel, record.contact)
    await _deliver(sender, record.channel, record.contact, code)

    return {
        "success": True,
        "message": f"New verification code sent to your {_channel_label(record.channel)}",
        "expiresIn": store.ttl_seconds,
    }


@verification_router.post("/verify-code")
async def verify_code(
    payload: VerifyCodeRequest,
    store: VerificationStore = Depends(get_verification_store),
    sender: CodeSender = Depends(get_code_sender),
) -> Dict[str, Any]:
    if not payload.token or not payload.code:
        raise GatewayError(
            status.HTTP_400_BAD_REQUEST, "Token and verification code are required"
        )

    result = await store.verify(payload.token, payload.code)
    if not result.success:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, result.message)

    name = payload.name or "User"

    # Welcome messages are best-effort; verification already succeeded
    try:
        if payload.email:
            await sender.send_welcome(Channel.EMAIL, payload.email, name)
        if payload.phone:
            await sender.send_welcome(Channel.SMS, payload.phone, name)
    except DeliveryError as e:
        logger.warning(f"Welcome message failed: {e}")

    return {
        "success": True,
        "message": "Verification successful! Welcome to Solutil!",
        "verified": True,
        "contact": result.contact,
    }
