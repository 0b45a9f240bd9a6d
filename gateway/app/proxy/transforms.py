"""
Body and response transforms used by the route table.

Body transforms take the parsed inbound JSON and return what the backend
expects; response transforms take the backend's 2xx JSON and return what
the frontend expects. Either may raise GatewayError to reject the call.
"""

import re
from typing import Any, Dict

from fastapi import status

from ..errors import GatewayError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def _require_object(body: Any) -> Dict[str, Any]:
    if not isinstance(body, dict):
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Request body must be a JSON object")
    return body


# ============================================================================
# Body Transforms
# ============================================================================

def user_status_to_action(body: Any) -> Dict[str, Any]:
    """
    Translate the admin panel's generic status into the backend's vocabulary.

    Example:
        >>> user_status_to_action({"status": "suspended"})
        {'action': 'suspend', 'isActive': False, 'notes': 'Status changed to suspended via admin panel'}
    """
    body = _require_object(body)
    new_status = body.get("status")
    if not new_status or not isinstance(new_status, str):
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Status is required")

    suspended = new_status == "suspended"
    return {
        "action": "suspend" if suspended else "activate",
        "isActive": not suspended,
        "notes": f"Status changed to {new_status} via admin panel",
    }


def booking_data(body: Any) -> Any:
    """Bookings arrive wrapped as {authToken, bookingData}; the backend wants the inner object."""
    body = _require_object(body)
    if "bookingData" not in body:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Booking data is required")
    return body["bookingData"]


def google_credential(body: Any) -> Dict[str, Any]:
    body = _require_object(body)
    credential = body.get("credential")
    if not credential:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "No credential provided")
    return {"credential": credential}


def login_credentials(body: Any) -> Dict[str, Any]:
    body = _require_object(body)
    if not body.get("email") or not body.get("password"):
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Email and password are required")
    return body


def forgot_password_request(body: Any) -> Dict[str, Any]:
    body = _require_object(body)
    email = body.get("email")
    if not email:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Email is required")
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Please provide a valid email address")
    return {"email": email.lower()}


def reset_password_request(body: Any) -> Dict[str, Any]:
    body = _require_object(body)
    token = body.get("token")
    password = body.get("password")
    if not token or not password:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Token and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise GatewayError(
            status.HTTP_400_BAD_REQUEST,
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )
    return {"token": token, "password": password}


# ============================================================================
# Response Transforms
# ============================================================================

def users_listing(data: Any) -> Dict[str, Any]:
    """Unwrap {data: {users, pagination}} into the shape the admin table renders."""
    inner = data.get("data") if isinstance(data, dict) else None
    inner = inner if isinstance(inner, dict) else {}
    return {
        "users": inner.get("users") or [],
        "pagination": inner.get("pagination") or {},
    }


def admin_login(data: Any) -> Dict[str, Any]:
    """Only admins may sign in to the admin panel."""
    inner = data.get("data") if isinstance(data, dict) else None
    user = inner.get("user") if isinstance(inner, dict) else None

    if not isinstance(user, dict) or user.get("userType") != "admin":
        raise GatewayError(
            status.HTTP_403_FORBIDDEN, "Access denied. Admin privileges required."
        )

    return {"token": data.get("token"), "user": user}


def google_session(data: Any) -> Dict[str, Any]:
    data = data if isinstance(data, dict) else {}
    return {
        "success": True,
        "message": data.get("message"),
        "data": {
            "user": data.get("user"),
            "token": data.get("token"),
        },
    }
