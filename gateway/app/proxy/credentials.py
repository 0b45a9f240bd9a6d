"""
Credential extraction for forwarding routes.

Resolves the credential an inbound request carries according to the
route's AuthPolicy and turns it into the headers sent to the backend.
A required credential that is absent raises GatewayError(401) before
anything is sent downstream.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, status

from ..errors import GatewayError
from .descriptor import AuthPolicy, ForwardRoute

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"
BODY_TOKEN_FIELD = "authToken"


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an "Authorization: Bearer <token>" header.

    Returns:
        The token, or None if the header is missing or not in Bearer form.
    """
    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]


def resolve_credentials(
    route: ForwardRoute,
    request: Request,
    body: Any = None,
) -> Dict[str, str]:
    """
    Build the credential headers for the backend call.

    Args:
        route: Route being forwarded
        request: Inbound request
        body: Parsed JSON body (only consulted for BODY_TOKEN routes)

    Returns:
        Headers to merge into the outbound request

    Raises:
        GatewayError: 401 when the route requires a credential and none is present
    """
    policy = route.auth
    authorization = request.headers.get("authorization")
    headers: Dict[str, str] = {}

    if policy is AuthPolicy.NONE:
        pass

    elif policy is AuthPolicy.BEARER_OPTIONAL:
        if authorization:
            headers["Authorization"] = authorization

    elif policy is AuthPolicy.BEARER_REQUIRED:
        token = extract_bearer_token(authorization)
        if not token:
            _reject(route, request)
        headers["Authorization"] = f"Bearer {token}"

    elif policy is AuthPolicy.COOKIE_REQUIRED:
        token = request.cookies.get(TOKEN_COOKIE)
        if not token:
            _reject(route, request)
        headers["Authorization"] = f"Bearer {token}"

    elif policy is AuthPolicy.BODY_TOKEN:
        token = None
        if isinstance(body, dict):
            token = body.get(BODY_TOKEN_FIELD)
        token = token or request.query_params.get(BODY_TOKEN_FIELD)
        token = token or extract_bearer_token(authorization)
        if not token:
            _reject(route, request)
        headers["Authorization"] = f"Bearer {token}"

    if route.forward_cookies:
        cookie = request.headers.get("cookie")
        if cookie:
            headers["Cookie"] = cookie

    return headers


def _reject(route: ForwardRoute, request: Request) -> None:
    logger.warning(
        "Rejected request without credentials",
        extra={"path": request.url.path, "method": request.method, "policy": route.auth.value},
    )
    raise GatewayError(status.HTTP_401_UNAUTHORIZED, route.unauthorized_message)
