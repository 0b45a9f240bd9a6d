"""
Generic Request Forwarder
=========================

Executes one ForwardRoute against the backend API.

Flow:
-----
1. Resolve the credential (401 short-circuit, nothing sent downstream)
2. Parse the inbound JSON body when the route takes one (400 if malformed)
3. Apply the route's body transform
4. Fill the backend path template from the inbound path parameters
5. Issue exactly one backend call with the credential and Content-Type
6. Transport failure: log, then serve the fallback or a 500 envelope
7. Non-2xx: relay the backend status (any 5xx collapses to 500) with its
   message or the route default
8. 2xx: binary passthrough for non-JSON documents, otherwise the
   transformed JSON with the backend's status code

No retries and no backoff: every call is fire-once.
"""

import logging
from typing import Any, List, Optional, Tuple

import httpx
from fastapi import Request, status
from fastapi.responses import JSONResponse, Response

from ..config import Settings
from ..errors import GatewayError, error_response
from .credentials import BODY_TOKEN_FIELD, resolve_credentials
from .descriptor import AuthPolicy, BackendErrorPolicy, BodyMode, ForwardRoute

logger = logging.getLogger(__name__)

_METHODS_WITH_BODY = {"POST", "PUT", "PATCH"}


async def read_json_body(request: Request, required: bool = True) -> Any:
    """
    Parse the inbound JSON body.

    Args:
        request: Inbound request
        required: When False an empty body yields None instead of a 400

    Raises:
        GatewayError: 400 if the body is missing (and required) or not valid JSON
    """
    raw = await request.body()
    if not raw.strip():
        if required:
            raise GatewayError(status.HTTP_400_BAD_REQUEST, "Request body is required")
        return None

    try:
        return await request.json()
    except ValueError:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Invalid JSON body")


def build_query(route: ForwardRoute, request: Request) -> List[Tuple[str, str]]:
    """Assemble the outbound query string: fixed params, forwarded params, defaults."""
    params: List[Tuple[str, str]] = list(route.fixed_query.items())

    if route.forward_query or route.query_defaults:
        for key, value in request.query_params.multi_items():
            if key == BODY_TOKEN_FIELD:
                continue
            if route.forward_query or key in route.query_defaults:
                params.append((key, value))

    present = {key for key, _ in params}
    for key, value in route.query_defaults.items():
        if key not in present:
            params.append((key, value))

    return params


def backend_message(response: httpx.Response) -> Optional[str]:
    """Pull the human-readable message out of a backend error body, if any."""
    try:
        data = response.json()
    except ValueError:
        return None

    if isinstance(data, dict):
        for key in ("message", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def serve_fallback(route: ForwardRoute, settings: Settings) -> Optional[JSONResponse]:
    """Return the route's fallback payload if its policy and the settings allow it."""
    if route.on_backend_error is not BackendErrorPolicy.SERVE_FALLBACK:
        return None
    if not settings.SERVE_FALLBACK_DATA:
        return None

    logger.warning(
        "Backend unavailable, serving fallback data",
        extra={"route": route.endpoint_name},
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content=route.fallback())


async def forward(
    route: ForwardRoute,
    request: Request,
    client: httpx.AsyncClient,
    settings: Settings,
) -> Response:
    """
    Forward one inbound request according to its route descriptor.

    Args:
        route: Descriptor of the inbound endpoint
        request: Inbound request
        client: HTTP client bound to the backend base URL
        settings: Application settings

    Returns:
        Response for the caller (JSON envelope, relayed JSON or relayed bytes)

    Raises:
        GatewayError: Credential, input or transform failures
    """
    inbound_body: Any = None
    takes_body = request.method in _METHODS_WITH_BODY

    # body-token routes need the body before the credential can be resolved;
    # a missing credential still wins over a missing body
    if route.auth is AuthPolicy.BODY_TOKEN and takes_body:
        inbound_body = await read_json_body(request, required=False)
        headers = resolve_credentials(route, request, inbound_body)
        if inbound_body is None and route.body is BodyMode.JSON:
            raise GatewayError(status.HTTP_400_BAD_REQUEST, "Request body is required")
    else:
        headers = resolve_credentials(route, request)
        if route.body is BodyMode.JSON and takes_body:
            inbound_body = await read_json_body(request)

    payload: Any = None
    if route.body is BodyMode.JSON:
        payload = inbound_body
        if route.auth is AuthPolicy.BODY_TOKEN and isinstance(payload, dict):
            payload = {k: v for k, v in payload.items() if k != BODY_TOKEN_FIELD}
        if route.body_transform is not None:
            payload = route.body_transform(payload)

    target = route.resolve_target(dict(request.path_params))
    params = build_query(route, request)
    headers["Content-Type"] = "application/json"

    logger.info(
        "Forwarding request to backend",
        extra={"route": route.endpoint_name, "method": route.method, "target": target},
    )

    try:
        response = await client.request(
            route.method,
            target,
            params=params or None,
            json=payload,
            headers=headers,
        )
    except httpx.HTTPError as e:
        logger.error(
            f"Backend request failed: {e}",
            extra={"route": route.endpoint_name, "exception_type": type(e).__name__},
        )
        fallback = serve_fallback(route, settings)
        if fallback is not None:
            return fallback
        raise GatewayError(status.HTTP_500_INTERNAL_SERVER_ERROR, route.failure_message)

    if response.status_code >= 500:
        fallback = serve_fallback(route, settings)
        if fallback is not None:
            return fallback

    if not response.is_success:
        logger.warning(
            f"Backend returned {response.status_code}",
            extra={"route": route.endpoint_name, "status_code": response.status_code},
        )
        message = backend_message(response) or route.error_message
        # any backend 5xx surfaces as a plain 500
        code = response.status_code
        if code >= 500:
            code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return error_response(code, message)

    return relay_success(route, response)


def relay_success(route: ForwardRoute, response: httpx.Response) -> Response:
    """Turn a 2xx backend response into the caller's response."""
    content_type = response.headers.get("content-type", "")

    if route.binary_passthrough and "application/json" not in content_type:
        headers = {}
        disposition = response.headers.get("content-disposition")
        if disposition:
            headers["Content-Disposition"] = disposition
        return Response(
            content=response.content,
            status_code=response.status_code,
            media_type=content_type or "application/octet-stream",
            headers=headers,
        )

    if not response.content:
        if route.response_transform is not None:
            # gating transforms must still see (and reject) an empty body
            route.response_transform(None)
            logger.error(
                "Backend returned an empty body where one was expected",
                extra={"route": route.endpoint_name},
            )
            raise GatewayError(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Backend returned invalid JSON response",
            )
        return Response(status_code=response.status_code)

    try:
        data = response.json()
    except ValueError:
        logger.error(
            "Backend returned invalid JSON response",
            extra={"route": route.endpoint_name, "content_type": content_type},
        )
        raise GatewayError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Backend returned invalid JSON response",
        )

    if route.response_transform is not None:
        data = route.response_transform(data)

    relayed = JSONResponse(status_code=response.status_code or status.HTTP_200_OK, content=data)

    if route.relay_set_cookie:
        for cookie in response.headers.get_list("set-cookie"):
            relayed.headers.append("set-cookie", cookie)

    return relayed
