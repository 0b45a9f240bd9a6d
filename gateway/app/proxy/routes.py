"""
Proxy Routes - Backend Request Forwarding
=========================================

Registers one FastAPI endpoint per ForwardRoute in the route table. Each
endpoint hands the request to the generic forwarder; anything the
forwarder does not turn into a response itself is converted to the
route's 500 envelope here, so no exception reaches the caller raw.
"""

import logging
from typing import Iterable

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response

from ..config import Settings
from ..dependencies import get_app_settings, get_backend_client
from ..errors import GatewayError, error_response
from .descriptor import ForwardRoute
from .forwarder import forward
from .table import ROUTE_TABLE

logger = logging.getLogger(__name__)


def make_endpoint(route: ForwardRoute):
    """Create the FastAPI endpoint function for one route descriptor."""

    async def endpoint(
        request: Request,
        backend_client: httpx.AsyncClient = Depends(get_backend_client),
        settings: Settings = Depends(get_app_settings),
    ) -> Response:
        try:
            return await forward(route, request, backend_client, settings)
        except (GatewayError, HTTPException):
            raise
        except Exception as e:
            logger.error(
                f"Unexpected error in {route.endpoint_name}: {e}",
                exc_info=True,
                extra={"path": request.url.path, "method": request.method},
            )
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, route.failure_message)

    endpoint.__name__ = route.endpoint_name
    endpoint.__doc__ = f"Forward {route.method} {route.path} to {route.target}"
    return endpoint


def build_proxy_router(routes: Iterable[ForwardRoute] = ROUTE_TABLE) -> APIRouter:
    """Build the router exposing every route of the table."""
    router = APIRouter()

    for route in routes:
        router.add_api_route(
            route.path,
            make_endpoint(route),
            methods=[route.method],
            name=route.endpoint_name,
        )

    return router


proxy_router = build_proxy_router()
