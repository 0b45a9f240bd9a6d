"""
FastAPI dependencies for shared resources held on app.state.
"""

import httpx
from fastapi import HTTPException, Request, status

from .config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_backend_client(request: Request) -> httpx.AsyncClient:
    """
    Dependency to get the backend HTTP client from app state.

    Raises:
        HTTPException: 503 if the lifespan has not created the client
    """
    client = getattr(request.app.state, "backend_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Backend client not available",
        )
    return client


def get_storage_client(request: Request) -> httpx.AsyncClient:
    client = getattr(request.app.state, "storage_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage client not available",
        )
    return client
