"""
Shared fixtures for gateway tests.

Settings are built explicitly (never from the environment or .env) and
the backend and image host are stubbed with respx at the httpx layer.
"""

import time
from typing import Any, Dict, Optional

import jwt
import pytest
from fastapi.testclient import TestClient

from gateway.app.config import Settings
from gateway.app.main import create_app

BACKEND_URL = "http://backend.test"
CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/demo/image/upload"
JWT_SECRET = "test-jwt-secret-0123456789abcdef-0123"


def make_token(
    claims: Optional[Dict[str, Any]] = None,
    secret: str = JWT_SECRET,
    expires_in: int = 3600,
) -> str:
    """Sign a token the way the backend does."""
    payload = {"userId": "user-123", "email": "jane@example.com"}
    payload.update(claims or {})
    payload["exp"] = int(time.time()) + expires_in
    return jwt.encode(payload, secret, algorithm="HS256")


def build_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "BACKEND_API_URL": BACKEND_URL,
        "JWT_SECRET": JWT_SECRET,
        "CLOUDINARY_CLOUD_NAME": "demo",
        "CLOUDINARY_API_KEY": "123456789012345",
        "CLOUDINARY_API_SECRET": "cloudinary-test-secret",
        "LOG_LEVEL": "DEBUG",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return build_settings(UPLOADS_DIR=str(tmp_path / "uploads" / "documents"))


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client with the lifespan running (HTTP clients and stores created)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def access_token() -> str:
    return make_token()


@pytest.fixture
def auth_headers(access_token) -> Dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}
