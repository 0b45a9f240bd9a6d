"""
Configuration module for the Marketplace Gateway.

This module uses Pydantic Settings to load and validate environment variables
for backend communication, token verification, object storage, local document
uploads and the verification-code flow.

Secrets and the backend URL have no defaults: the service refuses to start
until they are supplied. Environment variables are loaded from .env file or
system environment.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # =========================================================================
    # Backend API
    # =========================================================================

    BACKEND_API_URL: HttpUrl = Field(
        ...,
        validation_alias=AliasChoices("BACKEND_API_URL", "NEXT_PUBLIC_API_URL"),
        description="Backend API base URL (e.g., http://localhost:5000)",
    )

    # =========================================================================
    # Token Verification
    # =========================================================================

    JWT_SECRET: str = Field(
        ...,
        description="Secret shared with the backend for verifying access and reset tokens",
        min_length=32,
    )

    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm used by the backend",
    )

    # =========================================================================
    # Object Storage (Cloudinary)
    # =========================================================================

    CLOUDINARY_CLOUD_NAME: str = Field(..., min_length=1)
    CLOUDINARY_API_KEY: str = Field(..., min_length=1)
    CLOUDINARY_API_SECRET: str = Field(..., min_length=1)

    CLOUDINARY_API_BASE: str = Field(
        default="https://api.cloudinary.com/v1_1",
        description="Cloudinary upload API root",
    )

    IMAGE_UPLOAD_FOLDER: str = Field(
        default="solutil/services",
        description="Folder that service images are uploaded into",
    )

    # =========================================================================
    # Local Document Uploads
    # =========================================================================

    UPLOADS_DIR: str = Field(
        default="public/uploads/documents",
        description="Directory documents are written to",
    )

    UPLOADS_URL_PREFIX: str = Field(
        default="/uploads/documents",
        description="Public URL prefix under which UPLOADS_DIR is served",
    )

    MAX_UPLOAD_BYTES: int = Field(
        default=5 * 1024 * 1024,
        description="Upper bound for a single uploaded file",
        ge=1,
    )

    # =========================================================================
    # Degradation Policy
    # =========================================================================

    SERVE_FALLBACK_DATA: bool = Field(
        default=True,
        description="Allow routes declared with a fallback to serve it when the backend fails",
    )

    # =========================================================================
    # Verification Codes
    # =========================================================================

    VERIFICATION_CODE_TTL_MINUTES: int = Field(default=15, ge=1, le=1440)
    VERIFICATION_MAX_ATTEMPTS: int = Field(default=3, ge=1, le=10)
    VERIFICATION_CLEANUP_SECONDS: int = Field(default=300, ge=10)

    # =========================================================================
    # Gateway Server Configuration
    # =========================================================================

    GATEWAY_HOST: str = Field(default="0.0.0.0")
    GATEWAY_PORT: int = Field(default=3000, ge=1, le=65535)

    ALLOWED_ORIGINS: Optional[str] = Field(
        None,
        description="Comma-separated list of allowed CORS origins (leave empty for no CORS)",
    )

    LOG_LEVEL: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parse and return ALLOWED_ORIGINS as a list.

        Returns:
            List of allowed origin URLs, or empty list if not configured.
        """
        if not self.ALLOWED_ORIGINS:
            return []

        return [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

    @property
    def backend_api_url_str(self) -> str:
        """Backend URL as string without trailing slash."""
        return str(self.BACKEND_API_URL).rstrip("/")

    @property
    def cloudinary_upload_url(self) -> str:
        return f"{self.CLOUDINARY_API_BASE.rstrip('/')}/{self.CLOUDINARY_CLOUD_NAME}/image/upload"

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """
        Validate JWT algorithm is one of the supported HMAC algorithms.

        Raises:
            ValueError: If algorithm is not supported
        """
        allowed_algorithms = ["HS256", "HS384", "HS512"]

        if v not in allowed_algorithms:
            raise ValueError(
                f"JWT algorithm must be one of {allowed_algorithms}, got: {v}"
            )

        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    This function is cached so that the settings are loaded only once
    during the application lifecycle.

    Returns:
        Settings instance with all configuration loaded and validated.

    Raises:
        ValidationError: If required environment variables are missing
                        or invalid.
    """
    return Settings()


def validate_configuration(settings: Settings) -> dict:
    """
    Validate critical configuration settings and return a status report.

    Called during application startup; errors are logged, warnings are
    informational.

    Example:
        >>> status = validate_configuration(get_settings())
        >>> if not status["valid"]:
        ...     print(status["errors"])
    """
    errors = []
    warnings = []

    if len(settings.JWT_SECRET) < 32:
        errors.append("JWT_SECRET is too short (minimum 32 characters)")

    backend = settings.backend_api_url_str
    if "localhost" in backend or "127.0.0.1" in backend:
        warnings.append("Backend URL points to localhost (may cause issues in containers)")

    if settings.SERVE_FALLBACK_DATA:
        warnings.append("SERVE_FALLBACK_DATA is enabled: listing routes mask backend outages")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "backend_url": backend,
    }
