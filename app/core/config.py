"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, secrets, pricing knobs, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="chocuatui",
        description="MongoDB database name"
    )
    MONGODB_TRANSACTIONS_ENABLED: bool = Field(
        default=True,
        description="Run multi-document writes in a MongoDB transaction (needs a replica set)"
    )

    # Auth
    SECRET_KEY: str = Field(
        default="change-me-in-production",
        description="Secret used to sign access tokens"
    )
    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Access token signing algorithm"
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60 * 24 * 7,
        description="Access token lifetime in minutes"
    )
    GOOGLE_CLIENT_ID: Optional[str] = Field(
        default=None,
        description="OAuth client ID that Google ID tokens must be issued for"
    )
    GOOGLE_TOKENINFO_URL: str = Field(
        default="https://oauth2.googleapis.com/tokeninfo",
        description="Google endpoint used to verify ID tokens"
    )

    # Back-office
    ADMIN_EMAIL: str = Field(
        default="admin@chocuatui.vn",
        description="Recipient of admin alert e-mails (new listings, deposits, revenue)"
    )

    # Storage
    PUBLIC_BASE_URL: str = Field(
        default="http://localhost:8000",
        description="Public base URL used to build download links for uploaded files"
    )
    MAX_UPLOAD_BYTES: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum decoded size of a single uploaded image"
    )

    # Outbound HTTP
    GEOCODING_API_URL: str = Field(
        default="https://api.bigdatacloud.net/data/reverse-geocode-client",
        description="Reverse geocoding endpoint"
    )
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Timeout for outbound HTTP calls"
    )
    LINK_PREVIEW_PROXY_URL: str = Field(
        default="https://api.allorigins.win/get",
        description="Fallback fetch proxy for link previews; returns JSON {contents}"
    )
    SCREENSHOT_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        description="Page load timeout for link screenshots"
    )

    # Marketplace behaviour
    SEARCH_SCAN_LIMIT: int = Field(
        default=500,
        description="Maximum listings scanned by a free-text search"
    )
    NOTIFICATION_FEED_LIMIT: int = Field(
        default=50,
        description="Number of notifications returned in a user's feed"
    )
    SUBSCRIPTION_DAYS: int = Field(
        default=30,
        description="Validity of a purchased subscription tier"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str, info: ValidationInfo) -> str:
        """Ensure secret key is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == "change-me-in-production":
            raise ValueError("SECRET_KEY must be changed in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not settings.PUBLIC_BASE_URL:
        errors.append("PUBLIC_BASE_URL is required")

    if settings.MAX_UPLOAD_BYTES <= 0:
        errors.append("MAX_UPLOAD_BYTES must be positive")

    # Production-specific validations
    if settings.is_production:
        if not settings.GOOGLE_CLIENT_ID:
            errors.append("GOOGLE_CLIENT_ID is required in production")
        if "*" in settings.CORS_ORIGINS:
            errors.append("CORS_ORIGINS must be explicit in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
