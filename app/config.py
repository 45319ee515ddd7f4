"""
Configuration management for the FastAPI application.
Uses Pydantic Settings for environment variable management.
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_TITLE: str = "Latent Library Admin API"
    API_VERSION: str = "0.1.0"
    API_DESCRIPTION: str = "Backend API for the media library admin console"

    # CORS Configuration
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    # Empty value falls back to an in-memory SQLite database
    DATABASE_URL: str = ""

    # Pagination
    PAGE_SIZE: int = 48
    MAX_PAGE_SIZE: int = 200

    # Object storage (S3)
    S3_DEFAULT_BUCKET: str = "latent-library"
    SIGNED_URL_TTL_SECONDS: int = 900
    AWS_REGION: str = ""
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""

    # Upper bound on concurrent URL resolutions within one page
    MAX_CONCURRENT_SIGNING: int = 200

    # CDN Configuration
    # One of "bunny", "cloudinary", "cloudfront" or "" (no CDN, signed URLs only).
    # Left empty, a CLOUDFRONT_DOMAIN selects CloudFront.
    CDN_PROVIDER: str = ""
    CDN_HOSTNAME: str = "latent-library.b-cdn.net"
    CLOUDFRONT_DOMAIN: str = ""
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    # Reserved collection backing the "save" shortcut
    SAVED_COLLECTION_NAME: str = "Saved"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Global settings instance
settings = Settings()
