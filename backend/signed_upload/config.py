"""
Application configuration using Pydantic Settings.
All environment variables are loaded here with sensible defaults.
"""
from enum import Enum
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class TimeUnit(str, Enum):
    """Units accepted for the signed URL validity window."""
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Target bucket and optional key prefix
    bucketname: str = "uploads"
    subdirectory: Optional[str] = None
    
    # Credential resource (service-account key for gcs, HMAC key for s3)
    credentials_path: str = "key.json"
    
    # Storage backend: "gcs" (native V4 signing) or "s3" (S3-compatible XML API)
    storage_provider: str = "gcs"
    s3_endpoint: str = "https://storage.googleapis.com"
    s3_region: str = "auto"  # GCS interoperability accepts "auto"
    
    # Signed URL validity window (10 min)
    signed_url_duration: int = 10
    signed_url_unit: TimeUnit = TimeUnit.MINUTES
    
    # Every object is stored with this content type, whatever was uploaded
    object_content_type: str = "text/plain"
    
    # Ingestion
    upload_chunk_size: int = 64 * 1024
    reject_partial_uploads: bool = False  # Fail instead of storing a truncated object
    
    # Environment
    environment: str = "dev"
    log_level: str = "INFO"
    service_name: str = "signed-upload-api"
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process settings."""
    return settings
