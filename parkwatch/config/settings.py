from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str
    log_level: str = "INFO"
    environment: str = "dev"
    # CORS
    cors_allow_origins: str = "*"
    # S3 storage for car entry photos
    s3_bucket: str | None = None
    s3_region: str | None = None
    s3_prefix: str = ""  # e.g. "dev/" or "prod/"
    s3_public_url_base: str | None = None  # set for non-expiring URLs (CDN/public bucket)
    s3_endpoint_url: str | None = None  # MinIO and other S3-compatible stores
    car_image_url_expires: int = 604800  # presigned GET lifetime, capped at 7 days
    car_image_prefix: str = "cars/"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("database_url")
    @classmethod
    def ensure_asyncpg_scheme(cls, value: str) -> str:
        if value.startswith("postgres://"):
            return value.replace("postgres://", "postgresql+asyncpg://", 1)
        if value.startswith("postgresql://") and "+" not in value.split("://", 1)[0]:
            return value.replace("postgresql://", "postgresql+asyncpg://", 1)
        return value

    @field_validator("car_image_url_expires")
    @classmethod
    def ensure_positive_expiry(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("car_image_url_expires must be positive")
        return value

    @property
    def cors_allow_origins_list(self) -> list[str]:
        """Convert cors_allow_origins string to list"""
        return [v.strip() for v in self.cors_allow_origins.split(",") if v.strip()]

    @property
    def storage_configured(self) -> bool:
        return bool(self.s3_bucket and self.s3_region)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
