"""Environment-based configuration for facebox."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from FACEBOX_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FACEBOX_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Authentication (None = disabled)
    api_key: str | None = None

    # Concurrency
    max_concurrent: int = Field(default=2, ge=1)
    max_queue_depth: int = Field(default=8, ge=0)
    queue_timeout: float = Field(default=5.0, gt=0)

    # Input limits
    max_image_pixels: int = Field(default=16_777_216, ge=1)
    max_file_size: int = Field(default=10_485_760, ge=1)

    # Output encoding
    output_format: Literal["JPEG", "PNG"] = "JPEG"
    jpeg_quality: int = Field(default=85, ge=1, le=95)
    include_crops: bool = True

    # Annotation
    label_font_size: int = Field(default=20, ge=1)

    # Placeholder detector
    min_face_dimension: int = Field(default=200, ge=0)
    confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
