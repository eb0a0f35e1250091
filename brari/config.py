"""
Configuration management for the Brari Backend.
Handles environment variables and application settings.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from environment
    )

    # API Configuration
    app_name: str = Field(default="Brari Backend")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)

    # Google AI Configuration
    google_api_key: Optional[str] = Field(default=None)
    google_chat_model: str = Field(default="gemini-2.0-flash")
    google_title_model: str = Field(default="gemini-2.0-flash")
    google_temperature: float = Field(default=0.1)

    # Redis Configuration
    redis_url: str = Field(default="redis://localhost:6379/0")

    # Ingestion Configuration
    enrich_password: Optional[str] = Field(default=None)
    title_sample_chars: int = Field(default=2000, ge=1)
    ingest_timeout_seconds: float = Field(default=300.0, gt=0)

    # Chat Configuration
    max_context_chars: Optional[int] = Field(default=None, ge=0)
    stream_delay_ms: int = Field(default=20, ge=0)
    cost_model: str = Field(default="gemini-2.0-flash")
    chat_timeout_seconds: float = Field(default=60.0, gt=0)

    # File Processing Configuration
    max_file_size_mb: int = Field(default=50)
    allowed_file_types: List[str] = Field(default=["pdf"])


@lru_cache
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


def validate_required_settings(settings: Settings) -> None:
    """Validate that all required settings are present."""
    required_settings = [
        ("google_api_key", settings.google_api_key),
        ("enrich_password", settings.enrich_password),
    ]

    missing_settings = []
    for setting_name, setting_value in required_settings:
        if not setting_value:
            missing_settings.append(setting_name)

    if missing_settings:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing_settings)}. "
            "Please check your .env file."
        )
