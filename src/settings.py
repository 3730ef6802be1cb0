"""
Application settings for the measure importer.

- Defaults are intended for development use.
- For testing, override via pyproject.toml [tool.pytest.ini_options].
- For production, set environment variables to override fields.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Measure importer configuration."""

    # Category dispatch
    strict_categories: bool = Field(
        default=False,
        description=(
            "Raise ConfigurationError for category names outside the "
            "standard set instead of dropping them"
        ),
    )

    # Document loading
    max_document_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum size of a C32 document accepted by the loader",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
