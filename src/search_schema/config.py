"""Centralized configuration for search-schema using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    All values are validated at startup; a bad value fails before any request
    reaches Solr.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Solr connection
    solr_url: str = Field(default="http://localhost:8983/solr", description="Base URL of the Solr server")
    solr_collection: str = Field(default="collection1", min_length=1, description="Collection or core name")

    # HTTP/Request settings
    http_timeout: float = Field(default=30.0, gt=0, description="Schema request timeout in seconds")
    connect_timeout: float = Field(default=10.0, gt=0, description="Connection timeout in seconds")
    http_retries: int = Field(
        default=1, ge=0, le=3, description="Connection retries at the transport level (no retries above it)"
    )

    # Expected schema
    metadata_catalog_path: Path | None = Field(
        default=None, description="JSON file holding the metadata field catalog"
    )
    copy_field_max_chars: int = Field(default=3000, ge=1, description="maxChars for generated full-text copy fields")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=False, description="Emit structured JSON logs")

    @field_validator("solr_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("SOLR_URL must start with http:// or https://")
        return value.rstrip("/")

    @property
    def schema_url(self) -> str:
        return f"{self.solr_url}/{self.solr_collection}/schema"
