"""Runtime configuration for the Maven deploy stream."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration values mapped from ``MAVEN_DEPLOY_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MAVEN_DEPLOY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Maven command line
    mvn_executable: str = Field("mvn")
    mvn_settings_file: Optional[str] = Field(None)
    mvn_timeout: int = Field(600, description="Seconds before a mvn call is abandoned; 0 disables")

    # Artifact defaults
    default_version: Optional[str] = Field(None)

    # Staging
    staging_dir: Optional[str] = Field(None)

    # Post-deploy verification
    http_timeout: float = Field(30.0)
    http_username: Optional[str] = Field(None)
    http_password: Optional[str] = Field(None)


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
