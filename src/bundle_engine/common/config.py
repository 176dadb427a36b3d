"""Bundle-Engine configuration via pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BundleSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BUNDLE_")

    environment: str = "development"

    # API
    api_title: str = "Bundle-Engine"
    api_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:8081", "http://localhost:19006"]

    # Logging
    log_level: str = "INFO"

    # Progress defaults
    low_balance_ratio: float = Field(default=0.8, gt=0, le=1)
    default_bundle_title: str = "Current bundle"


@lru_cache
def get_settings() -> BundleSettings:
    return BundleSettings()
