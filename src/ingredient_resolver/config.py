"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str | None = None
    supabase_service_key: str | None = None
    corpus_snapshot_path: str | None = None
    fdc_api_key: str | None = None
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_rate_limit_per_hour: float = Field(default=1000, gt=0)
    enable_branded_search: bool = False
    fdc_timeout_seconds: float = Field(default=15, gt=0)
    fdc_max_wait_seconds: float = Field(default=5, ge=0)
    fdc_cache_size: int = Field(default=200, ge=1)
    fdc_cache_ttl_seconds: int = Field(default=86400, ge=1)
    candidate_limit: int = Field(default=50, ge=1)
    external_min_local: int = Field(default=3, ge=0)
    external_page_size: int = Field(default=10, ge=1)
    low_confidence_threshold: float = Field(default=0.5, ge=0, le=1)
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)
