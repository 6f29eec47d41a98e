"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

# No authentication yet: every meal belongs to this user.
DEFAULT_USER_ID = "user-1"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openfoodfacts_base_url: str = "https://world.openfoodfacts.org"
    lookup_ttl_seconds: int = Field(default=86400, ge=0)
    default_user_id: str = DEFAULT_USER_ID
    timezone: str = "UTC"
    recurrence_horizon_days: int = Field(default=30, ge=0)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
