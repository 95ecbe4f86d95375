"""
mediavault.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration shared by the API, auth and ingestion layers.
    Defaults are safe for local dev.
    """

    model_config = SettingsConfigDict(env_prefix="MEDIAVAULT_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and dev routes.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "mediavault"
    log_level: str = "INFO"
    # JSON lines by default; console rendering is easier to read in a terminal.
    log_json: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 4000
    api_prefix: str = "/api"

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "mediavault"
    jwt_audience: str = "mediavault-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    jwt_ttl_minutes: int = 60

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./mediavault.db"

    # Media storage
    storage_root: str = "./public/uploads"

    # Transport-level upload limits (admission applies per-category ceilings on top).
    upload_max_files: int = 10
    upload_max_field_bytes: int = 50 * 1024 * 1024

    # "partial" commits admitted files next to rejected ones; "all_or_nothing" commits none.
    upload_policy: Literal["partial", "all_or_nothing"] = "partial"

    # Off: declared MIME and extension are trusted. On: leading bytes must match the
    # category derived from the declared MIME type.
    content_sniffing: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every field can be overridden with a MEDIAVAULT_<NAME> environment variable.
