"""
config.py — FinBuddy application settings.

Usage:
    from finbuddy.config import settings
    print(settings.redis_url)

Components take their tunables as constructor arguments; only the app
lifespan and module defaults read from this singleton.
"""
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore any extra env vars
    )

    # --- Session persistence slot ---
    # "redis" for the durable slot, "memory" for a process-local one (dev/tests)
    session_backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379"
    session_key: str = "finbuddy_user"
    session_ttl_seconds: int = 0          # 0 = never expires

    # --- Simulated latency ---
    auth_delay_seconds: float = 1.0
    document_processing_delay_seconds: float = 3.0

    # --- Documents ---
    max_upload_size_bytes: int = 10 * 1024 * 1024  # 10 MB

    # --- Mock data ---
    random_seed: Optional[int] = None     # Fix for reproducible synthetic extraction
    seed_demo_data: bool = True

    # --- CORS ---
    # Comma-separated list of allowed frontend origins
    cors_origins: str = "http://localhost:5173,http://localhost:5174"

    # --- Application ---
    debug: bool = True
    app_version: str = "0.1.0"

    @property
    def cors_origins_list(self) -> List[str]:
        """Split comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Module-level singleton, imported throughout the codebase
settings = Settings()
