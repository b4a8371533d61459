from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    log_level: str = "INFO"
    assets_dir: str | None = None

    # Evaluation
    eval_cache_maxsize: int = 100_000

    # Query builder
    slow_query_ms: float = 500.0


settings = Settings()
