"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Pathwise Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://pathwise@localhost:5432/pathwise"

    openai_api_key: str | None = None
    overview_model: str = "gpt-4o-mini"
    stages_model: str = "gpt-4o-mini"
    tasks_model: str = "gpt-4o-mini"
    model_temperature: float = 0.7
    overview_max_tokens: int = 4000
    stages_max_tokens: int = 8000
    tasks_max_tokens: int = 4000
    roadmap_timeout_seconds: float = 30.0
    tasks_timeout_seconds: float = 20.0
    model_retry_attempts: int = 3
    roadmap_retry_base_delay_ms: int = 500
    tasks_retry_base_delay_ms: int = 300

    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "pathwise"

    background_workers: int = 4
    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    sweep_interval_minutes: int = 5
    stale_generation_minutes: int = 15


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
