"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Hustle Planner Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://hustle@localhost:5432/hustle"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "hustle"
    openai_api_key: str | None = None
    personalizer_enabled: bool = False
    personalizer_model: str = "gpt-4o"
    tasks_table: str = "tasks"
    # Probed before the built-in date column candidates when set.
    tasks_date_column: str | None = None
    # Row-days per bulk streak insert.
    streak_insert_chunk_size: int = Field(default=20000, ge=1)
    planner_cutoff_hour: int = Field(default=9, ge=0, le=23)
    default_task_time: str = "09:00:00"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
