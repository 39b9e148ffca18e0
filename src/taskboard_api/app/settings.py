"""Application settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "taskboard"
    # postgresql://... or sqlite:///path/to/tasks.db (sqlite:///:memory: for scratch runs)
    database_url: str = ""
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="TASKBOARD_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
