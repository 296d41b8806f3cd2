"""Environment-backed settings, read once when the app is created."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite:///./decision_tracker.db"


class Settings(BaseSettings):
    """Settings for the FastAPI service; OPENAI_API_KEY maps to openai_api_key."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        # an empty variable counts as unset
        env_ignore_empty=True,
    )

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    pplx_api_key: Optional[str] = None
    pplx_model: str = "sonar"
    database_url: str = DEFAULT_DATABASE_URL
    sentry_dsn: Optional[str] = None
    phoenix_api_key: Optional[str] = None
    log_level: str = "INFO"
