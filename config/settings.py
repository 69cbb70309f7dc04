"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    AI_PROVIDER: str = "openai"
    APP_CONFIG_PATH: str = Field(default="app_config.json")
    DB_PATH: str = Field(default="data/settings.db")

    DEFAULT_PIN: str = "0000"
    EXAMPLE_QUESTION_COUNT: int = 3
    MAX_PROMPT_INTERESTS: int = 3
    MAX_SESSIONS: int = 100

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
