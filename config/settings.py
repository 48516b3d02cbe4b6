"""Configuration settings using pydantic-settings."""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration, read from LOGIC_FLOWS_* environment variables or a .env file."""

    database_url: str = "sqlite:///./logic_flows.db"
    openai_model: str = "gpt-4o-mini"
    # OPENAI_API_KEY is honoured as well so the usual OpenAI setup keeps working.
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LOGIC_FLOWS_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    log_level: str = "INFO"
    organization_id: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="LOGIC_FLOWS_", env_file=".env", extra="ignore", populate_by_name=True
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
