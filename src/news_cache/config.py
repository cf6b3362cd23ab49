"""Configuration helpers for the news cache client."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: str | None = Field(None, alias="API_KEY")
    api_base_url: str = Field(
        "https://newsapi.org/v2",
        alias="NEWS_API_BASE_URL",
        description="Root of the NewsAPI v2 endpoints.",
    )
    headlines_country: str = Field(
        "us",
        alias="NEWS_HEADLINES_COUNTRY",
        description="Country code for the top-headlines query.",
    )
    tech_topic: str = Field(
        "technology",
        alias="NEWS_TECH_TOPIC",
        description="Search term for the 'everything' query behind list-tech/view-tech.",
    )
    cache_file: Path = Field(
        Path("cache.json"),
        alias="NEWS_CACHE_FILE",
        description="Where the last successful snapshot is kept.",
    )
    fetch_timeout: float = Field(
        5.0,
        gt=0,
        alias="NEWS_FETCH_TIMEOUT",
        description="Seconds allowed for each remote request, body included.",
    )


def get_settings() -> Settings:
    """Return a settings instance built from the current environment."""
    return Settings()
