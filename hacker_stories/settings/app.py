"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hacker_stories.search.constants import (
    DEFAULT_API_BASE,
    DEFAULT_SEARCH_TERM,
    HISTORY_LIMIT,
    SEARCH_TERM_KEY,
)


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HACKER_STORIES_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base: Annotated[str, Field(min_length=1)] = DEFAULT_API_BASE
    default_search_term: str = DEFAULT_SEARCH_TERM
    search_term_key: Annotated[str, Field(min_length=1)] = SEARCH_TERM_KEY
    state_path: Path = Path("state/hacker_stories.sqlite")
    request_timeout_seconds: Annotated[float, Field(ge=1.0, le=120.0)] = 10.0
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        "hacker-stories/0.1"
    )
    history_limit: Annotated[int, Field(ge=1, le=50)] = HISTORY_LIMIT
    strict_events: bool = Field(
        default=True,
        description="Raise on unknown fetch events instead of logging them",
    )
    log_level: str = "INFO"
    json_logs: bool = False


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
