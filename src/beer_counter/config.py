"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from beer_counter.services.tally import DEFAULT_PARTICIPANTS

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_backend: str = "supabase"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    timezone: str = "UTC"
    log_level: str = "INFO"
    default_participants: str = ",".join(DEFAULT_PARTICIPANTS)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_participant_names(raw: str | None) -> tuple[str, ...]:
    """Parse the comma-separated default participant list."""
    if raw is None:
        return DEFAULT_PARTICIPANTS
    names: list[str] = []
    for chunk in raw.split(","):
        value = chunk.strip().lower()
        if value and value not in names:
            names.append(value)
    return tuple(names) or DEFAULT_PARTICIPANTS
