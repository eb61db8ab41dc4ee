"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from supabase import create_client

from beer_counter.adapters.memory_tally_repository import InMemoryTallyRepository
from beer_counter.adapters.supabase_tally_repository import SupabaseTallyRepository
from beer_counter.config import Settings, parse_participant_names
from beer_counter.services.tally import TallyRepository, TallyService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    tally_service: TallyService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    # Raises for unknown zone names.
    ZoneInfo(resolved_settings.timezone)
    tally_service = TallyService(
        repository=_build_repository(resolved_settings),
        default_participants=parse_participant_names(
            resolved_settings.default_participants
        ),
        timezone_name=resolved_settings.timezone,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        tally_service=tally_service,
        close_resources=close_resources,
    )


def _build_repository(settings: Settings) -> TallyRepository:
    if settings.storage_backend == "memory":
        return InMemoryTallyRepository()
    if settings.storage_backend != "supabase":
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_SERVICE_KEY are required for Supabase storage"
        )
    client = create_client(settings.supabase_url, settings.supabase_service_key)
    return SupabaseTallyRepository(client)
