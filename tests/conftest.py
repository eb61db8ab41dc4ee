"""Shared test fixtures."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

import pytest

from beer_counter.adapters.memory_tally_repository import InMemoryTallyRepository
from beer_counter.config import Settings
from beer_counter.containers import AppContainer
from beer_counter.domain.tally import NewDrinkPhoto
from beer_counter.services.tally import TallyService


@dataclass
class FakeClock:
    """Controllable clock that advances one second per reading."""

    now: datetime = datetime(2026, 10, 16, 18, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@dataclass
class FailingTallyRepository(InMemoryTallyRepository):
    """Repository whose writes fail as if the database were unreachable."""

    def record_drink(
        self, participant: str, day: date, photo: NewDrinkPhoto | None
    ) -> None:
        raise ConnectionError("database unreachable")

    def list_participants(self) -> list[str]:
        raise ConnectionError("database unreachable")


@dataclass
class StaleRegistryTallyRepository(InMemoryTallyRepository):
    """Repository whose first registry read misses a concurrent writer."""

    stale_reads: int = 1

    def list_participants(self) -> list[str]:
        if self.stale_reads:
            self.stale_reads -= 1
            return []
        return super().list_participants()


@dataclass
class CountingTallyRepository(InMemoryTallyRepository):
    """Repository that counts day-marker reads."""

    day_marker_reads: int = 0

    def get_day_marker(self) -> date | None:
        self.day_marker_reads += 1
        return super().get_day_marker()


@pytest.fixture
def settings() -> Settings:
    return Settings(storage_backend="memory", timezone="UTC", environment="test")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryTallyRepository:
    return InMemoryTallyRepository()


@pytest.fixture
def tally_service(
    repository: InMemoryTallyRepository, clock: FakeClock
) -> TallyService:
    return TallyService(repository=repository, clock=clock)


@pytest.fixture
def container(settings: Settings, tally_service: TallyService) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        tally_service=tally_service,
        close_resources=close_resources,
    )
