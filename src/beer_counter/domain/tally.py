"""Domain models for drink tallies."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True)
class LastAction:
    """Most recent logged drink, kept for a single level of undo."""

    participant: str | None
    can_undo: bool
    is_from_today: bool


@dataclass(frozen=True)
class NewDrinkPhoto:
    """Photo payload to store alongside a logged drink."""

    participant: str
    image_data: str
    day: date
    taken_at: datetime


@dataclass(frozen=True)
class DrinkPhoto:
    """Stored drink photo."""

    id: UUID
    participant: str
    image_data: str
    day: date
    taken_at: datetime


@dataclass(frozen=True)
class TallySnapshot:
    """Full tally state returned by every operation."""

    all_time_counts: dict[str, int]
    daily_counts: dict[str, int]
    participants: list[str]
    last_action: str | None
    can_undo: bool
    today: date
