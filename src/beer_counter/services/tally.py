"""Tally store: counters, one-level undo and daily rollover."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from beer_counter.domain.errors import (
    DuplicateParticipantError,
    InvalidParticipantError,
    NoUndoAvailableError,
    StorageUnavailableError,
    TallyError,
)
from beer_counter.domain.tally import (
    DrinkPhoto,
    LastAction,
    NewDrinkPhoto,
    TallySnapshot,
)

logger = logging.getLogger(__name__)

DEFAULT_PARTICIPANTS = ("aaron", "nick", "aj", "isaac", "sam")


class TallyRepository(Protocol):
    """Persistence interface for tally state.

    Every mutating method is expected to apply all of its writes as one unit.
    """

    def list_participants(self) -> list[str]:
        """Return participant names in registration order."""

    def ensure_participants(self, names: list[str]) -> None:
        """Insert participant rows, skipping names that already exist."""

    def add_participant(self, name: str) -> bool:
        """Insert one participant; return False if the name is taken."""

    def remove_participant(self, name: str) -> None:
        """Delete a participant with its all-time and daily counters."""

    def list_all_time_counts(self) -> dict[str, int]:
        """Return all-time counts keyed by participant."""

    def list_daily_counts(self, day: date) -> dict[str, int]:
        """Return counts for a day keyed by participant."""

    def get_last_action(self) -> LastAction | None:
        """Return the last action record, if present."""

    def get_day_marker(self) -> date | None:
        """Return the last day a rollover ran for."""

    def roll_over(self, day: date) -> None:
        """Purge rows not dated ``day``, disable undo and store the marker."""

    def record_drink(
        self, participant: str, day: date, photo: NewDrinkPhoto | None
    ) -> None:
        """Increment both counters, store the photo and the last action."""

    def revert_drink(self, participant: str, day: date, is_from_today: bool) -> None:
        """Decrement counters, drop the newest photo and disable undo."""

    def reset_all(self, day: date) -> None:
        """Zero all-time counts, clear the day and the last action."""

    def reset_daily(self, day: date) -> None:
        """Delete daily counts and photos for a day."""

    def list_photos(self, day: date) -> list[DrinkPhoto]:
        """Return photos for a day, newest first."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@contextmanager
def _storage_errors(message: str) -> Iterator[None]:
    try:
        yield
    except TallyError:
        raise
    except Exception as exc:
        logger.exception(message)
        raise StorageUnavailableError(message) from exc


def normalize_name(name: str) -> str:
    """Return the canonical form of a participant name."""
    normalized = name.strip().lower()
    if not normalized:
        raise InvalidParticipantError("Participant name must not be empty")
    return normalized


@dataclass
class TallyService:
    """Application service owning the drink counters."""

    repository: TallyRepository
    default_participants: tuple[str, ...] = DEFAULT_PARTICIPANTS
    timezone_name: str = "UTC"
    clock: Callable[[], datetime] = field(default=_utc_now)

    def today(self) -> date:
        """Return the current calendar day in the configured timezone."""
        return self.clock().astimezone(ZoneInfo(self.timezone_name)).date()

    def get_snapshot(self) -> TallySnapshot:
        """Return the current state, rolling over to a new day if needed."""
        with _storage_errors("Failed to get drink counts"):
            return self._snapshot(self._sync_day())

    def log_drink(
        self, participant: str, image_data: str | None = None
    ) -> TallySnapshot:
        """Count a drink for a participant, optionally with a photo."""
        with _storage_errors(f"Failed to log a drink for {participant}"):
            today = self._sync_day()
            photo = None
            if image_data:
                photo = NewDrinkPhoto(
                    participant=participant,
                    image_data=image_data,
                    day=today,
                    taken_at=self.clock(),
                )
            self.repository.record_drink(participant, today, photo)
            logger.info(
                "Drink logged for %s (photo: %s)", participant, photo is not None
            )
            snapshot = self._snapshot(today)
        if participant not in snapshot.participants:
            logger.warning("Drink logged for unregistered participant %s", participant)
        return snapshot

    def undo(self) -> TallySnapshot:
        """Revert the most recent drink once."""
        with _storage_errors("Failed to undo last action"):
            today = self._sync_day()
            last_action = self.repository.get_last_action()
            if (
                last_action is None
                or not last_action.can_undo
                or last_action.participant is None
            ):
                raise NoUndoAvailableError("No action to undo")
            self.repository.revert_drink(
                last_action.participant, today, last_action.is_from_today
            )
            logger.info("Undid last drink for %s", last_action.participant)
            return self._snapshot(today)

    def add_participant(self, name: str) -> TallySnapshot:
        """Register a new participant."""
        normalized = normalize_name(name)
        with _storage_errors(f"Failed to add participant {normalized}"):
            today = self._sync_day()
            if not self.repository.add_participant(normalized):
                raise DuplicateParticipantError(
                    f"Participant {normalized} already exists"
                )
            logger.info("Added participant %s", normalized)
            return self._snapshot(today)

    def remove_participant(self, name: str) -> TallySnapshot:
        """Remove a participant and their counters; photos are kept."""
        normalized = normalize_name(name)
        with _storage_errors(f"Failed to remove participant {normalized}"):
            today = self._sync_day()
            self.repository.remove_participant(normalized)
            logger.info("Removed participant %s", normalized)
            return self._snapshot(today)

    def reset_all(self) -> TallySnapshot:
        """Zero every counter and invalidate any pending undo."""
        with _storage_errors("Failed to reset counts"):
            today = self._sync_day()
            self.repository.reset_all(today)
            logger.info("Reset all counts")
            return self._snapshot(today)

    def reset_daily(self) -> TallySnapshot:
        """Clear today's counts and photos."""
        with _storage_errors("Failed to reset daily counts"):
            today = self._sync_day()
            self.repository.reset_daily(today)
            logger.info("Reset daily counts for %s", today.isoformat())
            return self._snapshot(today)

    def list_photos(self) -> list[DrinkPhoto]:
        """Return today's drink photos, newest first."""
        with _storage_errors("Failed to get drink photos"):
            return self.repository.list_photos(self._sync_day())

    def _sync_day(self) -> date:
        today = self.today()
        self._roll_over_if_needed(today)
        return today

    def _roll_over_if_needed(self, today: date) -> None:
        if self.repository.get_day_marker() != today:
            logger.info("Rolling over to %s", today.isoformat())
            self.repository.roll_over(today)

    def _snapshot(self, today: date) -> TallySnapshot:
        participants = self.repository.list_participants()
        if not participants:
            logger.info("No participants registered, creating defaults")
            self.repository.ensure_participants(list(self.default_participants))
            participants = self.repository.list_participants()

        all_time_counts = dict.fromkeys(participants, 0)
        daily_counts = dict.fromkeys(participants, 0)
        for name, count in self.repository.list_all_time_counts().items():
            if name in all_time_counts:
                all_time_counts[name] = count
        for name, count in self.repository.list_daily_counts(today).items():
            if name in daily_counts:
                daily_counts[name] = count

        last_action = self.repository.get_last_action()
        return TallySnapshot(
            all_time_counts=all_time_counts,
            daily_counts=daily_counts,
            participants=participants,
            last_action=last_action.participant if last_action else None,
            can_undo=bool(last_action and last_action.can_undo),
            today=today,
        )
