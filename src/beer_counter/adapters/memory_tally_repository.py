"""In-process tally repository for local development and tests."""

import threading
from dataclasses import dataclass, field
from datetime import date
from uuid import uuid4

from beer_counter.domain.tally import DrinkPhoto, LastAction, NewDrinkPhoto
from beer_counter.services.tally import TallyRepository


@dataclass
class InMemoryTallyRepository(TallyRepository):
    """Tally repository that keeps all rows in memory behind a lock."""

    participants: list[str] = field(default_factory=list)
    all_time_counts: dict[str, int] = field(default_factory=dict)
    daily_counts: dict[tuple[str, date], int] = field(default_factory=dict)
    photos: list[DrinkPhoto] = field(default_factory=list)
    last_action: LastAction | None = None
    day_marker: date | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def list_participants(self) -> list[str]:
        with self._lock:
            return list(self.participants)

    def ensure_participants(self, names: list[str]) -> None:
        with self._lock:
            for name in names:
                if name not in self.participants:
                    self.participants.append(name)

    def add_participant(self, name: str) -> bool:
        with self._lock:
            if name in self.participants:
                return False
            self.participants.append(name)
            return True

    def remove_participant(self, name: str) -> None:
        with self._lock:
            if name in self.participants:
                self.participants.remove(name)
            self.all_time_counts.pop(name, None)
            self.daily_counts = {
                key: count
                for key, count in self.daily_counts.items()
                if key[0] != name
            }

    def list_all_time_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self.all_time_counts)

    def list_daily_counts(self, day: date) -> dict[str, int]:
        with self._lock:
            return {
                name: count
                for (name, count_day), count in self.daily_counts.items()
                if count_day == day
            }

    def get_last_action(self) -> LastAction | None:
        with self._lock:
            return self.last_action

    def get_day_marker(self) -> date | None:
        with self._lock:
            return self.day_marker

    def roll_over(self, day: date) -> None:
        with self._lock:
            self.daily_counts = {
                key: count for key, count in self.daily_counts.items() if key[1] == day
            }
            self.photos = [photo for photo in self.photos if photo.day == day]
            if self.last_action is not None:
                self.last_action = LastAction(
                    participant=self.last_action.participant,
                    can_undo=False,
                    is_from_today=False,
                )
            self.day_marker = day

    def record_drink(
        self, participant: str, day: date, photo: NewDrinkPhoto | None
    ) -> None:
        with self._lock:
            self.all_time_counts[participant] = (
                self.all_time_counts.get(participant, 0) + 1
            )
            key = (participant, day)
            self.daily_counts[key] = self.daily_counts.get(key, 0) + 1
            if photo is not None:
                self.photos.append(
                    DrinkPhoto(
                        id=uuid4(),
                        participant=photo.participant,
                        image_data=photo.image_data,
                        day=photo.day,
                        taken_at=photo.taken_at,
                    )
                )
            self.last_action = LastAction(
                participant=participant, can_undo=True, is_from_today=True
            )

    def revert_drink(self, participant: str, day: date, is_from_today: bool) -> None:
        with self._lock:
            if participant in self.all_time_counts:
                self.all_time_counts[participant] = max(
                    self.all_time_counts[participant] - 1, 0
                )
            if is_from_today:
                key = (participant, day)
                if key in self.daily_counts:
                    self.daily_counts[key] = max(self.daily_counts[key] - 1, 0)
                latest = _latest_photo(self.photos, participant, day)
                if latest is not None:
                    self.photos.remove(latest)
            self.last_action = LastAction(
                participant=participant,
                can_undo=False,
                is_from_today=is_from_today,
            )

    def reset_all(self, day: date) -> None:
        with self._lock:
            for name in self.participants:
                if name in self.all_time_counts:
                    self.all_time_counts[name] = 0
            self._clear_day(day)
            self.last_action = LastAction(
                participant=None, can_undo=False, is_from_today=False
            )

    def reset_daily(self, day: date) -> None:
        with self._lock:
            self._clear_day(day)

    def list_photos(self, day: date) -> list[DrinkPhoto]:
        with self._lock:
            todays = [photo for photo in reversed(self.photos) if photo.day == day]
        return sorted(todays, key=lambda photo: photo.taken_at, reverse=True)

    def _clear_day(self, day: date) -> None:
        self.daily_counts = {
            key: count for key, count in self.daily_counts.items() if key[1] != day
        }
        self.photos = [photo for photo in self.photos if photo.day != day]


def _latest_photo(
    photos: list[DrinkPhoto], participant: str, day: date
) -> DrinkPhoto | None:
    latest = None
    for photo in photos:
        if photo.participant != participant or photo.day != day:
            continue
        if latest is None or photo.taken_at >= latest.taken_at:
            latest = photo
    return latest
