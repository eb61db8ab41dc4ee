"""Pydantic models for the tally HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field

from beer_counter.domain.tally import DrinkPhoto, TallySnapshot


class LogDrinkRequest(BaseModel):
    """Request body for logging a drink."""

    participant: str = Field(min_length=1)
    image_data: str | None = None


class AddParticipantRequest(BaseModel):
    """Request body for registering a participant."""

    name: str = Field(min_length=1)


class SnapshotResponse(BaseModel):
    """Full tally state."""

    all_time_counts: dict[str, int]
    daily_counts: dict[str, int]
    participants: list[str]
    last_action: str | None
    can_undo: bool
    today: str

    @classmethod
    def from_snapshot(cls, snapshot: TallySnapshot) -> "SnapshotResponse":
        return cls(
            all_time_counts=snapshot.all_time_counts,
            daily_counts=snapshot.daily_counts,
            participants=snapshot.participants,
            last_action=snapshot.last_action,
            can_undo=snapshot.can_undo,
            today=snapshot.today.isoformat(),
        )


class PhotoResponse(BaseModel):
    """Stored drink photo."""

    id: str
    participant: str
    image_data: str
    date: str
    timestamp: datetime

    @classmethod
    def from_photo(cls, photo: DrinkPhoto) -> "PhotoResponse":
        return cls(
            id=str(photo.id),
            participant=photo.participant,
            image_data=photo.image_data,
            date=photo.day.isoformat(),
            timestamp=photo.taken_at,
        )


class PhotoListResponse(BaseModel):
    """Today's drink photos, newest first."""

    photos: list[PhotoResponse]
