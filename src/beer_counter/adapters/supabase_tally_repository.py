"""Supabase-backed tally repository.

Composite writes go through the PL/pgSQL functions defined in
``supabase/migrations`` so each one runs in a single transaction.
"""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from beer_counter.domain.tally import DrinkPhoto, LastAction, NewDrinkPhoto
from beer_counter.services.tally import TallyRepository

_LAST_ACTION_ID = "last"
_DAY_MARKER_ID = "day"


@dataclass
class SupabaseTallyRepository(TallyRepository):
    """Supabase implementation for tally persistence."""

    client: Client

    def list_participants(self) -> list[str]:
        """Return participant names in registration order."""
        response = (
            self.client.table("participants")
            .select("name")
            .order("position", desc=False)
            .execute()
        )
        return [str(row["name"]) for row in response.data or []]

    def ensure_participants(self, names: list[str]) -> None:
        """Insert participant rows, skipping names that already exist."""
        if not names:
            return
        self.client.table("participants").upsert(
            [{"name": name} for name in names],
            on_conflict="name",
            ignore_duplicates=True,
        ).execute()

    def add_participant(self, name: str) -> bool:
        """Insert one participant; return False if the name is taken."""
        # Conflicting rows are not returned when duplicates are ignored.
        response = (
            self.client.table("participants")
            .upsert({"name": name}, on_conflict="name", ignore_duplicates=True)
            .execute()
        )
        return bool(response.data)

    def remove_participant(self, name: str) -> None:
        """Delete a participant with its counters."""
        self.client.rpc("tally_remove_participant", {"p_name": name}).execute()

    def list_all_time_counts(self) -> dict[str, int]:
        """Return all-time counts keyed by participant."""
        response = (
            self.client.table("all_time_counts").select("participant, count").execute()
        )
        return _parse_counts(response.data)

    def list_daily_counts(self, day: date) -> dict[str, int]:
        """Return counts for a day keyed by participant."""
        response = (
            self.client.table("daily_counts")
            .select("participant, count")
            .eq("day", day.isoformat())
            .execute()
        )
        return _parse_counts(response.data)

    def get_last_action(self) -> LastAction | None:
        """Return the singleton last action row."""
        response = (
            self.client.table("last_action")
            .select("participant, can_undo, is_from_today")
            .eq("id", _LAST_ACTION_ID)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return LastAction(
            participant=row.get("participant"),
            can_undo=bool(row.get("can_undo")),
            is_from_today=bool(row.get("is_from_today")),
        )

    def get_day_marker(self) -> date | None:
        """Return the stored day marker."""
        response = (
            self.client.table("day_marker")
            .select("day")
            .eq("id", _DAY_MARKER_ID)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        raw = response.data[0].get("day")
        return date.fromisoformat(raw) if isinstance(raw, str) and raw else None

    def roll_over(self, day: date) -> None:
        """Purge stale day-scoped rows and move the marker."""
        self.client.rpc("tally_roll_over", {"p_day": day.isoformat()}).execute()

    def record_drink(
        self, participant: str, day: date, photo: NewDrinkPhoto | None
    ) -> None:
        """Apply a logged drink in one transaction."""
        self.client.rpc(
            "tally_record_drink",
            {
                "p_participant": participant,
                "p_day": day.isoformat(),
                "p_image_data": photo.image_data if photo else None,
                "p_taken_at": photo.taken_at.isoformat() if photo else None,
            },
        ).execute()

    def revert_drink(self, participant: str, day: date, is_from_today: bool) -> None:
        """Revert the last drink in one transaction."""
        self.client.rpc(
            "tally_revert_drink",
            {
                "p_participant": participant,
                "p_day": day.isoformat(),
                "p_is_from_today": is_from_today,
            },
        ).execute()

    def reset_all(self, day: date) -> None:
        """Reset all counters for the current participants."""
        self.client.rpc("tally_reset_all", {"p_day": day.isoformat()}).execute()

    def reset_daily(self, day: date) -> None:
        """Reset daily counters and photos for a day."""
        self.client.rpc("tally_reset_daily", {"p_day": day.isoformat()}).execute()

    def list_photos(self, day: date) -> list[DrinkPhoto]:
        """Return photos for a day, newest first."""
        response = (
            self.client.table("drink_photos")
            .select("id, participant, image_data, day, taken_at")
            .eq("day", day.isoformat())
            .order("taken_at", desc=True)
            .execute()
        )
        return [_parse_photo(row) for row in response.data or []]


def _parse_counts(rows: list[dict[str, object]] | None) -> dict[str, int]:
    return {str(row["participant"]): int(row.get("count") or 0) for row in rows or []}


def _parse_photo(row: dict[str, object]) -> DrinkPhoto:
    return DrinkPhoto(
        id=UUID(str(row["id"])),
        participant=str(row["participant"]),
        image_data=str(row.get("image_data", "")),
        day=date.fromisoformat(str(row["day"])),
        taken_at=datetime.fromisoformat(str(row["taken_at"])),
    )
