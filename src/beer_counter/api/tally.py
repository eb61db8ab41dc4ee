"""Tally API endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NoReturn

from fastapi import APIRouter, HTTPException, Request, status

from beer_counter.api.models import (
    AddParticipantRequest,
    LogDrinkRequest,
    PhotoListResponse,
    PhotoResponse,
    SnapshotResponse,
)
from beer_counter.domain.errors import (
    DuplicateParticipantError,
    InvalidParticipantError,
    NoUndoAvailableError,
    StorageUnavailableError,
    TallyError,
)

if TYPE_CHECKING:
    from beer_counter.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tally"])

_STATUS_BY_ERROR: dict[type[TallyError], int] = {
    NoUndoAvailableError: status.HTTP_409_CONFLICT,
    DuplicateParticipantError: status.HTTP_409_CONFLICT,
    InvalidParticipantError: status.HTTP_400_BAD_REQUEST,
    StorageUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/counts")
async def get_counts(request: Request) -> SnapshotResponse:
    """Return the current counts, rolling over to a new day if needed."""
    container = _container(request)
    try:
        snapshot = container.tally_service.get_snapshot()
    except TallyError as exc:
        _raise_http(container, exc)
    return SnapshotResponse.from_snapshot(snapshot)


@router.post("/drinks")
async def log_drink(body: LogDrinkRequest, request: Request) -> SnapshotResponse:
    """Count a drink for a participant."""
    container = _container(request)
    try:
        snapshot = container.tally_service.log_drink(
            body.participant, image_data=body.image_data
        )
    except TallyError as exc:
        _raise_http(container, exc)
    return SnapshotResponse.from_snapshot(snapshot)


@router.post("/undo")
async def undo(request: Request) -> SnapshotResponse:
    """Undo the most recent drink."""
    container = _container(request)
    try:
        snapshot = container.tally_service.undo()
    except TallyError as exc:
        _raise_http(container, exc)
    return SnapshotResponse.from_snapshot(snapshot)


@router.post("/participants")
async def add_participant(
    body: AddParticipantRequest, request: Request
) -> SnapshotResponse:
    """Register a participant."""
    container = _container(request)
    try:
        snapshot = container.tally_service.add_participant(body.name)
    except TallyError as exc:
        _raise_http(container, exc)
    return SnapshotResponse.from_snapshot(snapshot)


@router.delete("/participants/{name}")
async def remove_participant(name: str, request: Request) -> SnapshotResponse:
    """Remove a participant and their counters."""
    container = _container(request)
    try:
        snapshot = container.tally_service.remove_participant(name)
    except TallyError as exc:
        _raise_http(container, exc)
    return SnapshotResponse.from_snapshot(snapshot)


@router.post("/reset")
async def reset_all(request: Request) -> SnapshotResponse:
    """Reset all counts."""
    container = _container(request)
    try:
        snapshot = container.tally_service.reset_all()
    except TallyError as exc:
        _raise_http(container, exc)
    return SnapshotResponse.from_snapshot(snapshot)


@router.post("/reset/daily")
async def reset_daily(request: Request) -> SnapshotResponse:
    """Reset today's counts and photos."""
    container = _container(request)
    try:
        snapshot = container.tally_service.reset_daily()
    except TallyError as exc:
        _raise_http(container, exc)
    return SnapshotResponse.from_snapshot(snapshot)


@router.get("/photos")
async def list_photos(request: Request) -> PhotoListResponse:
    """Return today's drink photos, newest first."""
    container = _container(request)
    try:
        photos = container.tally_service.list_photos()
    except TallyError as exc:
        _raise_http(container, exc)
    return PhotoListResponse(photos=[PhotoResponse.from_photo(p) for p in photos])


def _raise_http(container: AppContainer, exc: TallyError) -> NoReturn:
    """Translate a tally failure into an HTTP error response."""
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info("Tally request rejected (%s): %s", status_code, exc)
    raise HTTPException(status_code=status_code, detail=_format_detail(container, exc))


def _format_detail(container: AppContainer, exc: TallyError) -> str:
    """Return the user-facing message with local debug info."""
    cause = exc.__cause__
    if container.settings.environment == "local" and cause is not None:
        return f"{exc} (debug: {type(cause).__name__}: {cause})"
    return str(exc)
