"""Track endpoints."""

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response

from trackspot.api.dependencies import get_track_service
from trackspot.api.schemas.tracks import TrackResponse
from trackspot.application.services import TrackService
from trackspot.domain.entities import TrackRecord

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_response(request: Request, record: TrackRecord) -> TrackResponse:
    cover_url = request.url_for("get_track_cover", isrc=record.isrc)
    return TrackResponse.from_record(record, str(cover_url))


# Hey future me, this is the "lazy import" endpoint. First call for an ISRC goes to Spotify,
# downloads the cover and stores everything; every later call is a plain DB read. It answers 201
# both times - the caller asked us to make sure the track exists, and now it does.
@router.post(
    "",
    response_model=TrackResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_track(
    request: Request,
    isrc: str = Query(..., description="ISRC of the track, e.g. USRC17607839"),
    service: TrackService = Depends(get_track_service),
) -> TrackResponse:
    """Fetch a track from Spotify (if not stored yet) and return it.

    Args:
        request: Incoming request (used to build the cover URL)
        isrc: ISRC to acquire
        service: Track service

    Returns:
        Stored track
    """
    record = await service.get_or_create(isrc)
    return _to_response(request, record)


@router.get("/{isrc}", response_model=TrackResponse)
async def get_track(
    request: Request,
    isrc: str,
    service: TrackService = Depends(get_track_service),
) -> TrackResponse:
    """Return a stored track. Never calls Spotify."""
    record = await service.get(isrc)
    return _to_response(request, record)


# Content-Type comes from sniffing the stored bytes, not from the .jpg name
@router.get(
    "/{isrc}/cover",
    response_class=Response,
    responses={200: {"content": {"image/jpeg": {}}}},
)
async def get_track_cover(
    isrc: str,
    service: TrackService = Depends(get_track_service),
) -> Response:
    """Download the cover image of a stored track."""
    blob = await service.get_cover(isrc)
    return Response(
        content=blob.data,
        media_type=blob.content_type,
        headers={"Content-Disposition": f'attachment; filename="{blob.filename}"'},
    )
