"""Playback API endpoints.

Provides routes for:
- Resolving how a lesson video should be played
"""

from typing import Annotated
from uuid import UUID

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status

from academy.auth.dependencies import CurrentUser
from academy.config.settings import Settings, get_settings
from academy.courses.dependencies import CatalogServiceDep
from academy.progress.dependencies import ProgressServiceDep, handle_progress_error
from academy.progress.exceptions import ProgressError

from .controller import PLAYBACK_RATES
from .exceptions import PlaybackError
from .manifest import fetch_quality_levels
from .schemas import PlaybackSourceResponse, QualityLevelResponse
from .sources import PlaybackCapabilities, PlaybackStrategy, select_playback_strategy


router = APIRouter(prefix="/v1/playback", tags=["playback"])


def get_http_client(request: Request) -> httpx.AsyncClient | None:
    """Shared HTTP client from app state, if the app created one."""
    return getattr(request.app.state, "http_client", None)


HttpClientDep = Annotated[httpx.AsyncClient | None, Depends(get_http_client)]


@router.get(
    "/lessons/{lesson_id}/source",
    response_model=PlaybackSourceResponse,
    summary="Resolve lesson playback source",
)
async def get_playback_source(
    lesson_id: UUID,
    catalog_service: CatalogServiceDep,
    progress_service: ProgressServiceDep,
    settings: Annotated[Settings, Depends(get_settings)],
    http_client: HttpClientDep,
    user: CurrentUser,
) -> PlaybackSourceResponse:
    """Playback strategy and quality levels for a lesson video.

    Only enrolled users can resolve a source.
    """
    try:
        lesson = await catalog_service.get_lesson(lesson_id)
        if lesson is None or not lesson.is_published or not lesson.video_url:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Lesson video not found",
            )
        await progress_service.get_enrollment(user.id, lesson.course_id)
    except ProgressError as e:
        raise handle_progress_error(e) from e

    try:
        strategy = select_playback_strategy(
            lesson.video_url, PlaybackCapabilities.from_settings(settings)
        )
        levels = []
        if strategy == PlaybackStrategy.ADAPTIVE:
            levels = await fetch_quality_levels(
                lesson.video_url,
                http_client,
                timeout=settings.playback_manifest_timeout_seconds,
            )
    except PlaybackError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e

    return PlaybackSourceResponse(
        lesson_id=lesson.id,
        source_url=lesson.video_url,
        strategy=strategy,
        quality_levels=[QualityLevelResponse.from_level(level) for level in levels],
        progress_interval_seconds=settings.playback_progress_interval_seconds,
        playback_rates=list(PLAYBACK_RATES),
    )
