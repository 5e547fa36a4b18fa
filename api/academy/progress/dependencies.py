"""FastAPI dependencies for progress tracking.

Provides dependency injection for:
- Progress service
- Lesson player service
- Error handlers
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from academy.player.service import LessonPlayerService

from .exceptions import ProgressError
from .service import ProgressService


async def get_progress_service(request: Request) -> ProgressService:
    """Get progress service from app state."""
    app_state = request.app.state
    if not hasattr(app_state, "progress_service") or not app_state.progress_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Progress service not available",
        )
    return app_state.progress_service


async def get_player_service(request: Request) -> LessonPlayerService:
    """Get lesson player service from app state."""
    app_state = request.app.state
    if not hasattr(app_state, "player_service") or not app_state.player_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Lesson player service not available",
        )
    return app_state.player_service


# Type aliases for dependency injection
ProgressServiceDep = Annotated[ProgressService, Depends(get_progress_service)]
PlayerServiceDep = Annotated[LessonPlayerService, Depends(get_player_service)]


def handle_progress_error(error: ProgressError) -> HTTPException:
    """Convert progress errors to HTTP exceptions.

    Args:
        error: Progress error

    Returns:
        HTTPException with appropriate status code
    """
    status_map = {
        "not_enrolled": status.HTTP_404_NOT_FOUND,
        "already_enrolled": status.HTTP_409_CONFLICT,
        "lesson_not_in_course": status.HTTP_404_NOT_FOUND,
        "enrollment_sync_failed": status.HTTP_502_BAD_GATEWAY,
        "progress_write_failed": status.HTTP_503_SERVICE_UNAVAILABLE,
        "progress_read_failed": status.HTTP_503_SERVICE_UNAVAILABLE,
        "catalog_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
