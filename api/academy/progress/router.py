"""Student progress tracking API endpoints.

Provides routes for:
- Progress reports (every 10s while a video plays)
- Lesson completion
- Lesson view with previous/next navigation
- Course enrollment
- Progress queries and learning stats
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from academy.auth.dependencies import CurrentUser
from academy.courses.dependencies import CatalogServiceDep

from .dependencies import PlayerServiceDep, ProgressServiceDep, handle_progress_error
from .exceptions import ProgressError
from .models import EnrollmentStatus
from .schemas import (
    CompleteLessonRequest,
    CompletionResponse,
    CourseProgressResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollRequest,
    LearningStatsResponse,
    LessonProgressResponse,
    LessonViewResponse,
    ReportProgressRequest,
)


router = APIRouter(prefix="/v1/progress", tags=["progress"])
enrollments_router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])


# ==============================================================================
# Lesson Progress Endpoints
# ==============================================================================


@router.put(
    "/lessons/{lesson_id}",
    response_model=LessonProgressResponse,
    summary="Report playback position",
)
async def report_progress(
    lesson_id: UUID,
    data: ReportProgressRequest,
    player_service: PlayerServiceDep,
    user: CurrentUser,
) -> LessonProgressResponse:
    """Store the current playback position of a lesson.

    Last write wins; completion is never changed by a report.
    """
    try:
        progress = await player_service.report_progress(
            user_id=user.id,
            course_id=data.course_id,
            lesson_id=lesson_id,
            watched_seconds=data.watched_seconds,
            total_seconds=data.total_seconds,
        )
    except ProgressError as e:
        raise handle_progress_error(e) from e
    return LessonProgressResponse.from_entity(progress)


@router.post(
    "/lessons/{lesson_id}/complete",
    response_model=CompletionResponse,
    summary="Mark lesson as complete",
)
async def complete_lesson(
    lesson_id: UUID,
    data: CompleteLessonRequest,
    player_service: PlayerServiceDep,
    user: CurrentUser,
) -> CompletionResponse:
    """Complete a lesson, update the course percentage and return the next page."""
    try:
        result = await player_service.complete_lesson(user.id, data.course_id, lesson_id)
    except ProgressError as e:
        raise handle_progress_error(e) from e
    return CompletionResponse.from_result(result)


@router.get(
    "/lessons/{lesson_id}",
    response_model=LessonViewResponse,
    summary="Open lesson",
)
async def open_lesson(
    lesson_id: UUID,
    player_service: PlayerServiceDep,
    user: CurrentUser,
    course_id: UUID = Query(..., description="Course UUID"),
) -> LessonViewResponse:
    """Lesson with neighbors and resume position; records it as the last lesson."""
    try:
        view = await player_service.open_lesson(user.id, course_id, lesson_id)
    except ProgressError as e:
        raise handle_progress_error(e) from e
    return LessonViewResponse.from_view(view)


# ==============================================================================
# Progress Query Endpoints
# ==============================================================================


@router.get(
    "/courses/{course_id}",
    response_model=CourseProgressResponse,
    summary="Get course progress",
)
async def get_course_progress(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> CourseProgressResponse:
    """Course tree with per-lesson progress and the resume point."""
    try:
        view = await progress_service.get_course_progress(user.id, course_id)
    except ProgressError as e:
        raise handle_progress_error(e) from e
    if view is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found",
        )
    return CourseProgressResponse.from_view(view)


@router.get(
    "/stats",
    response_model=LearningStatsResponse,
    summary="Get learning stats",
)
async def get_learning_stats(
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> LearningStatsResponse:
    """Totals across all enrollments of the current user."""
    try:
        stats = await progress_service.get_learning_stats(user.id)
    except ProgressError as e:
        raise handle_progress_error(e) from e
    return LearningStatsResponse.from_stats(stats)


# ==============================================================================
# Enrollment Endpoints
# ==============================================================================


@enrollments_router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in course",
)
async def enroll_in_course(
    data: EnrollRequest,
    progress_service: ProgressServiceDep,
    catalog_service: CatalogServiceDep,
    user: CurrentUser,
) -> EnrollmentResponse:
    """Enroll current user in a course."""
    try:
        course = await catalog_service.get_course(data.course_id)
        if not course:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Course not found",
            )
        enrollment = await progress_service.enroll_user(user.id, data.course_id)
    except ProgressError as e:
        raise handle_progress_error(e) from e
    return EnrollmentResponse.from_entity(enrollment)


@enrollments_router.get(
    "/my",
    response_model=EnrollmentListResponse,
    summary="Get my enrollments",
)
async def get_my_enrollments(
    progress_service: ProgressServiceDep,
    user: CurrentUser,
    state: EnrollmentStatus | None = Query(None, description="Filter by status"),
) -> EnrollmentListResponse:
    """Course enrollments of the current user, most recently watched first."""
    try:
        enrollments = await progress_service.get_user_enrollments(user.id, state)
    except ProgressError as e:
        raise handle_progress_error(e) from e
    return EnrollmentListResponse(
        items=[EnrollmentResponse.from_entity(e) for e in enrollments],
        total=len(enrollments),
    )


@enrollments_router.get(
    "/{course_id}",
    response_model=EnrollmentResponse,
    summary="Get enrollment for course",
)
async def get_enrollment(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> EnrollmentResponse:
    """Enrollment of the current user in a specific course."""
    try:
        enrollment = await progress_service.get_enrollment(user.id, course_id)
    except ProgressError as e:
        raise handle_progress_error(e) from e
    return EnrollmentResponse.from_entity(enrollment)
