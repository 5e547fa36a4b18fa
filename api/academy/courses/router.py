"""Course catalog API endpoints (learner view)."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from academy.auth.dependencies import CurrentUser
from academy.courses.dependencies import CatalogServiceDep
from academy.courses.schemas import CourseOutlineResponse
from academy.progress.exceptions import CatalogUnavailableError


router = APIRouter(prefix="/v1/courses", tags=["courses"])


@router.get(
    "/{course_id}/outline",
    response_model=CourseOutlineResponse,
    summary="Get course outline",
)
async def get_course_outline(
    course_id: UUID,
    catalog: CatalogServiceDep,
    _user: CurrentUser,
) -> CourseOutlineResponse:
    """Sections and published lessons of a course, in sort order."""
    try:
        outline = await catalog.get_course_outline(course_id)
    except CatalogUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        ) from e
    if outline is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found",
        )
    return CourseOutlineResponse.from_outline(outline)
