"""Lesson player orchestration.

Ties the progress store, the enrollment aggregator and navigation together
for the three things a lesson page does: open a lesson, report the
playback position and complete the lesson.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from academy.core.context import LessonContext
from academy.courses.models import CourseOutline, Lesson
from academy.progress.aggregator import ProgressSummary
from academy.progress.exceptions import LessonNotInCourseError, NotEnrolledError
from academy.progress.models import Enrollment, LessonProgress
from academy.progress.navigation import (
    LessonNeighbors,
    NavigationTarget,
    find_neighbors,
    resolve_completion_destination,
)


if TYPE_CHECKING:
    from academy.courses.service import CourseCatalogService
    from academy.progress.aggregator import EnrollmentAggregator
    from academy.progress.enrollments import EnrollmentStore
    from academy.progress.store import ProgressStore

logger = structlog.get_logger(__name__)


@dataclass
class LessonView:
    """Everything a lesson page needs to start playback."""

    outline: CourseOutline
    lesson: Lesson
    neighbors: LessonNeighbors
    enrollment: Enrollment
    progress: LessonProgress | None

    @property
    def resume_position(self) -> int:
        """Stored position; a completed lesson restarts from the beginning."""
        if self.progress is None or self.progress.is_completed:
            return 0
        return self.progress.watched_seconds

    @property
    def is_completed(self) -> bool:
        return bool(self.progress and self.progress.is_completed)


@dataclass(frozen=True)
class CompletionResult:
    progress: LessonProgress
    summary: ProgressSummary
    destination: NavigationTarget


class LessonPlayerService:
    """Server side of the lesson player."""

    def __init__(
        self,
        store: "ProgressStore",
        aggregator: "EnrollmentAggregator",
        catalog: "CourseCatalogService",
        enrollments: "EnrollmentStore",
    ):
        self.store = store
        self.aggregator = aggregator
        self.catalog = catalog
        self.enrollments = enrollments

    async def _require_enrollment(self, user_id: UUID, course_id: UUID) -> Enrollment:
        enrollment = await self.enrollments.get_enrollment(user_id, course_id)
        if enrollment is None:
            raise NotEnrolledError
        return enrollment

    async def _require_lesson(
        self, course_id: UUID, lesson_id: UUID
    ) -> tuple[CourseOutline, Lesson]:
        outline = await self.catalog.get_course_outline(course_id)
        lesson = outline.find_lesson(lesson_id) if outline else None
        if outline is None or lesson is None:
            raise LessonNotInCourseError
        return outline, lesson

    async def open_lesson(
        self, user_id: UUID, course_id: UUID, lesson_id: UUID
    ) -> LessonView:
        """Load a lesson for playback and remember it as the last lesson.

        Raises:
            NotEnrolledError: If the user is not enrolled in the course
            LessonNotInCourseError: If the lesson is not a published lesson
                of the course
        """
        with LessonContext(user_id, course_id, lesson_id):
            enrollment = await self._require_enrollment(user_id, course_id)
            outline, lesson = await self._require_lesson(course_id, lesson_id)

            progress = await self.store.get_progress(user_id, lesson_id)
            await self.enrollments.touch_last_lesson(user_id, course_id, lesson_id)
            enrollment.last_lesson_id = lesson_id

            logger.info("lesson_opened", resumed_at=progress.watched_seconds if progress else 0)
            return LessonView(
                outline=outline,
                lesson=lesson,
                neighbors=find_neighbors(outline, lesson_id),
                enrollment=enrollment,
                progress=progress,
            )

    async def report_progress(
        self,
        user_id: UUID,
        course_id: UUID,
        lesson_id: UUID,
        watched_seconds: int,
        total_seconds: int,
    ) -> LessonProgress:
        """Store the playback position. Enrollment is not touched.

        Raises:
            LessonNotInCourseError: If the lesson is not in the course
            ProgressWriteError: If the progress row cannot be written
        """
        with LessonContext(user_id, course_id, lesson_id):
            await self._require_lesson(course_id, lesson_id)
            return await self.store.report_progress(
                user_id, lesson_id, course_id, watched_seconds, total_seconds
            )

    async def complete_lesson(
        self, user_id: UUID, course_id: UUID, lesson_id: UUID
    ) -> CompletionResult:
        """Mark a lesson complete, update the course percentage, pick the next page.

        Raises:
            NotEnrolledError: If the user is not enrolled in the course
            LessonNotInCourseError: If the lesson is not in the course
            ProgressWriteError: If the progress row cannot be written
            EnrollmentSyncError: If the enrollment cannot be updated; the
                progress row stays completed
        """
        with LessonContext(user_id, course_id, lesson_id):
            await self._require_enrollment(user_id, course_id)
            outline, lesson = await self._require_lesson(course_id, lesson_id)

            progress = await self.store.mark_complete(
                user_id, lesson_id, course_id, lesson.duration_seconds
            )
            summary = await self.aggregator.recompute(user_id, course_id, lesson_id)
            destination = resolve_completion_destination(outline, lesson_id)

            logger.info(
                "lesson_completed",
                percentage=summary.percentage,
                destination=destination.path,
                course_finished=destination.course_finished,
            )
            return CompletionResult(
                progress=progress, summary=summary, destination=destination
            )
