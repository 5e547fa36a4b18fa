"""Student progress service layer.

Business logic for:
- Course enrollment management
- Enrollment listings (in progress / completed)
- Learning statistics
- Course progress view (outline merged with progress rows)
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from academy.courses.models import CourseOutline

from .aggregator import ProgressSummary, compute_progress, round_half_up
from .exceptions import AlreadyEnrolledError, NotEnrolledError
from .models import Enrollment, EnrollmentStatus, LessonProgress


if TYPE_CHECKING:
    from academy.courses.service import CourseCatalogService

    from .enrollments import EnrollmentStore
    from .store import ProgressStore

logger = structlog.get_logger(__name__)

SECONDS_PER_HOUR = 3600

_OLDEST = datetime.min.replace(tzinfo=UTC)


@dataclass(frozen=True)
class LearningStats:
    total_enrollments: int
    completed_courses: int
    in_progress_courses: int
    completed_lessons: int
    total_watched_hours: int


@dataclass
class CourseProgressView:
    """Course tree merged with a user's progress rows."""

    outline: CourseOutline
    enrollment: Enrollment
    progress: dict[UUID, LessonProgress]
    summary: ProgressSummary
    resume_lesson_id: UUID | None
    resume_position_seconds: int


class ProgressService:
    """Enrollment and progress queries for a learner."""

    def __init__(
        self,
        store: "ProgressStore",
        enrollments: "EnrollmentStore",
        catalog: "CourseCatalogService",
    ):
        self.store = store
        self.enrollments = enrollments
        self.catalog = catalog

    # ==========================================================================
    # Enrollment Operations
    # ==========================================================================

    async def enroll_user(self, user_id: UUID, course_id: UUID) -> Enrollment:
        """Enroll user in a course at 0%.

        Raises:
            AlreadyEnrolledError: If user already enrolled
        """
        existing = await self.enrollments.get_enrollment(user_id, course_id)
        if existing:
            raise AlreadyEnrolledError

        enrollment = Enrollment(
            course_id=course_id,
            user_id=user_id,
            enrolled_at=datetime.now(UTC),
        )
        await self.enrollments.create(enrollment)

        logger.info("user_enrolled", user_id=str(user_id), course_id=str(course_id))
        return enrollment

    async def get_enrollment(self, user_id: UUID, course_id: UUID) -> Enrollment:
        """Get enrollment by user and course.

        Raises:
            NotEnrolledError: If there is no enrollment
        """
        enrollment = await self.enrollments.get_enrollment(user_id, course_id)
        if enrollment is None:
            raise NotEnrolledError
        return enrollment

    async def get_user_enrollments(
        self,
        user_id: UUID,
        state: EnrollmentStatus | None = None,
    ) -> list[Enrollment]:
        """Get a user's enrollments, most recently watched first.

        Args:
            user_id: User UUID
            state: IN_PROGRESS (0 < % < 100), COMPLETED (100%) or ENROLLED
        """
        enrollments = await self.enrollments.list_by_user(user_id)
        if state is not None:
            enrollments = [e for e in enrollments if e.status == state]
        return sorted(
            enrollments,
            key=lambda e: e.last_watched_at or e.enrolled_at or _OLDEST,
            reverse=True,
        )

    # ==========================================================================
    # Progress Queries
    # ==========================================================================

    async def get_learning_stats(self, user_id: UUID) -> LearningStats:
        """Aggregate a user's learning across all courses."""
        enrollments = await self.enrollments.list_by_user(user_id)
        records = await self.store.list_user_progress(user_id)

        watched_seconds = sum(record.watched_seconds for record in records)
        return LearningStats(
            total_enrollments=len(enrollments),
            completed_courses=sum(
                1 for e in enrollments if e.status == EnrollmentStatus.COMPLETED
            ),
            in_progress_courses=sum(
                1 for e in enrollments if e.status == EnrollmentStatus.IN_PROGRESS
            ),
            completed_lessons=sum(1 for record in records if record.is_completed),
            total_watched_hours=round_half_up(
                Decimal(watched_seconds) / SECONDS_PER_HOUR
            ),
        )

    async def get_course_progress(
        self, user_id: UUID, course_id: UUID
    ) -> CourseProgressView | None:
        """Course outline with per-lesson progress and the resume point.

        Returns None if the course does not exist.

        Raises:
            NotEnrolledError: If the user is not enrolled
        """
        enrollment = await self.get_enrollment(user_id, course_id)
        outline = await self.catalog.get_course_outline(course_id)
        if outline is None:
            return None

        records = await self.store.list_course_progress(user_id, course_id)
        by_lesson = {record.lesson_id: record for record in records}
        lesson_ids = outline.lesson_ids()

        resume_lesson_id = enrollment.last_lesson_id
        if resume_lesson_id not in lesson_ids:
            resume_lesson_id = next(
                (
                    lesson_id
                    for lesson_id in lesson_ids
                    if not (by_lesson.get(lesson_id) and by_lesson[lesson_id].is_completed)
                ),
                lesson_ids[0] if lesson_ids else None,
            )

        resume_record = by_lesson.get(resume_lesson_id) if resume_lesson_id else None
        # A completed lesson restarts from the beginning
        resume_position = 0
        if resume_record and not resume_record.is_completed:
            resume_position = resume_record.watched_seconds
        return CourseProgressView(
            outline=outline,
            enrollment=enrollment,
            progress=by_lesson,
            summary=compute_progress(lesson_ids, records),
            resume_lesson_id=resume_lesson_id,
            resume_position_seconds=resume_position,
        )
