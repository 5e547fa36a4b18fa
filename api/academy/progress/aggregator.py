"""Course completion aggregation.

``compute_progress`` is the pure rule; ``EnrollmentAggregator`` applies it
and persists the result on the enrollment whenever a lesson is completed.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from .exceptions import NotEnrolledError
from .models import LessonProgress


if TYPE_CHECKING:
    from academy.courses.service import CourseCatalogService

    from .enrollments import EnrollmentStore
    from .store import ProgressStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProgressSummary:
    completed_count: int
    total_count: int
    percentage: int

    @property
    def is_complete(self) -> bool:
        return self.total_count > 0 and self.completed_count >= self.total_count


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero (12.5 -> 13)."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_progress(
    lesson_ids: Iterable[UUID],
    progress_records: Iterable[LessonProgress],
    just_completed: UUID | None = None,
) -> ProgressSummary:
    """Compute course completion.

    Args:
        lesson_ids: Published lessons of the course
        progress_records: The user's progress rows (any course)
        just_completed: Lesson completed by the triggering write, counted
            even when the read of its row is stale

    Returns:
        ProgressSummary; percentage is 0 when the course has no lessons
    """
    course_lessons = set(lesson_ids)
    completed = {
        record.lesson_id
        for record in progress_records
        if record.is_completed and record.lesson_id in course_lessons
    }
    if just_completed is not None and just_completed in course_lessons:
        completed.add(just_completed)

    total = len(course_lessons)
    if total == 0:
        return ProgressSummary(completed_count=0, total_count=0, percentage=0)

    percentage = round_half_up(Decimal(100) * len(completed) / total)
    return ProgressSummary(
        completed_count=len(completed),
        total_count=total,
        percentage=percentage,
    )


class EnrollmentAggregator:
    """Recomputes and persists the enrollment completion percentage."""

    def __init__(
        self,
        store: "ProgressStore",
        enrollments: "EnrollmentStore",
        catalog: "CourseCatalogService",
    ):
        self.store = store
        self.enrollments = enrollments
        self.catalog = catalog

    async def summarize(
        self,
        user_id: UUID,
        course_id: UUID,
        just_completed_lesson_id: UUID | None = None,
    ) -> ProgressSummary:
        """Compute the current summary without writing anything."""
        outline = await self.catalog.get_course_outline(course_id)
        lesson_ids = outline.lesson_ids() if outline else []
        records = await self.store.list_course_progress(user_id, course_id)
        return compute_progress(lesson_ids, records, just_completed_lesson_id)

    async def recompute(
        self,
        user_id: UUID,
        course_id: UUID,
        just_completed_lesson_id: UUID,
    ) -> ProgressSummary:
        """Recompute the course percentage after a lesson completion.

        Raises:
            NotEnrolledError: If the user has no enrollment in the course
            EnrollmentSyncError: If the enrollment write fails; the lesson
                progress row is left as written
        """
        enrollment = await self.enrollments.get_enrollment(user_id, course_id)
        if enrollment is None:
            raise NotEnrolledError

        summary = await self.summarize(user_id, course_id, just_completed_lesson_id)

        now = datetime.now(UTC)
        if summary.percentage >= 100 and summary.total_count > 0:  # noqa: PLR2004
            completed_at = enrollment.completed_at or now
        else:
            completed_at = None

        enrollment.progress_percentage = summary.percentage
        enrollment.last_lesson_id = just_completed_lesson_id
        enrollment.last_watched_at = now
        enrollment.completed_at = completed_at
        await self.enrollments.save_aggregate(enrollment)

        logger.info(
            "enrollment_progress_updated",
            user_id=str(user_id),
            course_id=str(course_id),
            completed=summary.completed_count,
            total=summary.total_count,
            percentage=summary.percentage,
        )
        if completed_at is not None and completed_at == now:
            logger.info("course_completed", user_id=str(user_id), course_id=str(course_id))

        return summary
