"""Database models for lesson progress and enrollments.

Cassandra table definitions for:
- Lesson progress: watched seconds and completion flag per (user, lesson)
- Lesson progress by course: lookup copy for per-course reads
- Enrollments: course enrollment with the derived completion percentage
- Enrollments by user: lookup for "my courses" queries

Architecture: Dual-write pattern so progress can be read by lesson and by
course, and enrollments by course and by user.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from academy.courses.models import ensure_utc_aware


class EnrollmentStatus(str, Enum):
    """Enrollment status, derived from the completion percentage."""

    ENROLLED = "enrolled"  # 0%
    IN_PROGRESS = "in_progress"  # 0 < % < 100
    COMPLETED = "completed"  # 100%


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Upsert target: (user_id, lesson_id)
LESSON_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lesson_progress (
    user_id UUID,
    lesson_id UUID,
    course_id UUID,
    watched_seconds INT,
    total_seconds INT,
    is_completed BOOLEAN,
    completed_at TIMESTAMP,
    last_watched_at TIMESTAMP,
    PRIMARY KEY ((user_id), lesson_id)
)
"""

# Same rows partitioned by (user_id, course_id) for course progress reads
LESSON_PROGRESS_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lesson_progress_by_course (
    user_id UUID,
    course_id UUID,
    lesson_id UUID,
    watched_seconds INT,
    total_seconds INT,
    is_completed BOOLEAN,
    completed_at TIMESTAMP,
    last_watched_at TIMESTAMP,
    PRIMARY KEY ((user_id, course_id), lesson_id)
)
"""

ENROLLMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments (
    course_id UUID,
    user_id UUID,
    progress_percentage INT,
    last_lesson_id UUID,
    last_watched_at TIMESTAMP,
    completed_at TIMESTAMP,
    enrolled_at TIMESTAMP,
    PRIMARY KEY (course_id, user_id)
)
"""

ENROLLMENTS_BY_USER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments_by_user (
    user_id UUID,
    course_id UUID,
    progress_percentage INT,
    last_lesson_id UUID,
    last_watched_at TIMESTAMP,
    completed_at TIMESTAMP,
    enrolled_at TIMESTAMP,
    PRIMARY KEY (user_id, course_id)
)
"""

PROGRESS_TABLES_CQL = [
    LESSON_PROGRESS_TABLE_CQL,
    LESSON_PROGRESS_BY_COURSE_TABLE_CQL,
    ENROLLMENTS_TABLE_CQL,
    ENROLLMENTS_BY_USER_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class LessonProgress:
    """Watch state of one lesson for one user.

    Attributes:
        user_id: User UUID (key)
        lesson_id: Lesson UUID (key)
        course_id: Course UUID (denormalized)
        watched_seconds: Last reported playback position, not a high-water mark
        total_seconds: Lesson duration
        is_completed: Completion flag
        completed_at: Set whenever is_completed is true
        last_watched_at: Timestamp of the last write
    """

    def __init__(
        self,
        user_id: UUID,
        lesson_id: UUID,
        course_id: UUID,
        watched_seconds: int = 0,
        total_seconds: int = 0,
        is_completed: bool = False,
        completed_at: datetime | None = None,
        last_watched_at: datetime | None = None,
    ):
        self.user_id = user_id
        self.lesson_id = lesson_id
        self.course_id = course_id
        self.watched_seconds = watched_seconds
        self.total_seconds = total_seconds
        self.is_completed = is_completed
        self.completed_at = ensure_utc_aware(completed_at)
        self.last_watched_at = ensure_utc_aware(last_watched_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "LessonProgress":
        """Create LessonProgress instance from Cassandra row."""
        return cls(
            user_id=row.user_id,
            lesson_id=row.lesson_id,
            course_id=row.course_id,
            watched_seconds=row.watched_seconds or 0,
            total_seconds=row.total_seconds or 0,
            is_completed=bool(row.is_completed),
            completed_at=row.completed_at,
            last_watched_at=row.last_watched_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "lesson_id": self.lesson_id,
            "course_id": self.course_id,
            "watched_seconds": self.watched_seconds,
            "total_seconds": self.total_seconds,
            "is_completed": self.is_completed,
            "completed_at": self.completed_at,
            "last_watched_at": self.last_watched_at,
        }

    def __repr__(self) -> str:
        return (
            f"<LessonProgress user={self.user_id} lesson={self.lesson_id} "
            f"{self.watched_seconds}/{self.total_seconds}s "
            f"{'done' if self.is_completed else 'open'}>"
        )


class Enrollment:
    """Course enrollment with the aggregated completion percentage.

    progress_percentage is derived: it equals
    round(100 * completed / total) as of the last recompute and is only
    refreshed when a lesson is marked complete.
    """

    def __init__(
        self,
        course_id: UUID,
        user_id: UUID,
        progress_percentage: int = 0,
        last_lesson_id: UUID | None = None,
        last_watched_at: datetime | None = None,
        completed_at: datetime | None = None,
        enrolled_at: datetime | None = None,
    ):
        self.course_id = course_id
        self.user_id = user_id
        self.progress_percentage = progress_percentage
        self.last_lesson_id = last_lesson_id
        self.last_watched_at = ensure_utc_aware(last_watched_at)
        self.completed_at = ensure_utc_aware(completed_at)
        self.enrolled_at = ensure_utc_aware(enrolled_at) or datetime.now(UTC)

    @property
    def status(self) -> EnrollmentStatus:
        if self.progress_percentage >= 100:  # noqa: PLR2004
            return EnrollmentStatus.COMPLETED
        if self.progress_percentage > 0:
            return EnrollmentStatus.IN_PROGRESS
        return EnrollmentStatus.ENROLLED

    @property
    def is_completed(self) -> bool:
        return self.status == EnrollmentStatus.COMPLETED

    @classmethod
    def from_row(cls, row: Any) -> "Enrollment":
        """Create Enrollment instance from Cassandra row."""
        return cls(
            course_id=row.course_id,
            user_id=row.user_id,
            progress_percentage=row.progress_percentage or 0,
            last_lesson_id=row.last_lesson_id,
            last_watched_at=row.last_watched_at,
            completed_at=row.completed_at,
            enrolled_at=row.enrolled_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "course_id": self.course_id,
            "user_id": self.user_id,
            "progress_percentage": self.progress_percentage,
            "last_lesson_id": self.last_lesson_id,
            "last_watched_at": self.last_watched_at,
            "completed_at": self.completed_at,
            "enrolled_at": self.enrolled_at,
        }

    def __repr__(self) -> str:
        return (
            f"<Enrollment user={self.user_id} course={self.course_id} "
            f"{self.progress_percentage}%>"
        )
