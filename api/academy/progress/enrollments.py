"""Enrollment persistence.

Enrollments are dual-written to ``enrollments`` (by course) and
``enrollments_by_user`` (by user). Both tables share the same columns so
partial updates can target either one by primary key.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from .exceptions import EnrollmentSyncError, ProgressReadError
from .models import Enrollment
from .store import DRIVER_ERRORS


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class EnrollmentStore:
    """Reads and writes enrollment rows."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_enrollment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE course_id = ? AND user_id = ?
        """)

        self._get_user_enrollments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments_by_user
            WHERE user_id = ?
        """)

        self._insert_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments
            (course_id, user_id, progress_percentage, last_lesson_id,
             last_watched_at, completed_at, enrolled_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_enrollment_by_user = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments_by_user
            (user_id, course_id, progress_percentage, last_lesson_id,
             last_watched_at, completed_at, enrolled_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._update_aggregate = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET progress_percentage = ?, last_lesson_id = ?,
                last_watched_at = ?, completed_at = ?
            WHERE course_id = ? AND user_id = ?
        """)

        self._update_aggregate_by_user = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments_by_user
            SET progress_percentage = ?, last_lesson_id = ?,
                last_watched_at = ?, completed_at = ?
            WHERE user_id = ? AND course_id = ?
        """)

        self._update_last_lesson = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET last_lesson_id = ?, last_watched_at = ?
            WHERE course_id = ? AND user_id = ?
        """)

        self._update_last_lesson_by_user = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments_by_user
            SET last_lesson_id = ?, last_watched_at = ?
            WHERE user_id = ? AND course_id = ?
        """)

    async def get_enrollment(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        """Get enrollment by user and course.

        Raises:
            ProgressReadError: If the row cannot be read
        """
        try:
            result = await self.session.aexecute(
                self._get_enrollment, [course_id, user_id]
            )
        except DRIVER_ERRORS as e:
            logger.exception(
                "enrollment_read_failed", user_id=str(user_id), course_id=str(course_id)
            )
            raise ProgressReadError("Failed to load enrollment") from e
        row = result.one()
        return Enrollment.from_row(row) if row else None

    async def list_by_user(self, user_id: UUID) -> list[Enrollment]:
        """Get all enrollments of a user."""
        try:
            rows = await self.session.aexecute(self._get_user_enrollments, [user_id])
        except DRIVER_ERRORS as e:
            logger.exception("enrollment_read_failed", user_id=str(user_id))
            raise ProgressReadError("Failed to load enrollments") from e
        return [Enrollment.from_row(row) for row in rows]

    async def create(self, enrollment: Enrollment) -> Enrollment:
        """Insert a new enrollment into both tables.

        Raises:
            EnrollmentSyncError: If either insert fails
        """
        columns = [
            enrollment.progress_percentage,
            enrollment.last_lesson_id,
            enrollment.last_watched_at,
            enrollment.completed_at,
            enrollment.enrolled_at,
        ]
        try:
            await self.session.aexecute(
                self._insert_enrollment,
                [enrollment.course_id, enrollment.user_id, *columns],
            )
            await self.session.aexecute(
                self._insert_enrollment_by_user,
                [enrollment.user_id, enrollment.course_id, *columns],
            )
        except DRIVER_ERRORS as e:
            logger.exception(
                "enrollment_create_failed",
                user_id=str(enrollment.user_id),
                course_id=str(enrollment.course_id),
            )
            raise EnrollmentSyncError("Failed to create enrollment") from e
        return enrollment

    async def save_aggregate(self, enrollment: Enrollment) -> None:
        """Persist percentage, last lesson and completion timestamp.

        Raises:
            EnrollmentSyncError: If either table write fails
        """
        params = [
            enrollment.progress_percentage,
            enrollment.last_lesson_id,
            enrollment.last_watched_at,
            enrollment.completed_at,
        ]
        try:
            await self.session.aexecute(
                self._update_aggregate,
                [*params, enrollment.course_id, enrollment.user_id],
            )
            await self.session.aexecute(
                self._update_aggregate_by_user,
                [*params, enrollment.user_id, enrollment.course_id],
            )
        except DRIVER_ERRORS as e:
            logger.exception(
                "enrollment_sync_failed",
                user_id=str(enrollment.user_id),
                course_id=str(enrollment.course_id),
            )
            raise EnrollmentSyncError from e

    async def touch_last_lesson(
        self,
        user_id: UUID,
        course_id: UUID,
        lesson_id: UUID,
        watched_at: datetime | None = None,
    ) -> None:
        """Record the lesson the user opened last."""
        watched_at = watched_at or datetime.now(UTC)
        try:
            await self.session.aexecute(
                self._update_last_lesson, [lesson_id, watched_at, course_id, user_id]
            )
            await self.session.aexecute(
                self._update_last_lesson_by_user,
                [lesson_id, watched_at, user_id, course_id],
            )
        except DRIVER_ERRORS as e:
            logger.exception(
                "enrollment_touch_failed",
                user_id=str(user_id),
                course_id=str(course_id),
            )
            raise EnrollmentSyncError from e
