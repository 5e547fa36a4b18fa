"""Lesson progress store.

Per (user, lesson) watch state with upsert semantics. Writes are
last-write-wins: Cassandra resolves concurrent writes per cell by write
timestamp, and only the columns supplied in a write are touched, so fields
left out keep their stored values.

Rows are dual-written to ``lesson_progress`` (keyed by user/lesson) and
``lesson_progress_by_course`` (partitioned by user/course).

The store never touches enrollments.
"""

from dataclasses import dataclass, fields
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog
from cassandra import DriverException
from cassandra.cluster import NoHostAvailable

from .exceptions import ProgressReadError, ProgressWriteError
from .models import LessonProgress


if TYPE_CHECKING:
    from cassandra.cluster import Session
    from cassandra.query import PreparedStatement

logger = structlog.get_logger(__name__)

DRIVER_ERRORS = (DriverException, NoHostAvailable)


@dataclass(frozen=True)
class ProgressKey:
    """Upsert target of a progress row."""

    user_id: UUID
    lesson_id: UUID


@dataclass
class ProgressFields:
    """Columns to write. ``None`` means "not supplied, keep stored value"."""

    course_id: UUID
    watched_seconds: int | None = None
    total_seconds: int | None = None
    is_completed: bool | None = None
    completed_at: datetime | None = None
    last_watched_at: datetime | None = None

    def supplied(self) -> dict[str, Any]:
        """Supplied value columns, excluding course_id."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "course_id" and getattr(self, f.name) is not None
        }


class ProgressStore:
    """Reads and upserts lesson progress rows."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._upsert_statements: dict[
            tuple[str, tuple[str, ...]], "PreparedStatement"
        ] = {}
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_progress
            WHERE user_id = ? AND lesson_id = ?
        """)

        self._get_user_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_progress
            WHERE user_id = ?
        """)

        self._get_course_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_progress_by_course
            WHERE user_id = ? AND course_id = ?
        """)

    def _upsert_statement(self, table: str, columns: tuple[str, ...]) -> "PreparedStatement":
        """Prepared UPDATE for a column set, cached per (table, columns).

        CQL UPDATE is an upsert: it creates the row when missing and only
        writes the listed columns.
        """
        cache_key = (table, columns)
        statement = self._upsert_statements.get(cache_key)
        if statement is None:
            assignments = ", ".join(f"{column} = ?" for column in columns)
            if table == "lesson_progress":
                where = "user_id = ? AND lesson_id = ?"
            else:
                where = "user_id = ? AND course_id = ? AND lesson_id = ?"
            statement = self.session.prepare(
                f"UPDATE {self.keyspace}.{table} SET {assignments} WHERE {where}"
            )
            self._upsert_statements[cache_key] = statement
        return statement

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def upsert_progress(
        self, key: ProgressKey, progress_fields: ProgressFields
    ) -> LessonProgress:
        """Insert or update the row at ``key`` with the supplied fields.

        Returns:
            The stored row after the write

        Raises:
            ProgressWriteError: If the data store rejects the write
        """
        values = progress_fields.supplied()
        columns = tuple(values)
        params = list(values.values())

        try:
            await self.session.aexecute(
                self._upsert_statement("lesson_progress", ("course_id", *columns)),
                [progress_fields.course_id, *params, key.user_id, key.lesson_id],
            )
            if columns:
                await self.session.aexecute(
                    self._upsert_statement("lesson_progress_by_course", columns),
                    [*params, key.user_id, progress_fields.course_id, key.lesson_id],
                )
        except DRIVER_ERRORS as e:
            logger.exception(
                "progress_upsert_failed",
                user_id=str(key.user_id),
                lesson_id=str(key.lesson_id),
                columns=list(columns),
            )
            raise ProgressWriteError from e

        stored = await self.get_progress(key.user_id, key.lesson_id)
        if stored is None:
            # Not visible yet at the read consistency level; echo the write
            stored = LessonProgress(
                user_id=key.user_id,
                lesson_id=key.lesson_id,
                course_id=progress_fields.course_id,
                **values,
            )
        return stored

    async def report_progress(
        self,
        user_id: UUID,
        lesson_id: UUID,
        course_id: UUID,
        watched_seconds: int,
        total_seconds: int,
    ) -> LessonProgress:
        """Record the current playback position.

        No monotonic guard: the latest report wins, even when it moves
        backwards. Completion fields are never written here, so an existing
        completion is preserved and a new row starts incomplete.
        """
        progress = await self.upsert_progress(
            ProgressKey(user_id, lesson_id),
            ProgressFields(
                course_id=course_id,
                watched_seconds=max(0, int(watched_seconds)),
                total_seconds=max(0, int(total_seconds)),
                last_watched_at=datetime.now(UTC),
            ),
        )

        logger.debug(
            "progress_reported",
            user_id=str(user_id),
            lesson_id=str(lesson_id),
            watched_seconds=progress.watched_seconds,
        )
        return progress

    async def mark_complete(
        self,
        user_id: UUID,
        lesson_id: UUID,
        course_id: UUID,
        total_seconds: int,
    ) -> LessonProgress:
        """Mark a lesson complete, forcing watched_seconds to the duration."""
        now = datetime.now(UTC)
        total_seconds = max(0, int(total_seconds))
        progress = await self.upsert_progress(
            ProgressKey(user_id, lesson_id),
            ProgressFields(
                course_id=course_id,
                watched_seconds=total_seconds,
                total_seconds=total_seconds,
                is_completed=True,
                completed_at=now,
                last_watched_at=now,
            ),
        )

        logger.info(
            "lesson_marked_complete",
            user_id=str(user_id),
            lesson_id=str(lesson_id),
            course_id=str(course_id),
        )
        return progress

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get_progress(self, user_id: UUID, lesson_id: UUID) -> LessonProgress | None:
        """Get progress row for a lesson."""
        try:
            result = await self.session.aexecute(self._get_progress, [user_id, lesson_id])
        except DRIVER_ERRORS as e:
            logger.exception("progress_read_failed", user_id=str(user_id))
            raise ProgressReadError("Failed to load lesson progress") from e
        row = result.one()
        return LessonProgress.from_row(row) if row else None

    async def list_course_progress(
        self, user_id: UUID, course_id: UUID
    ) -> list[LessonProgress]:
        """Get all progress rows of a user within a course."""
        try:
            rows = await self.session.aexecute(
                self._get_course_progress, [user_id, course_id]
            )
        except DRIVER_ERRORS as e:
            logger.exception(
                "progress_read_failed", user_id=str(user_id), course_id=str(course_id)
            )
            raise ProgressReadError("Failed to load lesson progress") from e
        return [LessonProgress.from_row(row) for row in rows]

    async def list_user_progress(self, user_id: UUID) -> list[LessonProgress]:
        """Get all progress rows of a user."""
        try:
            rows = await self.session.aexecute(self._get_user_progress, [user_id])
        except DRIVER_ERRORS as e:
            logger.exception("progress_read_failed", user_id=str(user_id))
            raise ProgressReadError("Failed to load lesson progress") from e
        return [LessonProgress.from_row(row) for row in rows]
