"""Course catalog service layer.

Read-only access to the course tree used by progress tracking and lesson
navigation. Course authoring lives in the admin tooling, not here.
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from academy.courses.models import (
    Course,
    CourseOutline,
    Lesson,
    Section,
    SectionOutline,
)
from academy.progress.exceptions import CatalogUnavailableError
from academy.progress.store import DRIVER_ERRORS


if TYPE_CHECKING:
    from cassandra.cluster import ResultSet, Session
    from cassandra.query import PreparedStatement

logger = structlog.get_logger(__name__)


class CourseCatalogService:
    """Reads courses, sections and lessons."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_course = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.courses WHERE id = ?
        """)

        self._get_sections = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.sections_by_course WHERE course_id = ?
        """)

        self._get_course_lessons = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lessons_by_course WHERE course_id = ?
        """)

        self._get_lesson = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lessons WHERE id = ?
        """)

    async def _read(self, statement: "PreparedStatement", params: list) -> "ResultSet":
        """Run a catalog query.

        Raises:
            CatalogUnavailableError: If Cassandra cannot serve the read
        """
        try:
            return await self.session.aexecute(statement, params)
        except DRIVER_ERRORS as e:
            logger.exception("catalog_read_failed", params=[str(p) for p in params])
            raise CatalogUnavailableError from e

    async def get_course(self, course_id: UUID) -> Course | None:
        """Get course by ID."""
        result = await self._read(self._get_course, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None

    async def get_lesson(self, lesson_id: UUID) -> Lesson | None:
        """Get lesson by ID."""
        result = await self._read(self._get_lesson, [lesson_id])
        row = result.one()
        return Lesson.from_row(row) if row else None

    async def get_course_outline(
        self,
        course_id: UUID,
        *,
        published_only: bool = True,
    ) -> CourseOutline | None:
        """Get the ordered section/lesson tree of a course.

        Args:
            course_id: Course UUID
            published_only: Drop unpublished lessons (learner view)

        Returns:
            CourseOutline, or None if the course does not exist
        """
        course = await self.get_course(course_id)
        if course is None:
            return None

        section_rows = await self._read(self._get_sections, [course_id])
        sections = [Section.from_row(row) for row in section_rows]

        lesson_rows = await self._read(self._get_course_lessons, [course_id])
        lessons_by_section: dict[UUID, list[Lesson]] = {s.id: [] for s in sections}
        for row in lesson_rows:
            lesson = Lesson.from_row(row)
            if published_only and not lesson.is_published:
                continue
            if lesson.section_id not in lessons_by_section:
                # Orphan lesson (section removed), not part of the tree
                logger.warning(
                    "lesson_without_section",
                    course_id=str(course_id),
                    lesson_id=str(lesson.id),
                )
                continue
            lessons_by_section[lesson.section_id].append(lesson)

        return CourseOutline(
            course=course,
            sections=[SectionOutline(s, lessons_by_section[s.id]) for s in sections],
        )

    async def count_published_lessons(self, course_id: UUID) -> int:
        """Count published lessons reachable through the course's sections."""
        outline = await self.get_course_outline(course_id)
        return len(outline.lesson_ids()) if outline else 0
