"""Database models for the course catalog.

Cassandra table definitions for:
- Courses: Main course table
- Sections: Ordered sections of a course (clustered by sort_order)
- Lessons: Lesson table plus a per-course copy clustered by section/sort_order

The catalog is read-only for the progress subsystem: a course is a strict
tree of ordered sections, each holding ordered lessons.
"""

import re
import unicodedata
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class ContentStatus(str, Enum):
    """Content publication status."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    id UUID PRIMARY KEY,
    title TEXT,
    slug TEXT,
    status TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# Sections of a course, read in sort_order
SECTIONS_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.sections_by_course (
    course_id UUID,
    sort_order INT,
    section_id UUID,
    title TEXT,
    PRIMARY KEY (course_id, sort_order, section_id)
) WITH CLUSTERING ORDER BY (sort_order ASC, section_id ASC)
"""

LESSON_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lessons (
    id UUID PRIMARY KEY,
    course_id UUID,
    section_id UUID,
    title TEXT,
    sort_order INT,
    duration_seconds INT,
    video_url TEXT,
    is_published BOOLEAN,
    created_at TIMESTAMP
)
"""

# All lessons of a course in one partition (one read per outline)
LESSONS_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lessons_by_course (
    course_id UUID,
    section_id UUID,
    sort_order INT,
    lesson_id UUID,
    title TEXT,
    duration_seconds INT,
    video_url TEXT,
    is_published BOOLEAN,
    PRIMARY KEY (course_id, section_id, sort_order, lesson_id)
) WITH CLUSTERING ORDER BY (section_id ASC, sort_order ASC, lesson_id ASC)
"""

COURSES_TABLES_CQL = [
    COURSE_TABLE_CQL,
    SECTIONS_BY_COURSE_TABLE_CQL,
    LESSON_TABLE_CQL,
    LESSONS_BY_COURSE_TABLE_CQL,
]


# ==============================================================================
# Helper Functions
# ==============================================================================


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def generate_slug(title: str) -> str:
    """Generate URL-friendly slug from title."""
    slug = unicodedata.normalize("NFKD", title)
    slug = slug.encode("ascii", "ignore").decode("ascii")
    slug = slug.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    return re.sub(r"[-\s]+", "-", slug)


# ==============================================================================
# Entity Classes
# ==============================================================================


class Course:
    """Course entity, the root of the section/lesson tree."""

    def __init__(
        self,
        id: UUID | None = None,
        title: str = "",
        slug: str | None = None,
        status: str = ContentStatus.DRAFT.value,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.title = title.strip()
        self.slug = slug or generate_slug(title)
        self.status = status
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        """Create Course instance from Cassandra row."""
        return cls(
            id=row.id,
            title=row.title or "",
            slug=row.slug,
            status=row.status or ContentStatus.DRAFT.value,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<Course {self.title} ({self.status})>"


class Section:
    """Ordered section of a course."""

    def __init__(
        self,
        course_id: UUID,
        id: UUID | None = None,
        title: str = "",
        sort_order: int = 0,
    ):
        self.id = id or uuid4()
        self.course_id = course_id
        self.title = title
        self.sort_order = sort_order

    @classmethod
    def from_row(cls, row: Any) -> "Section":
        """Create Section instance from a sections_by_course row."""
        return cls(
            course_id=row.course_id,
            id=row.section_id,
            title=row.title or "",
            sort_order=row.sort_order or 0,
        )

    def __repr__(self) -> str:
        return f"<Section {self.title} #{self.sort_order}>"


class Lesson:
    """Lesson entity.

    Attributes:
        id: Unique identifier
        course_id: Owning course
        section_id: Owning section
        title: Lesson title
        sort_order: Position inside the section
        duration_seconds: Video duration (0 when unknown)
        video_url: HLS manifest or progressive file URL
        is_published: Only published lessons are exposed to learners
    """

    def __init__(
        self,
        course_id: UUID,
        section_id: UUID,
        id: UUID | None = None,
        title: str = "",
        sort_order: int = 0,
        duration_seconds: int = 0,
        video_url: str | None = None,
        is_published: bool = True,
    ):
        self.id = id or uuid4()
        self.course_id = course_id
        self.section_id = section_id
        self.title = title
        self.sort_order = sort_order
        self.duration_seconds = duration_seconds
        self.video_url = video_url
        self.is_published = is_published

    @classmethod
    def from_row(cls, row: Any) -> "Lesson":
        """Create Lesson from either the lessons or lessons_by_course table."""
        lesson_id = getattr(row, "lesson_id", None) or row.id
        return cls(
            course_id=row.course_id,
            section_id=row.section_id,
            id=lesson_id,
            title=row.title or "",
            sort_order=row.sort_order or 0,
            duration_seconds=row.duration_seconds or 0,
            video_url=row.video_url,
            is_published=bool(row.is_published),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "course_id": self.course_id,
            "section_id": self.section_id,
            "title": self.title,
            "sort_order": self.sort_order,
            "duration_seconds": self.duration_seconds,
            "video_url": self.video_url,
            "is_published": self.is_published,
        }

    def __repr__(self) -> str:
        return f"<Lesson {self.title} #{self.sort_order}>"


class SectionOutline:
    """A section with its lessons, both in sort order."""

    def __init__(self, section: Section, lessons: list[Lesson]):
        self.section = section
        self.lessons = sorted(lessons, key=lambda lesson: lesson.sort_order)


class CourseOutline:
    """Read-only course tree used for progress and navigation."""

    def __init__(self, course: Course, sections: list[SectionOutline]):
        self.course = course
        self.sections = sorted(sections, key=lambda s: s.section.sort_order)

    @property
    def course_id(self) -> UUID:
        return self.course.id

    def lesson_ids(self) -> list[UUID]:
        """Lesson ids in course order."""
        return [lesson.id for s in self.sections for lesson in s.lessons]

    def find_lesson(self, lesson_id: UUID) -> Lesson | None:
        for section in self.sections:
            for lesson in section.lessons:
                if lesson.id == lesson_id:
                    return lesson
        return None
