"""Shared fixtures.

The in-memory stores subclass the Cassandra-backed ones and only replace
row access, so ``report_progress``/``mark_complete``/``recompute`` run their
real logic.
"""

import os
import tempfile
from collections.abc import Iterator
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="academy-test-logs-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from academy.courses.models import (  # noqa: E402
    Course,
    CourseOutline,
    Lesson,
    Section,
    SectionOutline,
)
from academy.courses.service import CourseCatalogService  # noqa: E402
from academy.progress.aggregator import EnrollmentAggregator  # noqa: E402
from academy.progress.enrollments import EnrollmentStore  # noqa: E402
from academy.progress.exceptions import (  # noqa: E402
    CatalogUnavailableError,
    EnrollmentSyncError,
    ProgressWriteError,
)
from academy.progress.models import Enrollment, LessonProgress  # noqa: E402
from academy.progress.service import ProgressService  # noqa: E402
from academy.progress.store import ProgressFields, ProgressKey, ProgressStore  # noqa: E402


# ==============================================================================
# In-memory collaborators
# ==============================================================================


class InMemoryProgressStore(ProgressStore):
    """Progress rows in a dict; supplied fields overwrite, others are kept."""

    def __init__(self) -> None:
        self.rows: dict[tuple[UUID, UUID], LessonProgress] = {}
        self.fail_writes = False
        self.writes: list[tuple[ProgressKey, ProgressFields]] = []

    async def upsert_progress(
        self, key: ProgressKey, progress_fields: ProgressFields
    ) -> LessonProgress:
        if self.fail_writes:
            raise ProgressWriteError
        self.writes.append((key, progress_fields))
        row = self.rows.get((key.user_id, key.lesson_id))
        if row is None:
            row = LessonProgress(
                user_id=key.user_id,
                lesson_id=key.lesson_id,
                course_id=progress_fields.course_id,
            )
            self.rows[(key.user_id, key.lesson_id)] = row
        row.course_id = progress_fields.course_id
        for name, value in progress_fields.supplied().items():
            setattr(row, name, value)
        return LessonProgress(**row.to_dict())

    async def get_progress(self, user_id: UUID, lesson_id: UUID) -> LessonProgress | None:
        row = self.rows.get((user_id, lesson_id))
        return LessonProgress(**row.to_dict()) if row else None

    async def list_course_progress(
        self, user_id: UUID, course_id: UUID
    ) -> list[LessonProgress]:
        return [
            LessonProgress(**row.to_dict())
            for (row_user, _), row in self.rows.items()
            if row_user == user_id and row.course_id == course_id
        ]

    async def list_user_progress(self, user_id: UUID) -> list[LessonProgress]:
        return [
            LessonProgress(**row.to_dict())
            for (row_user, _), row in self.rows.items()
            if row_user == user_id
        ]


class InMemoryEnrollmentStore(EnrollmentStore):
    def __init__(self) -> None:
        self.rows: dict[tuple[UUID, UUID], Enrollment] = {}
        self.fail_writes = False

    async def get_enrollment(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        row = self.rows.get((user_id, course_id))
        return Enrollment(**row.to_dict()) if row else None

    async def list_by_user(self, user_id: UUID) -> list[Enrollment]:
        return [
            Enrollment(**row.to_dict())
            for (row_user, _), row in self.rows.items()
            if row_user == user_id
        ]

    async def create(self, enrollment: Enrollment) -> Enrollment:
        self.rows[(enrollment.user_id, enrollment.course_id)] = Enrollment(
            **enrollment.to_dict()
        )
        return enrollment

    async def save_aggregate(self, enrollment: Enrollment) -> None:
        if self.fail_writes:
            raise EnrollmentSyncError
        self.rows[(enrollment.user_id, enrollment.course_id)] = Enrollment(
            **enrollment.to_dict()
        )

    async def touch_last_lesson(
        self,
        user_id: UUID,
        course_id: UUID,
        lesson_id: UUID,
        watched_at: datetime | None = None,
    ) -> None:
        row = self.rows[(user_id, course_id)]
        row.last_lesson_id = lesson_id
        row.last_watched_at = watched_at or datetime.now(UTC)


class InMemoryCatalog(CourseCatalogService):
    def __init__(self, *outlines: CourseOutline) -> None:
        self.outlines = {outline.course_id: outline for outline in outlines}
        self.fail_reads = False

    def _check(self) -> None:
        if self.fail_reads:
            raise CatalogUnavailableError

    async def get_course(self, course_id: UUID) -> Course | None:
        self._check()
        outline = self.outlines.get(course_id)
        return outline.course if outline else None

    async def get_lesson(self, lesson_id: UUID) -> Lesson | None:
        self._check()
        for outline in self.outlines.values():
            lesson = outline.find_lesson(lesson_id)
            if lesson:
                return lesson
        return None

    async def get_course_outline(
        self, course_id: UUID, *, published_only: bool = True
    ) -> CourseOutline | None:
        self._check()
        return self.outlines.get(course_id)


# ==============================================================================
# Course tree fixtures
# ==============================================================================


def make_outline(
    lessons_per_section: list[int],
    video_url: str = "https://cdn.example.com/videos/{lesson}/playlist.m3u8",
) -> CourseOutline:
    """Course with sections of the given sizes, declared out of sort order."""
    course = Course(id=uuid4(), title="Pharmacology 101", slug="pharmacology-101")
    sections = []
    for section_index, count in enumerate(lessons_per_section):
        section = Section(
            course_id=course.id,
            id=uuid4(),
            title=f"Section {section_index + 1}",
            sort_order=section_index + 1,
        )
        lessons = []
        for lesson_index in range(count):
            lesson_id = uuid4()
            lessons.append(
                Lesson(
                    course_id=course.id,
                    section_id=section.id,
                    id=lesson_id,
                    title=f"Lesson {section_index + 1}.{lesson_index + 1}",
                    sort_order=lesson_index + 1,
                    duration_seconds=600,
                    video_url=video_url.format(lesson=lesson_id),
                    is_published=True,
                )
            )
        sections.append(SectionOutline(section, list(reversed(lessons))))
    return CourseOutline(course=course, sections=list(reversed(sections)))


@pytest.fixture
def outline_factory():
    return make_outline


@pytest.fixture
def catalog_factory():
    return InMemoryCatalog


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def outline() -> CourseOutline:
    """Four lessons in two sections."""
    return make_outline([2, 2])


@pytest.fixture
def progress_store() -> InMemoryProgressStore:
    return InMemoryProgressStore()


@pytest.fixture
def enrollment_store() -> InMemoryEnrollmentStore:
    return InMemoryEnrollmentStore()


@pytest.fixture
def catalog(outline: CourseOutline) -> InMemoryCatalog:
    return InMemoryCatalog(outline)


@pytest.fixture
def aggregator(
    progress_store: InMemoryProgressStore,
    enrollment_store: InMemoryEnrollmentStore,
    catalog: InMemoryCatalog,
) -> EnrollmentAggregator:
    return EnrollmentAggregator(
        store=progress_store, enrollments=enrollment_store, catalog=catalog
    )


@pytest.fixture
def progress_service(
    progress_store: InMemoryProgressStore,
    enrollment_store: InMemoryEnrollmentStore,
    catalog: InMemoryCatalog,
) -> ProgressService:
    return ProgressService(
        store=progress_store, enrollments=enrollment_store, catalog=catalog
    )


@pytest.fixture
def player_service(
    progress_store: InMemoryProgressStore,
    enrollment_store: InMemoryEnrollmentStore,
    catalog: InMemoryCatalog,
    aggregator: EnrollmentAggregator,
):
    from academy.player.service import LessonPlayerService

    return LessonPlayerService(
        store=progress_store,
        aggregator=aggregator,
        catalog=catalog,
        enrollments=enrollment_store,
    )


@pytest.fixture
def enrolled(
    user_id: UUID,
    outline: CourseOutline,
    enrollment_store: InMemoryEnrollmentStore,
) -> Enrollment:
    enrollment = Enrollment(course_id=outline.course_id, user_id=user_id)
    enrollment_store.rows[(user_id, outline.course_id)] = enrollment
    return enrollment


# ==============================================================================
# HTTP fixtures
# ==============================================================================


@pytest.fixture
def client(catalog, progress_service, player_service) -> Iterator[TestClient]:
    """Test client with in-memory services (lifespan is not run)."""
    from academy.main import app

    app.state.catalog_service = catalog
    app.state.progress_service = progress_service
    app.state.player_service = player_service
    yield TestClient(app)
    for name in ("catalog_service", "progress_service", "player_service"):
        setattr(app.state, name, None)


@pytest.fixture
def auth_headers(user_id: UUID) -> dict[str, str]:
    from academy.auth.security import create_access_token

    token = create_access_token({"sub": str(user_id), "email": "student@example.com"})
    return {"Authorization": f"Bearer {token}"}
