"""Tests for LessonPlayerService."""

from uuid import uuid4

import pytest

from academy.progress.exceptions import (
    CatalogUnavailableError,
    EnrollmentSyncError,
    LessonNotInCourseError,
    NotEnrolledError,
)
from academy.progress.navigation import course_path, lesson_path


class TestOpenLesson:
    @pytest.mark.asyncio
    async def test_open_sets_last_lesson(
        self, player_service, enrollment_store, outline, user_id, enrolled
    ):
        lessons = outline.lesson_ids()

        view = await player_service.open_lesson(user_id, outline.course_id, lessons[1])

        assert view.lesson.id == lessons[1]
        assert view.neighbors.previous.id == lessons[0]
        assert view.neighbors.next.id == lessons[2]
        assert view.resume_position == 0
        stored = await enrollment_store.get_enrollment(user_id, outline.course_id)
        assert stored.last_lesson_id == lessons[1]
        assert stored.last_watched_at is not None

    @pytest.mark.asyncio
    async def test_open_resumes_partial_progress(
        self, player_service, progress_store, outline, user_id, enrolled
    ):
        lesson_id = outline.lesson_ids()[0]
        await progress_store.report_progress(user_id, lesson_id, outline.course_id, 45, 600)

        view = await player_service.open_lesson(user_id, outline.course_id, lesson_id)

        assert view.resume_position == 45
        assert view.is_completed is False

    @pytest.mark.asyncio
    async def test_open_completed_lesson_restarts(
        self, player_service, progress_store, outline, user_id, enrolled
    ):
        lesson_id = outline.lesson_ids()[0]
        await progress_store.mark_complete(user_id, lesson_id, outline.course_id, 600)

        view = await player_service.open_lesson(user_id, outline.course_id, lesson_id)

        assert view.resume_position == 0
        assert view.is_completed is True

    @pytest.mark.asyncio
    async def test_open_requires_enrollment(self, player_service, outline, user_id):
        with pytest.raises(NotEnrolledError):
            await player_service.open_lesson(
                user_id, outline.course_id, outline.lesson_ids()[0]
            )

    @pytest.mark.asyncio
    async def test_open_unknown_lesson(self, player_service, outline, user_id, enrolled):
        with pytest.raises(LessonNotInCourseError):
            await player_service.open_lesson(user_id, outline.course_id, uuid4())


class TestReportProgress:
    @pytest.mark.asyncio
    async def test_report_does_not_touch_enrollment(
        self, player_service, enrollment_store, outline, user_id, enrolled
    ):
        lesson_id = outline.lesson_ids()[0]

        progress = await player_service.report_progress(
            user_id, outline.course_id, lesson_id, 45, 600
        )

        assert progress.watched_seconds == 45
        stored = await enrollment_store.get_enrollment(user_id, outline.course_id)
        assert stored.progress_percentage == 0

    @pytest.mark.asyncio
    async def test_report_for_lesson_of_another_course_is_rejected(
        self, player_service, progress_store, outline, user_id, enrolled
    ):
        with pytest.raises(LessonNotInCourseError):
            await player_service.report_progress(
                user_id, uuid4(), outline.lesson_ids()[0], 45, 600
            )

        assert progress_store.writes == []

    @pytest.mark.asyncio
    async def test_report_for_unknown_lesson_is_rejected(
        self, player_service, progress_store, outline, user_id, enrolled
    ):
        with pytest.raises(LessonNotInCourseError):
            await player_service.report_progress(
                user_id, outline.course_id, uuid4(), 45, 600
            )

        assert progress_store.writes == []


class TestCompleteLesson:
    @pytest.mark.asyncio
    async def test_complete_moves_to_next_lesson(
        self, player_service, outline, user_id, enrolled
    ):
        lessons = outline.lesson_ids()

        result = await player_service.complete_lesson(user_id, outline.course_id, lessons[0])

        assert result.progress.is_completed is True
        assert result.progress.watched_seconds == 600
        assert result.summary.percentage == 25
        assert result.destination.path == lesson_path(outline.course_id, lessons[1])

    @pytest.mark.asyncio
    async def test_complete_last_lesson_returns_to_course(
        self, player_service, outline, user_id, enrolled
    ):
        result = await player_service.complete_lesson(
            user_id, outline.course_id, outline.lesson_ids()[-1]
        )

        assert result.destination.path == course_path(outline.course_id)
        assert result.destination.course_finished is True

    @pytest.mark.asyncio
    async def test_sync_failure_propagates_after_progress_write(
        self, player_service, progress_store, enrollment_store, outline, user_id, enrolled
    ):
        lesson_id = outline.lesson_ids()[0]
        enrollment_store.fail_writes = True

        with pytest.raises(EnrollmentSyncError):
            await player_service.complete_lesson(user_id, outline.course_id, lesson_id)

        progress = await progress_store.get_progress(user_id, lesson_id)
        assert progress.is_completed is True


class TestCatalogFailures:
    @pytest.mark.asyncio
    async def test_complete_with_catalog_down_raises_progress_error(
        self, player_service, catalog, progress_store, outline, user_id, enrolled
    ):
        catalog.fail_reads = True

        with pytest.raises(CatalogUnavailableError) as exc_info:
            await player_service.complete_lesson(
                user_id, outline.course_id, outline.lesson_ids()[0]
            )

        assert exc_info.value.code == "catalog_unavailable"
        assert progress_store.writes == []
