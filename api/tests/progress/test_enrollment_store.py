"""Tests for enrollment persistence."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
from cassandra import DriverException
from cassandra.cluster import NoHostAvailable, Session

from academy.progress.enrollments import EnrollmentStore
from academy.progress.exceptions import EnrollmentSyncError, ProgressReadError
from academy.progress.models import Enrollment


@pytest.fixture
def mock_session():
    """Mock Cassandra session."""
    session = Mock(spec=Session)
    session.prepare = Mock(side_effect=lambda cql: cql.strip())
    session.aexecute = AsyncMock(return_value=Mock(one=Mock(return_value=None)))
    return session


@pytest.fixture
def store(mock_session) -> EnrollmentStore:
    return EnrollmentStore(session=mock_session, keyspace="test_keyspace")


class TestReads:
    @pytest.mark.asyncio
    async def test_missing_enrollment_is_none(self, store):
        assert await store.get_enrollment(uuid4(), uuid4()) is None

    @pytest.mark.asyncio
    async def test_get_enrollment_maps_row(self, store, mock_session):
        user_id, course_id = uuid4(), uuid4()
        row = SimpleNamespace(
            course_id=course_id,
            user_id=user_id,
            progress_percentage=50,
            last_lesson_id=None,
            last_watched_at=None,
            completed_at=None,
            enrolled_at=datetime.now(UTC),
        )
        mock_session.aexecute = AsyncMock(return_value=Mock(one=Mock(return_value=row)))

        enrollment = await store.get_enrollment(user_id, course_id)

        assert enrollment.progress_percentage == 50
        statement, params = mock_session.aexecute.call_args.args
        assert "test_keyspace.enrollments" in statement
        assert params == [course_id, user_id]

    @pytest.mark.asyncio
    async def test_get_enrollment_driver_error_is_wrapped(self, store, mock_session):
        mock_session.aexecute = AsyncMock(side_effect=DriverException("timeout"))

        with pytest.raises(ProgressReadError) as exc_info:
            await store.get_enrollment(uuid4(), uuid4())
        assert exc_info.value.code == "progress_read_failed"

    @pytest.mark.asyncio
    async def test_list_by_user_no_host_is_wrapped(self, store, mock_session):
        mock_session.aexecute = AsyncMock(side_effect=NoHostAvailable("down", {}))

        with pytest.raises(ProgressReadError):
            await store.list_by_user(uuid4())


class TestWrites:
    @pytest.mark.asyncio
    async def test_create_writes_both_tables(self, store, mock_session):
        enrollment = Enrollment(course_id=uuid4(), user_id=uuid4())

        await store.create(enrollment)

        by_course, by_user = mock_session.aexecute.call_args_list
        assert by_course.args[1][:2] == [enrollment.course_id, enrollment.user_id]
        assert "enrollments_by_user" in by_user.args[0]
        assert by_user.args[1][:2] == [enrollment.user_id, enrollment.course_id]

    @pytest.mark.asyncio
    async def test_create_driver_error_is_wrapped(self, store, mock_session):
        mock_session.aexecute = AsyncMock(side_effect=DriverException("timeout"))

        with pytest.raises(EnrollmentSyncError):
            await store.create(Enrollment(course_id=uuid4(), user_id=uuid4()))
