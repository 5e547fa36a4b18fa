"""Tests for the progress, enrollment and playback HTTP endpoints."""

from uuid import uuid4

import httpx
import pytest
from fastapi.testclient import TestClient

from academy.main import app


MASTER_PLAYLIST = """#EXTM3U
#EXT-X-STREAM-INF:BANDWIDTH=800000,RESOLUTION=640x360
360p.m3u8
"""


@pytest.fixture
def manifest_client():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=MASTER_PLAYLIST))
    app.state.http_client = httpx.AsyncClient(transport=transport)
    yield app.state.http_client
    app.state.http_client = None


class TestAuthentication:
    def test_missing_token_is_401(self, client: TestClient, outline) -> None:
        response = client.get(f"/v1/progress/courses/{outline.course_id}")
        assert response.status_code == 401
        assert response.json()["error"] is True

    def test_invalid_token_is_401(self, client: TestClient) -> None:
        response = client.get(
            "/v1/progress/stats", headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401


class TestEnrollmentEndpoints:
    def test_enroll_then_conflict(self, client, auth_headers, outline) -> None:
        payload = {"course_id": str(outline.course_id)}

        response = client.post("/v1/enrollments", json=payload, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["status"] == "enrolled"
        assert response.json()["progress_percentage"] == 0

        response = client.post("/v1/enrollments", json=payload, headers=auth_headers)
        assert response.status_code == 409

    def test_enroll_unknown_course_is_404(self, client, auth_headers) -> None:
        response = client.post(
            "/v1/enrollments", json={"course_id": str(uuid4())}, headers=auth_headers
        )
        assert response.status_code == 404

    def test_get_missing_enrollment_is_404(self, client, auth_headers) -> None:
        response = client.get(f"/v1/enrollments/{uuid4()}", headers=auth_headers)
        assert response.status_code == 404

    def test_my_enrollments(self, client, auth_headers, enrolled) -> None:
        response = client.get("/v1/enrollments/my", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["total"] == 1

        response = client.get(
            "/v1/enrollments/my", params={"state": "completed"}, headers=auth_headers
        )
        assert response.json()["total"] == 0


class TestLessonEndpoints:
    def test_report_then_open_resumes(self, client, auth_headers, outline, enrolled) -> None:
        lesson_id = outline.lesson_ids()[1]

        response = client.put(
            f"/v1/progress/lessons/{lesson_id}",
            json={
                "course_id": str(outline.course_id),
                "watched_seconds": 45,
                "total_seconds": 600,
            },
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["is_completed"] is False

        response = client.get(
            f"/v1/progress/lessons/{lesson_id}",
            params={"course_id": str(outline.course_id)},
            headers=auth_headers,
        )
        data = response.json()
        assert response.status_code == 200
        assert data["resume_position_seconds"] == 45
        assert data["position"] == 1
        assert data["previous"]["id"] == str(outline.lesson_ids()[0])

    def test_negative_position_is_422(self, client, auth_headers, outline, enrolled) -> None:
        response = client.put(
            f"/v1/progress/lessons/{outline.lesson_ids()[0]}",
            json={
                "course_id": str(outline.course_id),
                "watched_seconds": -1,
                "total_seconds": 600,
            },
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_complete_returns_destination(
        self, client, auth_headers, outline, enrolled
    ) -> None:
        lessons = outline.lesson_ids()

        response = client.post(
            f"/v1/progress/lessons/{lessons[0]}/complete",
            json={"course_id": str(outline.course_id)},
            headers=auth_headers,
        )

        data = response.json()
        assert response.status_code == 200
        assert data["summary"]["percentage"] == 25
        assert data["destination"]["lesson_id"] == str(lessons[1])
        assert data["destination"]["course_finished"] is False

    def test_complete_without_enrollment_is_404(self, client, auth_headers, outline) -> None:
        response = client.post(
            f"/v1/progress/lessons/{outline.lesson_ids()[0]}/complete",
            json={"course_id": str(outline.course_id)},
            headers=auth_headers,
        )
        assert response.status_code == 404

    def test_enrollment_sync_failure_is_502(
        self, client, auth_headers, outline, enrolled, enrollment_store
    ) -> None:
        enrollment_store.fail_writes = True

        response = client.post(
            f"/v1/progress/lessons/{outline.lesson_ids()[0]}/complete",
            json={"course_id": str(outline.course_id)},
            headers=auth_headers,
        )

        assert response.status_code == 502

    def test_progress_write_failure_is_503(
        self, client, auth_headers, outline, enrolled, progress_store
    ) -> None:
        progress_store.fail_writes = True

        response = client.put(
            f"/v1/progress/lessons/{outline.lesson_ids()[0]}",
            json={
                "course_id": str(outline.course_id),
                "watched_seconds": 5,
                "total_seconds": 600,
            },
            headers=auth_headers,
        )

        assert response.status_code == 503


    def test_report_with_wrong_course_is_404(
        self, client, auth_headers, outline, enrolled, progress_store
    ) -> None:
        response = client.put(
            f"/v1/progress/lessons/{outline.lesson_ids()[0]}",
            json={
                "course_id": str(uuid4()),
                "watched_seconds": 5,
                "total_seconds": 600,
            },
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert progress_store.writes == []

    def test_catalog_outage_on_complete_is_503(
        self, client, auth_headers, outline, catalog, enrolled
    ) -> None:
        catalog.fail_reads = True

        response = client.post(
            f"/v1/progress/lessons/{outline.lesson_ids()[0]}/complete",
            json={"course_id": str(outline.course_id)},
            headers=auth_headers,
        )

        assert response.status_code == 503


class TestProgressQueries:
    def test_course_progress(self, client, auth_headers, outline, enrolled) -> None:
        client.post(
            f"/v1/progress/lessons/{outline.lesson_ids()[0]}/complete",
            json={"course_id": str(outline.course_id)},
            headers=auth_headers,
        )

        response = client.get(
            f"/v1/progress/courses/{outline.course_id}", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["summary"]["completed_count"] == 1

    def test_unknown_course_is_404(self, client, auth_headers) -> None:
        response = client.get(f"/v1/progress/courses/{uuid4()}", headers=auth_headers)
        assert response.status_code == 404

    def test_stats(self, client, auth_headers, enrolled) -> None:
        response = client.get("/v1/progress/stats", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["total_enrollments"] == 1


class TestPlaybackSource:
    def test_manifest_source(
        self, client, auth_headers, outline, enrolled, manifest_client
    ) -> None:
        lesson_id = outline.lesson_ids()[0]

        response = client.get(
            f"/v1/playback/lessons/{lesson_id}/source", headers=auth_headers
        )

        data = response.json()
        assert response.status_code == 200
        assert data["strategy"] == "adaptive"
        assert len(data["quality_levels"]) == 1
        assert data["progress_interval_seconds"] == 10.0

    def test_source_requires_enrollment(self, client, auth_headers, outline) -> None:
        response = client.get(
            f"/v1/playback/lessons/{outline.lesson_ids()[0]}/source",
            headers=auth_headers,
        )
        assert response.status_code == 404

    def test_unknown_lesson_is_404(self, client, auth_headers) -> None:
        response = client.get(
            f"/v1/playback/lessons/{uuid4()}/source", headers=auth_headers
        )
        assert response.status_code == 404


class TestServiceUnavailable:
    def test_missing_services_is_503(self, auth_headers) -> None:
        app.state.progress_service = None
        response = TestClient(app).get("/v1/progress/stats", headers=auth_headers)
        assert response.status_code == 503
