"""Tests for the course outline endpoint."""

from uuid import uuid4


def test_outline_in_course_order(client, auth_headers, outline) -> None:
    response = client.get(f"/v1/courses/{outline.course_id}/outline", headers=auth_headers)

    assert response.status_code == 200
    sections = response.json()["sections"]
    assert [s["title"] for s in sections] == ["Section 1", "Section 2"]


def test_unknown_course_is_404(client, auth_headers) -> None:
    response = client.get(f"/v1/courses/{uuid4()}/outline", headers=auth_headers)
    assert response.status_code == 404


def test_catalog_outage_is_503(client, auth_headers, outline, catalog) -> None:
    catalog.fail_reads = True

    response = client.get(f"/v1/courses/{outline.course_id}/outline", headers=auth_headers)

    assert response.status_code == 503
