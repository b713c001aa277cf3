"""
Tests for the course catalogue routes.

Covers status mapping of error kinds, header-based identity and the
course lifecycle over HTTP.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from coursecore.api.deps import get_context
from coursecore.api.main import app


def auth(principal) -> dict[str, str]:
    return {"X-Principal-Id": str(principal.id), "X-Principal-Role": principal.role}


@pytest.fixture
def client(ctx):
    app.dependency_overrides[get_context] = lambda: ctx
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def draft_payload():
    return {
        "code": "cs101",
        "title": "Intro to Programming",
        "description": "Variables, loops and functions",
        "capacity": 2,
        "credits": 3,
        "category": "cs",
        "tags": ["Python"],
    }


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


class TestIdentity:
    def test_missing_headers(self, client):
        assert client.get("/api/courses").status_code == 401

    def test_unknown_role(self, client):
        resp = client.get(
            "/api/courses",
            headers={
                "X-Principal-Id": "00000000-0000-0000-0000-000000000001",
                "X-Principal-Role": "root",
            },
        )
        assert resp.status_code == 401

    def test_malformed_id(self, client):
        resp = client.get(
            "/api/courses", headers={"X-Principal-Id": "abc", "X-Principal-Role": "student"}
        )
        assert resp.status_code == 401


class TestCourseRoutes:
    def test_create_publish_get(self, client, teacher, student, draft_payload):
        resp = client.post("/api/courses", json=draft_payload, headers=auth(teacher))
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        course = body["data"]
        assert course["code"] == "CS101"
        assert course["status"] == "draft"
        assert course["tags"] == ["python"]

        # Draft is invisible to students
        resp = client.get(f"/api/courses/{course['id']}", headers=auth(student))
        assert resp.status_code == 404
        assert resp.json()["error"]["kind"] == "not-found"

        resp = client.post(f"/api/courses/{course['id']}/publish", headers=auth(teacher))
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "published"

        resp = client.get(f"/api/courses/{course['id']}", headers=auth(student))
        assert resp.status_code == 200
        assert resp.json()["data"]["title"] == "Intro to Programming"

    def test_student_cannot_create(self, client, student, draft_payload):
        resp = client.post("/api/courses", json=draft_payload, headers=auth(student))
        assert resp.status_code == 403
        assert resp.json() == {
            "success": False,
            "error": {
                "kind": "authorization",
                "message": "Not authorized to perform this operation",
            },
        }

    def test_malformed_body_is_validation(self, client, teacher, draft_payload):
        draft_payload["capacity"] = "lots"
        resp = client.post("/api/courses", json=draft_payload, headers=auth(teacher))
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "validation"

    def test_domain_validation(self, client, teacher, draft_payload):
        draft_payload["capacity"] = -5
        resp = client.post("/api/courses", json=draft_payload, headers=auth(teacher))
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "validation"

    def test_duplicate_code(self, client, teacher, draft_payload):
        client.post("/api/courses", json=draft_payload, headers=auth(teacher))
        resp = client.post("/api/courses", json=draft_payload, headers=auth(teacher))
        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "conflict"

    def test_publish_without_description(self, client, teacher, draft_payload):
        draft_payload["description"] = ""
        course = client.post("/api/courses", json=draft_payload, headers=auth(teacher)).json()
        resp = client.post(f"/api/courses/{course['data']['id']}/publish", headers=auth(teacher))
        assert resp.status_code == 400

    def test_patch(self, client, teacher, make_course):
        course = make_course()
        resp = client.patch(
            f"/api/courses/{course.id}", json={"credits": 5}, headers=auth(teacher)
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["credits"] == 5

        resp = client.patch(
            f"/api/courses/{course.id}", json={"status": "archived"}, headers=auth(teacher)
        )
        assert resp.status_code == 400

    def test_archive_draft_is_state_error(self, client, teacher, make_course):
        course = make_course(publish=False)
        resp = client.post(f"/api/courses/{course.id}/archive", headers=auth(teacher))
        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "state"

    def test_delete_required_course_conflicts(self, client, teacher, make_course):
        intro = make_course("CS100")
        make_course("CS200", prerequisites=[intro.id])
        resp = client.delete(f"/api/courses/{intro.id}", headers=auth(teacher))
        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "conflict"

    def test_delete(self, client, teacher, student, make_course):
        course = make_course()
        resp = client.delete(f"/api/courses/{course.id}", headers=auth(teacher))
        assert resp.status_code == 200
        assert resp.json()["data"]["deleted_at"] is not None
        assert client.get(f"/api/courses/{course.id}", headers=auth(student)).status_code == 404

    def test_unknown_course(self, client, student):
        resp = client.get(
            "/api/courses/00000000-0000-0000-0000-000000000000", headers=auth(student)
        )
        assert resp.status_code == 404


class TestSearchRoutes:
    def test_search(self, client, student, make_course):
        make_course("CS100", category="cs")
        make_course("MA100", category="math")
        make_course("CS200", publish=False, category="cs")

        resp = client.get("/api/courses", params={"category": "cs"}, headers=auth(student))
        data = resp.json()["data"]
        assert [c["code"] for c in data["items"]] == ["CS100"]
        assert data["total"] == 1
        assert data["has_more"] is False

    def test_tag_filter(self, client, student, make_course):
        make_course("CS100", tags=["python"])
        make_course("CS200", tags=["go"])
        make_course("MA100", tags=["algebra"])

        resp = client.get(
            "/api/courses",
            params={"tags": ["python", "go"], "sort_by": "code", "sort_order": "asc"},
            headers=auth(student),
        )
        assert [c["code"] for c in resp.json()["data"]["items"]] == ["CS100", "CS200"]

    def test_admin_lists_all_statuses(self, client, admin, make_course):
        make_course("CS100")
        make_course("CS200", publish=False)
        resp = client.get("/api/courses", params={"status": "all"}, headers=auth(admin))
        assert resp.json()["data"]["total"] == 2

    def test_bad_sort(self, client, student):
        resp = client.get("/api/courses", params={"sort_by": "rank"}, headers=auth(student))
        assert resp.status_code == 400

    def test_categories_and_levels(self, client, student, make_course):
        make_course("CS100", category="cs")
        resp = client.get("/api/courses/categories", headers=auth(student))
        assert resp.json()["data"] == ["cs"]

        resp = client.get("/api/courses/levels", headers=auth(student))
        assert resp.json()["data"] == ["beginner", "intermediate", "advanced"]

    def test_prerequisites(self, client, student, make_course):
        intro = make_course("CS100")
        course = make_course("CS200", prerequisites=[intro.id])

        resp = client.get(
            f"/api/courses/{course.id}/prerequisites",
            params={"student_id": str(student.id)},
            headers=auth(student),
        )

        data = resp.json()["data"]
        assert [c["code"] for c in data["prerequisites"]] == ["CS100"]
        assert data["missing"] == [str(intro.id)]
        assert data["satisfied"] is False
