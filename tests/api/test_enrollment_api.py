"""
Tests for enrollment, progress, feedback and analytics routes.
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


def enroll(client, principal, course_id, student_id=None):
    body = {"student_id": str(student_id)} if student_id else None
    return client.post(f"/api/courses/{course_id}/enrollments", json=body, headers=auth(principal))


class TestEnrollmentRoutes:
    def test_enroll_and_duplicate(self, client, student, make_course):
        course = make_course()

        resp = enroll(client, student, course.id)
        assert resp.status_code == 201
        assert resp.json()["data"]["status"] == "active"

        resp = enroll(client, student, course.id)
        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "conflict"

    def test_full_course(self, client, make_student, make_course):
        course = make_course(capacity=1)
        assert enroll(client, make_student(), course.id).status_code == 201

        resp = enroll(client, make_student(), course.id)
        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "capacity"

    def test_missing_prerequisite(self, client, student, make_course):
        intro = make_course("CS100")
        course = make_course("CS200", prerequisites=[intro.id])

        resp = enroll(client, student, course.id)
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "missing-prerequisite"

    def test_draft_course(self, client, student, make_course):
        course = make_course(publish=False)
        resp = enroll(client, student, course.id)
        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "state"

    def test_admin_enrolls_on_behalf(self, client, admin, student, make_course):
        course = make_course()
        resp = enroll(client, admin, course.id, student_id=student.id)
        assert resp.status_code == 201
        assert resp.json()["data"]["student_id"] == str(student.id)

    def test_eligibility(self, client, student, make_course):
        course = make_course(capacity=0)
        resp = client.get(f"/api/courses/{course.id}/eligibility", headers=auth(student))
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["eligible"] is False
        assert data["reasons"] == ["course-full"]

    def test_roster_scopes(self, client, teacher, student, make_student, make_course):
        course = make_course()
        other = make_student()
        enroll(client, student, course.id)
        enroll(client, other, course.id)

        roster = client.get(f"/api/courses/{course.id}/enrollments", headers=auth(teacher))
        assert roster.json()["data"]["scope"] == "roster"
        assert len(roster.json()["data"]["enrollments"]) == 2

        own = client.get(f"/api/courses/{course.id}/enrollments", headers=auth(student))
        assert own.json()["data"]["scope"] == "self"
        assert [e["student_id"] for e in own.json()["data"]["enrollments"]] == [str(student.id)]

    def test_unenroll_and_complete(self, client, teacher, student, make_student, make_course):
        course = make_course()
        other = make_student()
        enroll(client, student, course.id)
        enroll(client, other, course.id)

        resp = client.delete(
            f"/api/courses/{course.id}/enrollments/{student.id}", headers=auth(student)
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "dropped"

        resp = client.delete(
            f"/api/courses/{course.id}/enrollments/{student.id}", headers=auth(student)
        )
        assert resp.status_code == 404

        resp = client.post(
            f"/api/courses/{course.id}/enrollments/{other.id}/complete", headers=auth(teacher)
        )
        assert resp.json()["data"]["status"] == "completed"

    def test_status_and_student_listing(self, client, student, make_course):
        course = make_course()
        enroll(client, student, course.id)

        resp = client.get(
            f"/api/courses/{course.id}/enrollments/{student.id}", headers=auth(student)
        )
        assert resp.json()["data"]["is_enrolled"] is True

        resp = client.get(
            f"/api/students/{student.id}/enrollments",
            params={"status": "active"},
            headers=auth(student),
        )
        assert [e["course_id"] for e in resp.json()["data"]] == [str(course.id)]

    def test_classmate_listing_forbidden(self, client, student, make_student, make_course):
        course = make_course()
        other = make_student()
        enroll(client, other, course.id)
        resp = client.get(f"/api/students/{other.id}/enrollments", headers=auth(student))
        assert resp.status_code == 403


class TestProgressRoutes:
    def test_update_and_read(self, client, teacher, student, make_course):
        course = make_course()
        enroll(client, student, course.id)
        url = f"/api/courses/{course.id}/progress/{student.id}"

        resp = client.put(
            url, json={"percentage": 75, "completed_modules": ["m1"]}, headers=auth(student)
        )
        assert resp.status_code == 200

        resp = client.put(url, json={"percentage": 150}, headers=auth(student))
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "validation"

        resp = client.get(url, headers=auth(student))
        assert resp.json()["data"]["record"]["completion_percentage"] == 75.0
        assert resp.json()["data"]["aggregate"] is None

        resp = client.get(url, headers=auth(teacher))
        assert resp.json()["data"]["aggregate"]["distribution"]["75-99"] == 1

    def test_not_enrolled(self, client, student, make_course):
        course = make_course()
        resp = client.put(
            f"/api/courses/{course.id}/progress/{student.id}",
            json={"percentage": 10},
            headers=auth(student),
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["kind"] == "forbidden"


class TestFeedbackRoutes:
    def test_submit_and_read(self, client, teacher, student, make_course):
        course = make_course()
        enroll(client, student, course.id)
        url = f"/api/courses/{course.id}/feedback"

        resp = client.post(
            url,
            json={"rating": 4, "comment": "Solid", "categories": {"pace": 3}},
            headers=auth(student),
        )
        assert resp.status_code == 201

        resp = client.post(url, json={"rating": 5}, headers=auth(student))
        assert resp.status_code == 409

        resp = client.get(url, headers=auth(teacher))
        data = resp.json()["data"]
        assert data["count"] == 1
        assert data["average_rating"] == 4.0
        assert data["category_breakdown"]["pace"]["average"] == 3.0

    def test_rating_out_of_range(self, client, student, make_course):
        course = make_course()
        enroll(client, student, course.id)
        resp = client.post(
            f"/api/courses/{course.id}/feedback", json={"rating": 7}, headers=auth(student)
        )
        assert resp.status_code == 400


class TestAnalyticsRoutes:
    def test_platform_stats(self, client, admin, student, make_course):
        course = make_course()
        enroll(client, student, course.id)

        resp = client.get("/api/analytics/stats", headers=auth(admin))
        assert resp.status_code == 200
        assert resp.json()["data"]["active_enrollments"] == 1

        assert client.get("/api/analytics/stats", headers=auth(student)).status_code == 403

    def test_course_summary(self, client, teacher, make_course):
        course = make_course(capacity=10)
        resp = client.get(f"/api/analytics/courses/{course.id}", headers=auth(teacher))
        assert resp.status_code == 200
        assert resp.json()["data"]["available_seats"] == 10
