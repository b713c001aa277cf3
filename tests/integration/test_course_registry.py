import sqlite3
from datetime import datetime
from uuid import uuid4

import pytest

from coursecore.components.courses import (
    CreateCourseInput,
    SearchCoursesInput,
    run_create,
    run_search,
)
from coursecore.domain.errors import (
    AuthorizationError,
    ConflictError,
    DuplicateCodeError,
    NotFoundError,
    StateError,
    ValidationError,
)


class TestCreate:
    def test_teacher_creates_draft(self, ctx, teacher):
        course = ctx.registry.create(
            teacher,
            {
                "code": " cs101 ",
                "title": "Intro",
                "capacity": 10,
                "tags": ["Python", "python", " intro "],
            },
        )
        assert course.code == "CS101"
        assert course.status == "draft"
        assert course.instructor_id == teacher.id
        assert course.tags == ["python", "intro"]
        assert course.enrolled_count == 0

    def test_student_cannot_create(self, ctx, student):
        with pytest.raises(AuthorizationError):
            ctx.registry.create(student, {"code": "CS101", "title": "Intro"})

    def test_teacher_cannot_assign_other_instructor(self, ctx, teacher):
        with pytest.raises(AuthorizationError):
            ctx.registry.create(
                teacher, {"code": "CS101", "title": "Intro", "instructor_id": uuid4()}
            )

    def test_admin_assigns_instructor(self, ctx, admin, teacher):
        course = ctx.registry.create(
            admin, {"code": "CS101", "title": "Intro", "instructor_id": str(teacher.id)}
        )
        assert course.instructor_id == teacher.id

    @pytest.mark.parametrize(
        "draft,field",
        [
            ({"code": "", "title": "Intro"}, "code"),
            ({"code": "cs 101!", "title": "Intro"}, "code"),
            ({"code": "CS101", "title": "  "}, "title"),
            ({"code": "CS101", "title": "x" * 201}, "title"),
            ({"code": "CS101", "title": "Intro", "capacity": -1}, "capacity"),
            ({"code": "CS101", "title": "Intro", "capacity": 10001}, "capacity"),
            ({"code": "CS101", "title": "Intro", "capacity": True}, "capacity"),
            ({"code": "CS101", "title": "Intro", "credits": -2}, "credits"),
            ({"code": "CS101", "title": "Intro", "level": "expert"}, "level"),
            ({"code": "CS101", "title": "Intro", "prerequisites": ["not-a-uuid"]}, "prerequisites"),
            ({"code": "CS101", "title": "Intro", "prerequisites": [str(uuid4())]}, "prerequisites"),
        ],
    )
    def test_invalid_drafts(self, ctx, teacher, draft, field):
        with pytest.raises(ValidationError) as exc:
            ctx.registry.create(teacher, draft)
        assert exc.value.field == field

    def test_duplicate_code_case_insensitive(self, ctx, teacher):
        ctx.registry.create(teacher, {"code": "CS101", "title": "Intro"})
        with pytest.raises(DuplicateCodeError) as exc:
            ctx.registry.create(teacher, {"code": "cs101", "title": "Other"})
        assert exc.value.kind == "conflict"

    def test_naive_deadline_is_utc(self, ctx, teacher):
        course = ctx.registry.create(
            teacher,
            {"code": "CS101", "title": "Intro", "enrollment_deadline": datetime(2025, 2, 1)},
        )
        assert course.enrollment_deadline.utcoffset().total_seconds() == 0

    def test_run_create_envelope(self, ctx, student):
        env = run_create(
            CreateCourseInput(actor=student, code="CS101", title="Intro"), registry=ctx.registry
        )
        assert env.success is False
        assert env.error.kind == "authorization"


class TestLifecycle:
    def test_publish_requires_description(self, ctx, teacher):
        course = ctx.registry.create(teacher, {"code": "CS101", "title": "Intro"})
        with pytest.raises(ValidationError, match="not ready"):
            ctx.registry.publish(teacher, course.id)
        assert ctx.registry.get(teacher, course.id).status == "draft"

    def test_publish_archive_republish(self, ctx, teacher, clock, make_course):
        course = make_course(publish=False)
        published = ctx.registry.publish(teacher, course.id)
        assert published.status == "published"
        assert published.published_at == clock.now_utc()

        assert ctx.registry.publish(teacher, course.id).status == "published"

        archived = ctx.registry.archive(teacher, course.id)
        assert archived.status == "archived"
        assert ctx.registry.archive(teacher, course.id).status == "archived"

        clock.advance(days=1)
        again = ctx.registry.publish(teacher, course.id)
        assert again.status == "published"
        assert again.published_at == clock.now_utc()

    def test_draft_cannot_be_archived(self, ctx, teacher, make_course):
        course = make_course(publish=False)
        with pytest.raises(StateError):
            ctx.registry.archive(teacher, course.id)

    def test_archive_blocked_by_active_enrollment(self, ctx, teacher, student, make_course):
        course = make_course()
        ctx.ledger.enroll(student, student.id, course.id)

        with pytest.raises(ConflictError):
            ctx.registry.archive(teacher, course.id)
        assert ctx.registry.get(teacher, course.id).status == "published"

    def test_other_teacher_cannot_publish(self, ctx, other_teacher, make_course):
        course = make_course(publish=False)
        with pytest.raises(AuthorizationError):
            ctx.registry.publish(other_teacher, course.id)

    def test_delete_blocked_then_allowed(self, ctx, admin, teacher, student, make_course):
        course = make_course()
        ctx.ledger.enroll(student, student.id, course.id)
        with pytest.raises(ConflictError):
            ctx.registry.delete(teacher, course.id)

        ctx.ledger.unenroll(student, student.id, course.id)
        deleted = ctx.registry.delete(teacher, course.id)
        assert deleted.deleted_at is not None

        with pytest.raises(NotFoundError):
            ctx.registry.get(admin, course.id)
        # Code is free again
        assert ctx.registry.create(teacher, {"code": "CS101", "title": "Again"}).code == "CS101"

    def test_delete_blocked_while_another_course_requires_it(
        self, ctx, teacher, student, make_course
    ):
        intro = make_course("CS100")
        follow_up = make_course("CS200", prerequisites=[intro.id])

        with pytest.raises(ConflictError, match="CS200"):
            ctx.registry.delete(teacher, intro.id)
        assert ctx.registry.update(teacher, follow_up.id, {"title": "Renamed"}).title == "Renamed"

        ctx.registry.update(teacher, follow_up.id, {"prerequisites": []})
        assert ctx.registry.delete(teacher, intro.id).deleted_at is not None

    def test_publish_stamps_clock_time(self, ctx, teacher, clock, make_course):
        course = make_course(publish=False)
        clock.advance(hours=3)
        published = ctx.registry.publish(teacher, course.id)
        assert published.updated_at == clock.now_utc()
        assert published.published_at == clock.now_utc()
        assert published.version == course.version + 1


class TestUpdate:
    def test_owner_updates_fields(self, ctx, teacher, make_course):
        course = make_course()
        updated = ctx.registry.update(teacher, course.id, {"title": "New title", "credits": 4})
        assert updated.title == "New title"
        assert updated.credits == 4
        assert updated.version > course.version

    def test_status_not_patchable(self, ctx, teacher, make_course):
        course = make_course(publish=False)
        with pytest.raises(ValidationError, match="status"):
            ctx.registry.update(teacher, course.id, {"status": "published"})

    def test_published_course_keeps_description(self, ctx, teacher, make_course):
        course = make_course()
        with pytest.raises(ValidationError):
            ctx.registry.update(teacher, course.id, {"description": ""})

    def test_capacity_not_below_active_count(self, ctx, teacher, make_student, make_course):
        course = make_course(capacity=5)
        for _ in range(3):
            s = make_student()
            ctx.ledger.enroll(s, s.id, course.id)

        with pytest.raises(ConflictError):
            ctx.registry.update(teacher, course.id, {"capacity": 2})
        assert ctx.registry.update(teacher, course.id, {"capacity": 3}).capacity == 3

    def test_self_prerequisite_rejected(self, ctx, teacher, make_course):
        course = make_course()
        with pytest.raises(ValidationError, match="itself"):
            ctx.registry.update(teacher, course.id, {"prerequisites": [course.id]})

    def test_prerequisite_cycle_rejected(self, ctx, teacher, make_course):
        a = make_course("CS100")
        b = make_course("CS200", prerequisites=[a.id])
        c = make_course("CS300", prerequisites=[b.id])

        with pytest.raises(ValidationError, match="cycle"):
            ctx.registry.update(teacher, a.id, {"prerequisites": [c.id]})

    def test_existing_prerequisites_are_not_revalidated(
        self, ctx, db_path, teacher, clock, make_course
    ):
        intro = make_course("CS100")
        follow_up = make_course("CS200", prerequisites=[intro.id])
        # Rows written before deletes were guarded can point at a deleted course
        conn = sqlite3.connect(db_path)
        conn.execute(
            "UPDATE courses SET deleted_at = ? WHERE id = ?",
            (clock.now_utc().isoformat(), str(intro.id)),
        )
        conn.commit()
        conn.close()

        renamed = ctx.registry.update(teacher, follow_up.id, {"title": "Renamed"})
        assert renamed.prerequisites == [intro.id]

        with pytest.raises(ValidationError, match="Unknown prerequisite"):
            ctx.registry.update(teacher, follow_up.id, {"prerequisites": [intro.id, uuid4()]})

    def test_code_collision_on_update(self, ctx, teacher, make_course):
        make_course("CS100")
        other = make_course("CS200")
        with pytest.raises(DuplicateCodeError):
            ctx.registry.update(teacher, other.id, {"code": "cs100"})

    def test_foreign_teacher_denied(self, ctx, other_teacher, make_course):
        course = make_course()
        with pytest.raises(AuthorizationError):
            ctx.registry.update(other_teacher, course.id, {"title": "Hijack"})


class TestVisibilityAndSearch:
    def test_student_cannot_see_draft(self, ctx, student, teacher, make_course):
        course = make_course(publish=False)
        with pytest.raises(NotFoundError):
            ctx.registry.get(student, course.id)
        assert ctx.registry.get(teacher, course.id).id == course.id

    def test_student_search_only_published(self, ctx, student, make_course):
        make_course("CS100")
        make_course("CS200", publish=False)

        result = ctx.registry.search(student, status=None)
        assert [c.code for c in result.items] == ["CS100"]

        assert ctx.registry.search(student, status="draft").total == 0

    def test_owner_sees_own_drafts(self, ctx, teacher, make_course):
        make_course("CS100")
        make_course("CS200", publish=False)

        result = ctx.registry.search(teacher, status="draft", instructor_id=teacher.id)
        assert [c.code for c in result.items] == ["CS200"]

    def test_admin_sees_every_status(self, ctx, admin, make_course):
        make_course("CS100")
        make_course("CS200", publish=False)
        assert ctx.registry.search(admin, status=None).total == 2

    def test_paging_and_sorting(self, ctx, student, clock, make_course):
        for code in ("CS100", "CS200", "CS300"):
            make_course(code)
            clock.advance(minutes=1)

        page = ctx.registry.search(student, limit=2)
        assert [c.code for c in page.items] == ["CS300", "CS200"]
        assert page.has_more is True

        page = ctx.registry.search(student, limit=2, offset=2)
        assert [c.code for c in page.items] == ["CS100"]
        assert page.has_more is False

        by_code = ctx.registry.search(student, sort_by="code", sort_order="asc")
        assert [c.code for c in by_code.items] == ["CS100", "CS200", "CS300"]

    def test_limit_clamped(self, ctx, student, rules):
        assert ctx.registry.search(student, limit=10_000).limit == rules.search.max_limit

    @pytest.mark.parametrize(
        "kwargs",
        [{"limit": 0}, {"offset": -1}, {"sort_by": "nope"}, {"sort_order": "up"}],
    )
    def test_invalid_search_params(self, ctx, student, kwargs):
        with pytest.raises(ValidationError):
            ctx.registry.search(student, **kwargs)

    def test_filters(self, ctx, student, make_student, make_course):
        make_course("CS100", category="cs", level="beginner", tags=["python"])
        full = make_course("CS200", category="cs", level="advanced", capacity=1)
        make_course("MA100", category="math")
        s = make_student()
        ctx.ledger.enroll(s, s.id, full.id)

        assert ctx.registry.search(student, category="cs").total == 2
        assert ctx.registry.search(student, level="advanced").items[0].code == "CS200"
        assert ctx.registry.search(student, text="python").items[0].code == "CS100"
        spots = ctx.registry.search(student, has_available_spots=True)
        assert {c.code for c in spots.items} == {"CS100", "MA100"}

    def test_tag_filter_matches_any_tag(self, ctx, student, make_course):
        make_course("CS100", tags=["Python", "intro"])
        make_course("CS200", tags=["go"])
        make_course("MA100", tags=["algebra"])

        found = ctx.registry.search(
            student, tags=[" PYTHON", "go"], sort_by="code", sort_order="asc"
        )
        assert [c.code for c in found.items] == ["CS100", "CS200"]
        assert ctx.registry.search(student, tags=["rust"]).total == 0
        assert ctx.registry.search(student, tags=[]).total == 3

    def test_run_search_envelope(self, ctx, student, make_course):
        make_course()
        env = run_search(SearchCoursesInput(actor=student), registry=ctx.registry)
        assert env.success is True
        assert env.data.total == 1

    def test_categories_and_levels(self, ctx, student, make_course):
        make_course("CS100", category="cs")
        make_course("MA100", category="math")
        make_course("HI100", category="history", publish=False)

        assert ctx.registry.list_categories(student) == ["cs", "math"]
        assert ctx.registry.list_levels() == ["beginner", "intermediate", "advanced"]


class TestPrerequisites:
    def test_listing_and_student_status(self, ctx, student, complete_course, make_course):
        a = make_course("CS100")
        b = make_course("CS150")
        target = make_course("CS200", prerequisites=[a.id, b.id])
        complete_course(student, a)

        plain = ctx.registry.get_prerequisites(student, target.id)
        assert {c.code for c in plain.prerequisites} == {"CS100", "CS150"}

        status = ctx.registry.get_prerequisites(student, target.id, student_id=student.id)
        assert status.completed == [a.id]
        assert status.missing == [b.id]
        assert status.satisfied is False

    def test_student_cannot_inspect_classmate(self, ctx, student, make_student, make_course):
        target = make_course("CS200")
        with pytest.raises(AuthorizationError):
            ctx.registry.get_prerequisites(student, target.id, student_id=make_student().id)
