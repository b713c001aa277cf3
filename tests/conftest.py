from datetime import UTC, datetime
from uuid import uuid4

import pytest

from coursecore.adapters.clock import FixedClock
from coursecore.context import ServiceContext
from coursecore.domain.entities import Principal
from coursecore.rules.loader import DEFAULT_RULES_PATH, load_rules


@pytest.fixture(scope="session")
def rules():
    # Load REAL rules from project root
    return load_rules(DEFAULT_RULES_PATH)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "coursecore.db")


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 6, 9, 0, tzinfo=UTC))


@pytest.fixture
def ctx(db_path, rules, clock):
    """
    Full ServiceContext backed by a temporary, migrated SQLite DB.
    """
    return ServiceContext.create(db_path, rules, clock=clock)


# --- Principals ---


@pytest.fixture
def admin():
    return Principal(id=uuid4(), role="admin")


@pytest.fixture
def teacher():
    return Principal(id=uuid4(), role="teacher")


@pytest.fixture
def other_teacher():
    return Principal(id=uuid4(), role="teacher")


@pytest.fixture
def student():
    return Principal(id=uuid4(), role="student")


@pytest.fixture
def make_student():
    def _make() -> Principal:
        return Principal(id=uuid4(), role="student")

    return _make


# --- Courses ---


@pytest.fixture
def make_course(ctx, teacher):
    """Create (and by default publish) a course owned by ``teacher``."""

    def _make(code="CS101", capacity=30, publish=True, owner=None, **fields):
        owner = owner or teacher
        draft = {
            "code": code,
            "title": f"Course {code}",
            "description": "An introductory course",
            "capacity": capacity,
            **fields,
        }
        course = ctx.registry.create(owner, draft)
        if publish:
            course = ctx.registry.publish(owner, course.id)
        return course

    return _make


@pytest.fixture
def complete_course(ctx, admin):
    """Enroll a student in a course and mark the enrollment completed."""

    def _complete(student, course):
        ctx.ledger.enroll(student, student.id, course.id)
        return ctx.ledger.complete(admin, student.id, course.id)

    return _complete
