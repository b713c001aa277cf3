"""
EligibilityEvaluator - read-only enrollment rule check.

Key behaviors:
- Every rule is evaluated; all failing reasons are reported together
- Evaluation runs against one snapshot and never writes
- ``evaluate`` is the unguarded pre-check used inside enroll;
  ``check`` is the guarded query surface
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from coursecore.domain.entities import Principal
from coursecore.domain.errors import NotFoundError
from coursecore.domain.policy import AccessGuard, Target

from .models import (
    ALREADY_COMPLETED,
    ALREADY_ENROLLED,
    COURSE_FULL,
    ENROLLMENT_CLOSED,
    MISSING_PREREQUISITE,
    NOT_PUBLISHED,
    EligibilityResult,
    EligibilitySnapshot,
)
from .ports import EligibilityReaderPort, TimePort


def evaluate_snapshot(
    student_id: UUID, snapshot: EligibilitySnapshot, now: datetime
) -> EligibilityResult:
    """Apply all eligibility rules to a snapshot. Pure."""
    course = snapshot.course
    reasons: list[str] = []

    if course.status != "published":
        reasons.append(NOT_PUBLISHED)

    if snapshot.enrollment is not None:
        if snapshot.enrollment.status == "active":
            reasons.append(ALREADY_ENROLLED)
        elif snapshot.enrollment.status == "completed":
            reasons.append(ALREADY_COMPLETED)

    if course.enrolled_count >= course.capacity:
        reasons.append(COURSE_FULL)

    missing = [p for p in course.prerequisites if p not in snapshot.completed_course_ids]
    if missing:
        reasons.append(MISSING_PREREQUISITE)

    if course.enrollment_deadline is not None and now > course.enrollment_deadline:
        reasons.append(ENROLLMENT_CLOSED)

    return EligibilityResult(
        student_id=student_id,
        course_id=course.id,
        eligible=not reasons,
        reasons=reasons,
        missing_prerequisites=missing,
    )


class EligibilityEvaluator:
    def __init__(self, reader: EligibilityReaderPort, guard: AccessGuard, clock: TimePort):
        self.reader = reader
        self.guard = guard
        self.clock = clock

    def _snapshot(self, student_id: UUID, course_id: UUID) -> EligibilitySnapshot:
        snapshot = self.reader.read(student_id, course_id)
        if snapshot is None:
            raise NotFoundError("Course not found", course_id=str(course_id))
        return snapshot

    def evaluate(self, student_id: UUID, course_id: UUID) -> EligibilityResult:
        snapshot = self._snapshot(student_id, course_id)
        return evaluate_snapshot(student_id, snapshot, self.clock.now_utc())

    def check(self, actor: Principal, student_id: UUID, course_id: UUID) -> EligibilityResult:
        snapshot = self._snapshot(student_id, course_id)
        self.guard.require(
            actor, "eligibility:check", Target(course=snapshot.course, student_id=student_id)
        )
        return evaluate_snapshot(student_id, snapshot, self.clock.now_utc())
