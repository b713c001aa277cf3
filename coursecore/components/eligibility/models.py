"""
Eligibility component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from coursecore.domain.entities import Course, Enrollment, Principal

# --- Reason kinds ---

NOT_PUBLISHED = "not-published"
ALREADY_ENROLLED = "already-enrolled"
ALREADY_COMPLETED = "already-completed"
COURSE_FULL = "course-full"
MISSING_PREREQUISITE = "missing-prerequisite"
ENROLLMENT_CLOSED = "enrollment-closed"


@dataclass(frozen=True)
class EligibilitySnapshot:
    """Everything the rules need, read at one consistent point."""

    course: Course
    enrollment: Enrollment | None
    completed_course_ids: frozenset[UUID]


@dataclass(frozen=True)
class EligibilityResult:
    """Answer to "may this student enroll now", with every failing reason."""

    student_id: UUID
    course_id: UUID
    eligible: bool
    reasons: list[str] = field(default_factory=list)
    missing_prerequisites: list[UUID] = field(default_factory=list)


@dataclass(frozen=True)
class CheckEligibilityInput:
    """Input for an eligibility query."""

    actor: Principal
    student_id: UUID
    course_id: UUID
