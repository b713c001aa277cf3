"""
EnrollmentLedger - seat-bounded student/course enrollment.

Key behaviors:
- enroll is one conditional write (seat + pair) in a single transaction;
  it only commits if the course is still published and below capacity
- A failed condition is re-evaluated and retried a bounded number of times
- Exhaustion is a CapacityError, or ServiceUnavailable if storage never
  answered; never a hang
- unenroll/complete only act on an active record and free exactly one seat
- Students never see classmates' records
"""

from __future__ import annotations

import logging
import time
from uuid import UUID, uuid4

from coursecore.components.eligibility import (
    ALREADY_COMPLETED,
    ALREADY_ENROLLED,
    COURSE_FULL,
    ENROLLMENT_CLOSED,
    MISSING_PREREQUISITE,
    NOT_PUBLISHED,
    EligibilityEvaluator,
    EligibilityResult,
)
from coursecore.domain.entities import Course, Enrollment, EnrollmentStatus, Principal
from coursecore.domain.errors import (
    CapacityError,
    ConflictError,
    NotFoundError,
    PrerequisiteError,
    ServiceUnavailable,
    StateError,
)
from coursecore.domain.policy import AccessGuard, Target
from coursecore.rules.models import EnrollmentRules

from .models import AdmitOutcome, EnrollmentStatusOutput, RosterOutput
from .ports import CourseReaderPort, EnrollmentRepoPort, TimePort

logger = logging.getLogger(__name__)


def raise_for_ineligible(result: EligibilityResult) -> None:
    """Map the first blocking reason to its error, in a fixed order."""
    reasons = result.reasons
    if NOT_PUBLISHED in reasons:
        raise StateError("Course is not open for enrollment", course_id=str(result.course_id))
    if ENROLLMENT_CLOSED in reasons:
        raise StateError("Enrollment deadline has passed", course_id=str(result.course_id))
    if ALREADY_ENROLLED in reasons:
        raise ConflictError("Student is already enrolled", course_id=str(result.course_id))
    if ALREADY_COMPLETED in reasons:
        raise ConflictError(
            "Student has already completed this course", course_id=str(result.course_id)
        )
    if MISSING_PREREQUISITE in reasons:
        raise PrerequisiteError([str(p) for p in result.missing_prerequisites])
    if COURSE_FULL in reasons:
        raise CapacityError("Course is full", course_id=str(result.course_id))


class EnrollmentLedger:
    def __init__(
        self,
        courses: CourseReaderPort,
        enrollments: EnrollmentRepoPort,
        eligibility: EligibilityEvaluator,
        guard: AccessGuard,
        rules: EnrollmentRules,
        clock: TimePort,
    ):
        self.courses = courses
        self.enrollments = enrollments
        self.eligibility = eligibility
        self.guard = guard
        self.rules = rules
        self.clock = clock

    def _require_course(self, course_id: UUID) -> Course:
        course = self.courses.get_by_id(course_id)
        if course is None:
            raise NotFoundError("Course not found", course_id=str(course_id))
        return course

    def _backoff(self, attempt: int) -> None:
        if self.rules.retry_backoff_ms:
            time.sleep(self.rules.retry_backoff_ms * attempt / 1000.0)

    def enroll(self, actor: Principal, student_id: UUID, course_id: UUID) -> Enrollment:
        course = self._require_course(course_id)
        self.guard.require(
            actor, "enrollment:enroll", Target(course=course, student_id=student_id)
        )

        attempts = self.rules.max_attempts
        storage_failures = 0
        last_storage_error: ServiceUnavailable | None = None

        for attempt in range(1, attempts + 1):
            try:
                result = self.eligibility.evaluate(student_id, course_id)
                raise_for_ineligible(result)
                outcome = self.enrollments.try_admit(
                    uuid4(), student_id, course_id, self.clock.now_utc()
                )
            except ServiceUnavailable as e:
                storage_failures += 1
                last_storage_error = e
                logger.warning(
                    "Enroll attempt %d/%d for course %s hit storage error: %s",
                    attempt,
                    attempts,
                    course_id,
                    e.message,
                )
                self._backoff(attempt)
                continue

            if outcome is AdmitOutcome.ADMITTED:
                enrollment = self.enrollments.get(student_id, course_id)
                assert enrollment is not None
                logger.info(
                    "Enrolled student %s in course %s (attempt %d)",
                    student_id,
                    course_id,
                    attempt,
                )
                return enrollment

            logger.info(
                "Enroll attempt %d/%d for course %s lost the race (%s); retrying",
                attempt,
                attempts,
                course_id,
                outcome.value,
            )
            self._backoff(attempt)

        if storage_failures == attempts and last_storage_error is not None:
            raise ServiceUnavailable(
                "Storage unavailable while enrolling; try again", course_id=str(course_id)
            ) from last_storage_error

        logger.warning("Enroll retries exhausted for course %s", course_id)
        raise CapacityError("Course is full", course_id=str(course_id))

    def _release(
        self,
        actor: Principal,
        action: str,
        student_id: UUID,
        course_id: UUID,
        new_status: EnrollmentStatus,
    ) -> Enrollment:
        course = self._require_course(course_id)
        self.guard.require(actor, action, Target(course=course, student_id=student_id))

        if not self.enrollments.release(student_id, course_id, new_status, self.clock.now_utc()):
            raise NotFoundError(
                "No active enrollment found",
                student_id=str(student_id),
                course_id=str(course_id),
            )

        logger.info("Enrollment %s/%s is now %s", student_id, course_id, new_status)
        enrollment = self.enrollments.get(student_id, course_id)
        assert enrollment is not None
        return enrollment

    def unenroll(self, actor: Principal, student_id: UUID, course_id: UUID) -> Enrollment:
        return self._release(actor, "enrollment:unenroll", student_id, course_id, "dropped")

    def complete(self, actor: Principal, student_id: UUID, course_id: UUID) -> Enrollment:
        return self._release(actor, "enrollment:complete", student_id, course_id, "completed")

    def list_for_course(self, actor: Principal, course_id: UUID) -> RosterOutput:
        course = self._require_course(course_id)

        if self.guard.allows(actor, "enrollment:roster", Target(course=course)):
            return RosterOutput(
                course_id=course.id,
                scope="roster",
                enrollments=self.enrollments.list_by_course(course_id),
                counts=self.enrollments.status_counts(course_id),
                capacity=course.capacity,
            )

        self.guard.require(
            actor, "enrollment:read", Target(course=course, student_id=actor.id)
        )
        own = self.enrollments.get(actor.id, course_id)
        return RosterOutput(
            course_id=course.id,
            scope="self",
            enrollments=[own] if own else [],
        )

    def list_enrolled(
        self,
        actor: Principal,
        student_id: UUID,
        status: EnrollmentStatus | None = None,
    ) -> list[Enrollment]:
        if actor.role == "student":
            self.guard.require(actor, "enrollment:read", Target(student_id=student_id))

        records = self.enrollments.list_by_student(student_id, [status] if status else None)
        if self.guard.allows(actor, "enrollment:read", Target(student_id=student_id)):
            return records

        # Otherwise only records in courses the actor may read individually
        courses = {c.id: c for c in self.courses.get_many([e.course_id for e in records])}
        visible = [
            e
            for e in records
            if e.course_id in courses
            and self.guard.allows(
                actor,
                "enrollment:read",
                Target(course=courses[e.course_id], student_id=student_id),
            )
        ]
        return visible

    def get_status(
        self, actor: Principal, student_id: UUID, course_id: UUID
    ) -> EnrollmentStatusOutput:
        course = self._require_course(course_id)
        self.guard.require(
            actor, "enrollment:read", Target(course=course, student_id=student_id)
        )
        enrollment = self.enrollments.get(student_id, course_id)
        return EnrollmentStatusOutput(
            student_id=student_id,
            course_id=course_id,
            is_enrolled=enrollment is not None and enrollment.status == "active",
            status=enrollment.status if enrollment else None,
            enrollment=enrollment,
        )
