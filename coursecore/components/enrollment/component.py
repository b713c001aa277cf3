"""
Enrollment component - the seat-bounded enrollment ledger.

Invariants:
- For every course, active enrollments never exceed capacity, under any
  number of concurrent callers
- At most one active record per (student, course)
- Records are never deleted; dropped and completed persist for history
- A student never receives another student's record
"""

from __future__ import annotations

from coursecore.domain.entities import Enrollment
from coursecore.domain.envelope import Envelope

from ._impl import EnrollmentLedger
from .models import (
    CompleteInput,
    EnrollInput,
    EnrollmentStatusOutput,
    GetStatusInput,
    ListEnrolledInput,
    ListForCourseInput,
    RosterOutput,
    UnenrollInput,
)

# --- Component Entry Points ---


def run_enroll(inp: EnrollInput, *, ledger: EnrollmentLedger) -> Envelope[Enrollment]:
    """
    Enroll a student as one atomic check-and-admit.

    Args:
        inp: Actor plus the (student, course) pair.
        ledger: Enrollment ledger service.

    Returns:
        Envelope with the active enrollment, or a state/conflict/capacity/
        missing-prerequisite/service-unavailable error.
    """
    return Envelope.capture(ledger.enroll, inp.actor, inp.student_id, inp.course_id)


def run_unenroll(inp: UnenrollInput, *, ledger: EnrollmentLedger) -> Envelope[Enrollment]:
    """Drop an active enrollment. A second call is a not-found error."""
    return Envelope.capture(ledger.unenroll, inp.actor, inp.student_id, inp.course_id)


def run_complete(inp: CompleteInput, *, ledger: EnrollmentLedger) -> Envelope[Enrollment]:
    return Envelope.capture(ledger.complete, inp.actor, inp.student_id, inp.course_id)


def run_list_for_course(
    inp: ListForCourseInput, *, ledger: EnrollmentLedger
) -> Envelope[RosterOutput]:
    return Envelope.capture(ledger.list_for_course, inp.actor, inp.course_id)


def run_list_enrolled(
    inp: ListEnrolledInput, *, ledger: EnrollmentLedger
) -> Envelope[list[Enrollment]]:
    return Envelope.capture(ledger.list_enrolled, inp.actor, inp.student_id, inp.status)


def run_get_status(
    inp: GetStatusInput, *, ledger: EnrollmentLedger
) -> Envelope[EnrollmentStatusOutput]:
    return Envelope.capture(ledger.get_status, inp.actor, inp.student_id, inp.course_id)
