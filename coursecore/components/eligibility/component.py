"""
Eligibility component - "may this student enroll now".

Invariants:
- Read-only; never mutates storage
- All rules evaluated, not short-circuited
"""

from __future__ import annotations

from coursecore.domain.envelope import Envelope

from ._impl import EligibilityEvaluator
from .models import CheckEligibilityInput, EligibilityResult


def run_check(
    inp: CheckEligibilityInput,
    *,
    evaluator: EligibilityEvaluator,
) -> Envelope[EligibilityResult]:
    """
    Check whether a student may enroll in a course.

    Args:
        inp: Actor plus the (student, course) pair.
        evaluator: Eligibility evaluator service.

    Returns:
        Envelope with the eligibility result and every failing reason.
    """
    return Envelope.capture(evaluator.check, inp.actor, inp.student_id, inp.course_id)
