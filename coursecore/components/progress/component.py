"""
Progress component - per-student completion tracking.

Invariants:
- A record exists only alongside an enrollment for the same pair
- 0 <= completion_percentage <= 100
"""

from __future__ import annotations

from coursecore.domain.entities import Progress
from coursecore.domain.envelope import Envelope

from ._impl import ProgressTracker
from .models import GetProgressInput, ProgressView, UpdateProgressInput


def run_update(inp: UpdateProgressInput, *, tracker: ProgressTracker) -> Envelope[Progress]:
    """
    Overwrite a student's progress for a course.

    Args:
        inp: Actor, pair, percentage and completed module names.
        tracker: Progress tracker service.

    Returns:
        Envelope with the stored record, or a validation/forbidden error.
    """
    return Envelope.capture(
        tracker.update_progress,
        inp.actor,
        inp.student_id,
        inp.course_id,
        inp.percentage,
        list(inp.completed_modules),
    )


def run_get(inp: GetProgressInput, *, tracker: ProgressTracker) -> Envelope[ProgressView]:
    return Envelope.capture(tracker.get_progress, inp.actor, inp.student_id, inp.course_id)
