"""
Feedback component - one rating per student per course.

Invariants:
- At most one record per (student, course)
- Requires a prior active or completed enrollment
- 1 <= rating <= 5
"""

from __future__ import annotations

from coursecore.domain.entities import Feedback
from coursecore.domain.envelope import Envelope

from ._impl import FeedbackStore
from .models import FeedbackSummary, GetFeedbackInput, SubmitFeedbackInput


def run_submit(inp: SubmitFeedbackInput, *, store: FeedbackStore) -> Envelope[Feedback]:
    """
    Submit feedback for a course.

    Args:
        inp: Actor, pair, rating, comment and per-category ratings.
        store: Feedback store service.

    Returns:
        Envelope with the stored feedback, or a validation/forbidden/conflict error.
    """
    return Envelope.capture(
        store.submit_feedback,
        inp.actor,
        inp.student_id,
        inp.course_id,
        inp.rating,
        inp.comment,
        dict(inp.categories),
    )


def run_get(inp: GetFeedbackInput, *, store: FeedbackStore) -> Envelope[FeedbackSummary]:
    return Envelope.capture(store.get_feedback, inp.actor, inp.course_id)
