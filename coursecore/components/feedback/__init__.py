"""
Feedback component - one rating per student per course.
"""

from ._impl import FeedbackStore
from .component import run_get, run_submit
from .models import (
    CategoryStat,
    FeedbackEntry,
    FeedbackSummary,
    GetFeedbackInput,
    SubmitFeedbackInput,
)
from .ports import CourseReaderPort, EnrollmentReaderPort, FeedbackRepoPort, TimePort

__all__ = [
    # Entry points
    "run_get",
    "run_submit",
    # Service
    "FeedbackStore",
    # Models
    "CategoryStat",
    "FeedbackEntry",
    "FeedbackSummary",
    "GetFeedbackInput",
    "SubmitFeedbackInput",
    # Ports
    "CourseReaderPort",
    "EnrollmentReaderPort",
    "FeedbackRepoPort",
    "TimePort",
]
