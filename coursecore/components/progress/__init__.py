"""
Progress component - per-student completion tracking.
"""

from ._impl import ProgressTracker, bucket_labels, summarize_completion
from .component import run_get, run_update
from .models import GetProgressInput, ProgressAggregate, ProgressView, UpdateProgressInput
from .ports import CourseReaderPort, EnrollmentReaderPort, ProgressRepoPort, TimePort

__all__ = [
    # Entry points
    "run_get",
    "run_update",
    # Service
    "ProgressTracker",
    "bucket_labels",
    "summarize_completion",
    # Models
    "GetProgressInput",
    "ProgressAggregate",
    "ProgressView",
    "UpdateProgressInput",
    # Ports
    "CourseReaderPort",
    "EnrollmentReaderPort",
    "ProgressRepoPort",
    "TimePort",
]
