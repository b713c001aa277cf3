"""
Eligibility component - read-only enrollment rule check.
"""

from ._impl import EligibilityEvaluator, evaluate_snapshot
from .component import run_check
from .models import (
    ALREADY_COMPLETED,
    ALREADY_ENROLLED,
    COURSE_FULL,
    ENROLLMENT_CLOSED,
    MISSING_PREREQUISITE,
    NOT_PUBLISHED,
    CheckEligibilityInput,
    EligibilityResult,
    EligibilitySnapshot,
)
from .ports import EligibilityReaderPort, TimePort

__all__ = [
    # Entry points
    "run_check",
    # Service
    "EligibilityEvaluator",
    "evaluate_snapshot",
    # Models
    "CheckEligibilityInput",
    "EligibilityResult",
    "EligibilitySnapshot",
    # Reason kinds
    "ALREADY_COMPLETED",
    "ALREADY_ENROLLED",
    "COURSE_FULL",
    "ENROLLMENT_CLOSED",
    "MISSING_PREREQUISITE",
    "NOT_PUBLISHED",
    # Ports
    "EligibilityReaderPort",
    "TimePort",
]
