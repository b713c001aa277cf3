"""
Enrollment component - seat-bounded enrollment ledger.
"""

from ._impl import EnrollmentLedger, raise_for_ineligible
from .component import (
    run_complete,
    run_enroll,
    run_get_status,
    run_list_enrolled,
    run_list_for_course,
    run_unenroll,
)
from .models import (
    AdmitOutcome,
    CompleteInput,
    EnrollInput,
    EnrollmentStatusOutput,
    GetStatusInput,
    ListEnrolledInput,
    ListForCourseInput,
    RosterOutput,
    UnenrollInput,
)
from .ports import CourseReaderPort, EnrollmentRepoPort, TimePort

__all__ = [
    # Entry points
    "run_complete",
    "run_enroll",
    "run_get_status",
    "run_list_enrolled",
    "run_list_for_course",
    "run_unenroll",
    # Service
    "EnrollmentLedger",
    "raise_for_ineligible",
    # Models
    "AdmitOutcome",
    "CompleteInput",
    "EnrollInput",
    "EnrollmentStatusOutput",
    "GetStatusInput",
    "ListEnrolledInput",
    "ListForCourseInput",
    "RosterOutput",
    "UnenrollInput",
    # Ports
    "CourseReaderPort",
    "EnrollmentRepoPort",
    "TimePort",
]
