"""
Analytics component - read-only aggregates for external consumers.
"""

from ._impl import AnalyticsService
from .component import run_course_summary, run_platform_stats
from .models import (
    CategoryCount,
    CourseSummary,
    CourseSummaryInput,
    PlatformStats,
    PlatformStatsInput,
)
from .ports import CourseStatsPort, EnrollmentStatsPort, FeedbackStatsPort, ProgressStatsPort

__all__ = [
    "run_course_summary",
    "run_platform_stats",
    "AnalyticsService",
    "CategoryCount",
    "CourseSummary",
    "CourseSummaryInput",
    "PlatformStats",
    "PlatformStatsInput",
    "CourseStatsPort",
    "EnrollmentStatsPort",
    "FeedbackStatsPort",
    "ProgressStatsPort",
]
