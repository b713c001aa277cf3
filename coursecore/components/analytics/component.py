"""
Analytics component - aggregate enrollment, progress and feedback counts.
"""

from __future__ import annotations

from coursecore.domain.envelope import Envelope

from ._impl import AnalyticsService
from .models import CourseSummary, CourseSummaryInput, PlatformStats, PlatformStatsInput


def run_platform_stats(
    inp: PlatformStatsInput, *, service: AnalyticsService
) -> Envelope[PlatformStats]:
    return Envelope.capture(service.platform_stats, inp.actor)


def run_course_summary(
    inp: CourseSummaryInput, *, service: AnalyticsService
) -> Envelope[CourseSummary]:
    return Envelope.capture(service.course_summary, inp.actor, inp.course_id)
