"""
Analytics component port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from coursecore.domain.entities import Course, Feedback


class CourseStatsPort(Protocol):
    def get_by_id(self, course_id: UUID, include_deleted: bool = False) -> Course | None:
        ...

    def status_counts(self) -> dict[str, int]:
        """Live course counts keyed by status."""
        ...

    def top_categories(self, limit: int = 5) -> list[tuple[str, int]]:
        ...


class EnrollmentStatsPort(Protocol):
    def status_counts(self, course_id: UUID | None = None) -> dict[str, int]:
        ...


class ProgressStatsPort(Protocol):
    def mean_completion(self) -> float | None:
        ...


class FeedbackStatsPort(Protocol):
    def rating_summary(self) -> tuple[int, float | None]:
        """(count, mean rating) across all feedback."""
        ...

    def list_by_course(self, course_id: UUID) -> list[Feedback]:
        ...
