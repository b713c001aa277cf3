"""
Analytics component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from coursecore.components.progress import ProgressAggregate
from coursecore.domain.entities import Principal


@dataclass(frozen=True)
class PlatformStatsInput:
    actor: Principal


@dataclass(frozen=True)
class CourseSummaryInput:
    actor: Principal
    course_id: UUID


@dataclass(frozen=True)
class CategoryCount:
    category: str
    courses: int


@dataclass(frozen=True)
class PlatformStats:
    """Aggregate counts polled by the analytics consumer. Eventually consistent."""

    total_courses: int
    courses_by_status: dict[str, int]
    enrollments_by_status: dict[str, int]
    active_enrollments: int
    average_completion: float | None
    feedback_count: int
    average_rating: float | None
    top_categories: list[CategoryCount] = field(default_factory=list)


@dataclass(frozen=True)
class CourseSummary:
    course_id: UUID
    code: str
    title: str
    status: str
    capacity: int
    active_enrollments: int
    available_seats: int
    fill_rate: float
    enrollments_by_status: dict[str, int]
    progress: ProgressAggregate
    feedback_count: int
    average_rating: float | None
