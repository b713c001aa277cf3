"""
Progress component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from coursecore.domain.entities import Principal, Progress


@dataclass(frozen=True)
class UpdateProgressInput:
    actor: Principal
    student_id: UUID
    course_id: UUID
    percentage: float
    completed_modules: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GetProgressInput:
    actor: Principal
    student_id: UUID
    course_id: UUID


@dataclass(frozen=True)
class ProgressAggregate:
    """Roster-wide completion summary. Enrolled students with no record count as 0."""

    count: int
    mean: float | None
    distribution: dict[str, int]


@dataclass(frozen=True)
class ProgressView:
    record: Progress
    aggregate: ProgressAggregate | None = None
