"""
Feedback component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from coursecore.domain.entities import Principal


@dataclass(frozen=True)
class SubmitFeedbackInput:
    actor: Principal
    student_id: UUID
    course_id: UUID
    rating: int
    comment: str = ""
    categories: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class GetFeedbackInput:
    actor: Principal
    course_id: UUID


@dataclass(frozen=True)
class FeedbackEntry:
    """One feedback record as shown to a viewer; student_id may be withheld."""

    id: UUID
    rating: int
    comment: str
    categories: dict[str, int]
    submitted_at: datetime
    student_id: UUID | None = None


@dataclass(frozen=True)
class CategoryStat:
    count: int
    average: float


@dataclass(frozen=True)
class FeedbackSummary:
    course_id: UUID
    count: int
    average_rating: float | None
    entries: list[FeedbackEntry]
    category_breakdown: dict[str, CategoryStat] | None = None
