"""
Courses component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from coursecore.domain.entities import Course, Principal

SORT_FIELDS = ("created_at", "title", "code", "credits", "popularity")
SORT_ORDERS = ("asc", "desc")

# Fields a patch may touch; status only moves through publish/archive
PATCHABLE_FIELDS = frozenset(
    {
        "code",
        "title",
        "description",
        "capacity",
        "credits",
        "schedule",
        "category",
        "level",
        "tags",
        "enrollment_deadline",
        "prerequisites",
        "instructor_id",
    }
)


# --- Input Models ---


@dataclass(frozen=True)
class CreateCourseInput:
    """Input for creating a draft course."""

    actor: Principal
    code: str
    title: str
    description: str = ""
    capacity: int = 0
    credits: int = 0
    schedule: str = ""
    category: str = ""
    level: str = "beginner"
    tags: list[str] = field(default_factory=list)
    prerequisites: list[UUID] = field(default_factory=list)
    enrollment_deadline: datetime | None = None
    instructor_id: UUID | None = None


@dataclass(frozen=True)
class GetCourseInput:
    actor: Principal
    course_id: UUID


@dataclass(frozen=True)
class UpdateCourseInput:
    """Input for patching editable course fields."""

    actor: Principal
    course_id: UUID
    patch: dict[str, Any]


@dataclass(frozen=True)
class PublishCourseInput:
    actor: Principal
    course_id: UUID


@dataclass(frozen=True)
class ArchiveCourseInput:
    actor: Principal
    course_id: UUID


@dataclass(frozen=True)
class DeleteCourseInput:
    actor: Principal
    course_id: UUID


@dataclass(frozen=True)
class SearchCoursesInput:
    """Search filters, pagination and ordering."""

    actor: Principal
    text: str | None = None
    category: str | None = None
    level: str | None = None
    tags: list[str] = field(default_factory=list)
    status: str | None = "published"
    instructor_id: UUID | None = None
    min_credits: int | None = None
    max_credits: int | None = None
    has_available_spots: bool = False
    limit: int | None = None
    offset: int = 0
    sort_by: str = "created_at"
    sort_order: str = "desc"


@dataclass(frozen=True)
class ListCategoriesInput:
    actor: Principal


@dataclass(frozen=True)
class GetPrerequisitesInput:
    actor: Principal
    course_id: UUID
    student_id: UUID | None = None


# --- Output Models ---


@dataclass(frozen=True)
class CourseSearchOutput:
    """One page of search results."""

    items: list[Course]
    total: int
    limit: int
    offset: int
    has_more: bool


@dataclass(frozen=True)
class PrerequisitesOutput:
    """Prerequisite courses, plus what the student has and lacks."""

    course_id: UUID
    prerequisites: list[Course]
    completed: list[UUID] = field(default_factory=list)
    missing: list[UUID] = field(default_factory=list)
    satisfied: bool = True
