"""
Courses component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from coursecore.domain.entities import Course, CourseStatus, Enrollment, EnrollmentStatus


class CourseRepoPort(Protocol):
    """Repository interface for course persistence."""

    def insert(self, course: Course) -> Course:
        """Insert a new course. Raises DuplicateCodeError on a live code clash."""
        ...

    def get_by_id(self, course_id: UUID, include_deleted: bool = False) -> Course | None:
        ...

    def get_by_code(self, code: str) -> Course | None:
        ...

    def get_many(self, course_ids: list[UUID]) -> list[Course]:
        """Live courses among the given ids."""
        ...

    def update_fields(self, course: Course) -> bool:
        """Conditional write; False if active enrollments exceed the new capacity."""
        ...

    def set_status(
        self,
        course_id: UUID,
        from_statuses: list[CourseStatus],
        to_status: CourseStatus,
        now: datetime,
        require_no_active: bool = False,
    ) -> bool:
        """Conditional lifecycle write; False if the guard no longer holds."""
        ...

    def list_dependents(self, course_id: UUID) -> list[Course]:
        """Live courses that require course_id."""
        ...

    def soft_delete(self, course_id: UUID, now: datetime) -> bool:
        """Conditional delete; False if active enrollments or live dependents exist."""
        ...

    def search(
        self,
        *,
        text: str | None = None,
        category: str | None = None,
        level: str | None = None,
        statuses: list[CourseStatus] | None = None,
        tags: list[str] | None = None,
        instructor_id: UUID | None = None,
        min_credits: int | None = None,
        max_credits: int | None = None,
        has_available_spots: bool = False,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Course], int]:
        """Filtered page plus total count."""
        ...

    def list_categories(self) -> list[str]:
        ...


class CompletionReaderPort(Protocol):
    """Enrollment reads the registry needs for prerequisite reports."""

    def list_by_student(
        self, student_id: UUID, statuses: list[EnrollmentStatus] | None = None
    ) -> list[Enrollment]:
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
