"""
Progress component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from coursecore.domain.entities import Course, Enrollment, EnrollmentStatus, Progress


class ProgressRepoPort(Protocol):
    def get(self, student_id: UUID, course_id: UUID) -> Progress | None:
        ...

    def save(self, progress: Progress) -> Progress:
        """Upsert; last write wins."""
        ...

    def list_by_course(self, course_id: UUID) -> list[Progress]:
        ...


class CourseReaderPort(Protocol):
    def get_by_id(self, course_id: UUID, include_deleted: bool = False) -> Course | None:
        ...


class EnrollmentReaderPort(Protocol):
    def get(self, student_id: UUID, course_id: UUID) -> Enrollment | None:
        ...

    def list_by_course(
        self, course_id: UUID, statuses: list[EnrollmentStatus] | None = None
    ) -> list[Enrollment]:
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
