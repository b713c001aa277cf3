"""
Feedback component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from coursecore.domain.entities import Course, Enrollment, Feedback


class FeedbackRepoPort(Protocol):
    def insert(self, feedback: Feedback) -> Feedback:
        """Insert; raises ConflictError if the pair already has a record."""
        ...

    def get(self, student_id: UUID, course_id: UUID) -> Feedback | None:
        ...

    def list_by_course(self, course_id: UUID) -> list[Feedback]:
        ...


class CourseReaderPort(Protocol):
    def get_by_id(self, course_id: UUID, include_deleted: bool = False) -> Course | None:
        ...


class EnrollmentReaderPort(Protocol):
    def get(self, student_id: UUID, course_id: UUID) -> Enrollment | None:
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
