"""
Enrollment component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from coursecore.domain.entities import Course, Enrollment, EnrollmentStatus

from .models import AdmitOutcome


class CourseReaderPort(Protocol):
    def get_by_id(self, course_id: UUID, include_deleted: bool = False) -> Course | None:
        ...

    def get_many(self, course_ids: list[UUID]) -> list[Course]:
        ...


class EnrollmentRepoPort(Protocol):
    """Repository interface for the enrollment ledger."""

    def get(self, student_id: UUID, course_id: UUID) -> Enrollment | None:
        ...

    def list_by_course(
        self, course_id: UUID, statuses: list[EnrollmentStatus] | None = None
    ) -> list[Enrollment]:
        ...

    def list_by_student(
        self, student_id: UUID, statuses: list[EnrollmentStatus] | None = None
    ) -> list[Enrollment]:
        ...

    def status_counts(self, course_id: UUID | None = None) -> dict[str, int]:
        ...

    def try_admit(
        self, enrollment_id: UUID, student_id: UUID, course_id: UUID, now: datetime
    ) -> AdmitOutcome:
        """
        Take a seat and activate the pair in one transaction, only if the
        course is published and below capacity and the pair is free.
        """
        ...

    def release(
        self,
        student_id: UUID,
        course_id: UUID,
        new_status: EnrollmentStatus,
        now: datetime,
    ) -> bool:
        """Move an active pair to new_status and free its seat. False if not active."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
