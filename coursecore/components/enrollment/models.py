"""
Enrollment component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal
from uuid import UUID

from coursecore.domain.entities import Enrollment, EnrollmentStatus, Principal


class AdmitOutcome(Enum):
    """Result of one conditional admit attempt."""

    ADMITTED = "admitted"
    NO_SEAT = "no_seat"  # course no longer published or full at write time
    PAIR_TAKEN = "pair_taken"  # an active/completed row already exists


# --- Input Models ---


@dataclass(frozen=True)
class EnrollInput:
    actor: Principal
    student_id: UUID
    course_id: UUID


@dataclass(frozen=True)
class UnenrollInput:
    actor: Principal
    student_id: UUID
    course_id: UUID


@dataclass(frozen=True)
class CompleteInput:
    """Input for the completion workflow (active -> completed)."""

    actor: Principal
    student_id: UUID
    course_id: UUID


@dataclass(frozen=True)
class ListForCourseInput:
    actor: Principal
    course_id: UUID


@dataclass(frozen=True)
class ListEnrolledInput:
    actor: Principal
    student_id: UUID
    status: EnrollmentStatus | None = None


@dataclass(frozen=True)
class GetStatusInput:
    actor: Principal
    student_id: UUID
    course_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class RosterOutput:
    """
    Enrollments for one course.

    ``scope`` is "roster" for owners and admins (every record plus counts) and
    "self" for a student, who only ever gets their own record.
    """

    course_id: UUID
    scope: Literal["roster", "self"]
    enrollments: list[Enrollment]
    counts: dict[str, int] | None = None
    capacity: int | None = None


@dataclass(frozen=True)
class EnrollmentStatusOutput:
    student_id: UUID
    course_id: UUID
    is_enrolled: bool
    status: EnrollmentStatus | None = None
    enrollment: Enrollment | None = None
