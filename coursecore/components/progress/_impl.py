"""
ProgressTracker - per-student completion state.

Key behaviors:
- Writes require an active or completed enrollment
- Percentage must lie in [0, 100]; last write wins, no monotonicity
- Owners and admins get a roster aggregate alongside any single record
"""

from __future__ import annotations

import logging
import math
from bisect import bisect_right
from collections.abc import Iterable
from uuid import UUID

from coursecore.domain.entities import Course, Principal, Progress
from coursecore.domain.errors import ForbiddenError, NotFoundError, ValidationError
from coursecore.domain.policy import AccessGuard, Target
from coursecore.rules.models import ProgressRules

from .models import ProgressAggregate, ProgressView
from .ports import CourseReaderPort, EnrollmentReaderPort, ProgressRepoPort, TimePort

logger = logging.getLogger(__name__)


def bucket_labels(edges: list[int]) -> list[str]:
    """[25, 50, 75, 100] -> ["0-24", "25-49", "50-74", "75-99", "100"]."""
    labels = []
    low = 0
    for edge in edges:
        labels.append(f"{low}-{edge - 1}")
        low = edge
    labels.append(str(low))
    return labels


def summarize_completion(values: Iterable[float], edges: list[int]) -> ProgressAggregate:
    """Count, mean and bucketed distribution of completion percentages."""
    values = list(values)
    labels = bucket_labels(edges)
    distribution = dict.fromkeys(labels, 0)
    for value in values:
        distribution[labels[bisect_right(edges, value)]] += 1

    mean = round(sum(values) / len(values), 2) if values else None
    return ProgressAggregate(count=len(values), mean=mean, distribution=distribution)


def _validate_percentage(percentage: object) -> float:
    if isinstance(percentage, bool) or not isinstance(percentage, int | float):
        raise ValidationError("Completion percentage must be a number", field="percentage")
    if math.isnan(percentage) or not 0 <= percentage <= 100:
        raise ValidationError(
            "Completion percentage must be between 0 and 100",
            field="percentage",
            value=percentage,
        )
    return float(percentage)


def _validate_modules(modules: object) -> list[str]:
    if not isinstance(modules, list | tuple | set | frozenset):
        raise ValidationError("Completed modules must be a list", field="completed_modules")
    out: list[str] = []
    for module in modules:
        if not isinstance(module, str) or not module.strip():
            raise ValidationError(
                "Completed modules must be non-empty names", field="completed_modules"
            )
        if module.strip() not in out:
            out.append(module.strip())
    return out


class ProgressTracker:
    def __init__(
        self,
        progress: ProgressRepoPort,
        courses: CourseReaderPort,
        enrollments: EnrollmentReaderPort,
        guard: AccessGuard,
        rules: ProgressRules,
        clock: TimePort,
    ):
        self.progress = progress
        self.courses = courses
        self.enrollments = enrollments
        self.guard = guard
        self.rules = rules
        self.clock = clock

    def _require_course(self, course_id: UUID) -> Course:
        course = self.courses.get_by_id(course_id)
        if course is None:
            raise NotFoundError("Course not found", course_id=str(course_id))
        return course

    def update_progress(
        self,
        actor: Principal,
        student_id: UUID,
        course_id: UUID,
        percentage: float,
        completed_modules: list[str] | None = None,
    ) -> Progress:
        course = self._require_course(course_id)
        self.guard.require(
            actor, "progress:update", Target(course=course, student_id=student_id)
        )

        value = _validate_percentage(percentage)
        modules = _validate_modules(completed_modules or [])

        enrollment = self.enrollments.get(student_id, course_id)
        if enrollment is None or enrollment.status not in ("active", "completed"):
            raise ForbiddenError(
                "An active or completed enrollment is required to track progress",
                course_id=str(course_id),
            )

        saved = self.progress.save(
            Progress(
                student_id=student_id,
                course_id=course_id,
                completion_percentage=value,
                completed_modules=modules,
                last_accessed_at=self.clock.now_utc(),
            )
        )
        logger.debug("Progress %s/%s -> %.2f", student_id, course_id, value)
        return saved

    def get_progress(self, actor: Principal, student_id: UUID, course_id: UUID) -> ProgressView:
        course = self._require_course(course_id)
        self.guard.require(actor, "progress:read", Target(course=course, student_id=student_id))

        enrollment = self.enrollments.get(student_id, course_id)
        if enrollment is None:
            raise NotFoundError(
                "No enrollment found", student_id=str(student_id), course_id=str(course_id)
            )

        record = self.progress.get(student_id, course_id) or Progress(
            student_id=student_id,
            course_id=course_id,
            completion_percentage=0.0,
            completed_modules=[],
            last_accessed_at=enrollment.enrolled_at,
        )

        aggregate = None
        if self.guard.allows(actor, "progress:read_roster", Target(course=course)):
            aggregate = self.aggregate(course_id)
        return ProgressView(record=record, aggregate=aggregate)

    def aggregate(self, course_id: UUID) -> ProgressAggregate:
        """Unguarded roster summary over active and completed enrollments."""
        roster = self.enrollments.list_by_course(course_id, ["active", "completed"])
        recorded = {
            p.student_id: p.completion_percentage
            for p in self.progress.list_by_course(course_id)
        }
        return summarize_completion(
            (recorded.get(e.student_id, 0.0) for e in roster), self.rules.distribution_edges
        )
