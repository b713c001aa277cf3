"""
FeedbackStore - one rating per student per course.

Key behaviors:
- Submission requires an active or completed enrollment
- A second submission for the same pair is rejected, never overwritten
- Student ids are withheld from viewers without breakdown rights,
  except on the viewer's own entry
"""

from __future__ import annotations

import logging
from uuid import UUID

from coursecore.domain.entities import Course, Feedback, Principal
from coursecore.domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from coursecore.domain.policy import AccessGuard, Target
from coursecore.rules.models import FeedbackRules

from .models import CategoryStat, FeedbackEntry, FeedbackSummary
from .ports import CourseReaderPort, EnrollmentReaderPort, FeedbackRepoPort, TimePort

logger = logging.getLogger(__name__)


def _is_rating(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 5


def _average(ratings: list[int]) -> float | None:
    return round(sum(ratings) / len(ratings), 2) if ratings else None


class FeedbackStore:
    def __init__(
        self,
        feedback: FeedbackRepoPort,
        courses: CourseReaderPort,
        enrollments: EnrollmentReaderPort,
        guard: AccessGuard,
        rules: FeedbackRules,
        clock: TimePort,
    ):
        self.feedback = feedback
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

    def _validate(
        self, rating: object, comment: object, categories: object
    ) -> tuple[int, str, dict[str, int]]:
        if not _is_rating(rating):
            raise ValidationError("Rating must be a whole number from 1 to 5", field="rating")

        if comment is None:
            comment = ""
        if not isinstance(comment, str):
            raise ValidationError("Comment must be text", field="comment")
        comment = comment.strip()
        if len(comment) > self.rules.comment_max:
            raise ValidationError(
                f"Comment must not exceed {self.rules.comment_max} characters", field="comment"
            )

        if categories is None:
            categories = {}
        if not isinstance(categories, dict):
            raise ValidationError("Categories must be a mapping", field="categories")
        if len(categories) > self.rules.max_categories:
            raise ValidationError(
                f"At most {self.rules.max_categories} categories allowed", field="categories"
            )
        cleaned: dict[str, int] = {}
        for name, value in categories.items():
            if not isinstance(name, str) or not name.strip():
                raise ValidationError("Category names must be non-empty", field="categories")
            if not _is_rating(value):
                raise ValidationError(
                    f"Category '{name}' rating must be a whole number from 1 to 5",
                    field="categories",
                )
            cleaned[name.strip()] = value

        return rating, comment, cleaned  # type: ignore[return-value]

    def submit_feedback(
        self,
        actor: Principal,
        student_id: UUID,
        course_id: UUID,
        rating: int,
        comment: str = "",
        categories: dict[str, int] | None = None,
    ) -> Feedback:
        course = self._require_course(course_id)
        self.guard.require(
            actor, "feedback:submit", Target(course=course, student_id=student_id)
        )
        rating, comment, cleaned = self._validate(rating, comment, categories)

        enrollment = self.enrollments.get(student_id, course_id)
        if enrollment is None or enrollment.status not in ("active", "completed"):
            raise ForbiddenError(
                "An active or completed enrollment is required to leave feedback",
                course_id=str(course_id),
            )

        if self.feedback.get(student_id, course_id) is not None:
            raise ConflictError("Feedback already submitted", course_id=str(course_id))

        saved = self.feedback.insert(
            Feedback(
                student_id=student_id,
                course_id=course_id,
                rating=rating,
                comment=comment,
                categories=cleaned,
                submitted_at=self.clock.now_utc(),
            )
        )
        logger.info("Feedback %s recorded for course %s", saved.id, course_id)
        return saved

    def get_feedback(self, actor: Principal, course_id: UUID) -> FeedbackSummary:
        course = self._require_course(course_id)
        self.guard.require(actor, "feedback:read", Target(course=course))
        privileged = self.guard.allows(actor, "feedback:breakdown", Target(course=course))

        records = self.feedback.list_by_course(course_id)
        entries = [
            FeedbackEntry(
                id=f.id,
                rating=f.rating,
                comment=f.comment,
                categories=dict(f.categories),
                submitted_at=f.submitted_at,
                student_id=f.student_id if privileged or f.student_id == actor.id else None,
            )
            for f in records
        ]

        breakdown = None
        if privileged:
            per_category: dict[str, list[int]] = {}
            for f in records:
                for name, value in f.categories.items():
                    per_category.setdefault(name, []).append(value)
            breakdown = {
                name: CategoryStat(count=len(values), average=_average(values) or 0.0)
                for name, values in sorted(per_category.items())
            }

        return FeedbackSummary(
            course_id=course.id,
            count=len(records),
            average_rating=_average([f.rating for f in records]),
            entries=entries,
            category_breakdown=breakdown,
        )
