"""
AnalyticsService - read-only aggregate surfaces for external consumers.

Nothing here writes; figures may lag concurrent enrollments.
"""

from __future__ import annotations

from uuid import UUID

from coursecore.components.progress import ProgressTracker
from coursecore.domain.entities import Principal
from coursecore.domain.errors import NotFoundError
from coursecore.domain.policy import AccessGuard, Target

from .models import CategoryCount, CourseSummary, PlatformStats
from .ports import CourseStatsPort, EnrollmentStatsPort, FeedbackStatsPort, ProgressStatsPort


class AnalyticsService:
    def __init__(
        self,
        courses: CourseStatsPort,
        enrollments: EnrollmentStatsPort,
        progress: ProgressStatsPort,
        feedback: FeedbackStatsPort,
        tracker: ProgressTracker,
        guard: AccessGuard,
    ):
        self.courses = courses
        self.enrollments = enrollments
        self.progress = progress
        self.feedback = feedback
        self.tracker = tracker
        self.guard = guard

    def platform_stats(self, actor: Principal) -> PlatformStats:
        self.guard.require(actor, "analytics:read")

        by_status = self.courses.status_counts()
        enrollments = self.enrollments.status_counts()
        mean = self.progress.mean_completion()
        feedback_count, rating = self.feedback.rating_summary()

        return PlatformStats(
            total_courses=sum(by_status.values()),
            courses_by_status=by_status,
            enrollments_by_status=enrollments,
            active_enrollments=enrollments.get("active", 0),
            average_completion=round(mean, 2) if mean is not None else None,
            feedback_count=feedback_count,
            average_rating=round(rating, 2) if rating is not None else None,
            top_categories=[
                CategoryCount(category=name, courses=n)
                for name, n in self.courses.top_categories()
            ],
        )

    def course_summary(self, actor: Principal, course_id: UUID) -> CourseSummary:
        course = self.courses.get_by_id(course_id)
        if course is None:
            raise NotFoundError("Course not found", course_id=str(course_id))
        self.guard.require(actor, "analytics:course_summary", Target(course=course))

        ratings = [f.rating for f in self.feedback.list_by_course(course_id)]
        fill_rate = course.enrolled_count / course.capacity if course.capacity else 0.0
        return CourseSummary(
            course_id=course.id,
            code=course.code,
            title=course.title,
            status=course.status,
            capacity=course.capacity,
            active_enrollments=course.enrolled_count,
            available_seats=course.available_seats,
            fill_rate=round(fill_rate, 4),
            enrollments_by_status=self.enrollments.status_counts(course_id),
            progress=self.tracker.aggregate(course_id),
            feedback_count=len(ratings),
            average_rating=round(sum(ratings) / len(ratings), 2) if ratings else None,
        )
