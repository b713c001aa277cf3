from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from coursecore.adapters.clock import SystemClock
from coursecore.adapters.sqlite.migrator import SQLiteMigrator
from coursecore.adapters.sqlite.repos import (
    SQLiteCourseRepo,
    SQLiteEligibilityReader,
    SQLiteEnrollmentRepo,
    SQLiteFeedbackRepo,
    SQLiteProgressRepo,
)
from coursecore.components.analytics import AnalyticsService
from coursecore.components.courses import CourseRegistry
from coursecore.components.eligibility import EligibilityEvaluator
from coursecore.components.enrollment import EnrollmentLedger
from coursecore.components.feedback import FeedbackStore
from coursecore.components.progress import ProgressTracker
from coursecore.domain.policy import AccessGuard, PolicyEngine
from coursecore.rules.models import Rules


@dataclass
class ServiceContext:
    registry: CourseRegistry
    eligibility: EligibilityEvaluator
    ledger: EnrollmentLedger
    tracker: ProgressTracker
    feedback: FeedbackStore
    analytics: AnalyticsService
    course_repo: SQLiteCourseRepo
    enrollment_repo: SQLiteEnrollmentRepo
    progress_repo: SQLiteProgressRepo
    feedback_repo: SQLiteFeedbackRepo
    guard: AccessGuard
    rules: Rules
    clock: Any = None  # For testing/injection

    @classmethod
    def create(
        cls,
        db_path: str,
        rules: Rules,
        clock: Any = None,
        migrate: bool = True,
    ) -> ServiceContext:
        if migrate:
            SQLiteMigrator(db_path).run_migrations()

        timeout = rules.storage.busy_timeout_seconds
        clock = clock or SystemClock()

        # Adapters
        course_repo = SQLiteCourseRepo(db_path, timeout)
        enrollment_repo = SQLiteEnrollmentRepo(db_path, timeout)
        progress_repo = SQLiteProgressRepo(db_path, timeout)
        feedback_repo = SQLiteFeedbackRepo(db_path, timeout)
        eligibility_reader = SQLiteEligibilityReader(db_path, timeout)

        # Domain
        guard = AccessGuard(PolicyEngine(rules))

        # Services
        registry = CourseRegistry(course_repo, enrollment_repo, guard, rules, clock)
        eligibility = EligibilityEvaluator(eligibility_reader, guard, clock)
        ledger = EnrollmentLedger(
            course_repo, enrollment_repo, eligibility, guard, rules.enrollment, clock
        )
        tracker = ProgressTracker(
            progress_repo, course_repo, enrollment_repo, guard, rules.progress, clock
        )
        feedback = FeedbackStore(
            feedback_repo, course_repo, enrollment_repo, guard, rules.feedback, clock
        )
        analytics = AnalyticsService(
            course_repo, enrollment_repo, progress_repo, feedback_repo, tracker, guard
        )

        return cls(
            registry=registry,
            eligibility=eligibility,
            ledger=ledger,
            tracker=tracker,
            feedback=feedback,
            analytics=analytics,
            course_repo=course_repo,
            enrollment_repo=enrollment_repo,
            progress_repo=progress_repo,
            feedback_repo=feedback_repo,
            guard=guard,
            rules=rules,
            clock=clock,
        )
