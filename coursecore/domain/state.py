from datetime import datetime
from typing import Any

from coursecore.domain.entities import Course, CourseStatus
from coursecore.domain.errors import StateError, ValidationError

TRANSITIONS: dict[CourseStatus, list[CourseStatus]] = {
    "draft": ["published"],
    "published": ["archived"],
    "archived": ["published"],
}


def can_transition(current: CourseStatus, new: CourseStatus) -> bool:
    """
    Determine if a lifecycle transition is allowed.
    Staying in the same status is always allowed (idempotent publish/archive).
    """
    if current == new:
        return True
    return new in TRANSITIONS.get(current, [])


def publish_readiness(course: Course) -> list[str]:
    """Return the names of required fields that are still empty."""
    missing = []
    for field in ("title", "description", "code"):
        value = getattr(course, field)
        if not value or not value.strip():
            missing.append(field)
    return missing


def transition(course: Course, new_status: CourseStatus, now: datetime) -> Course:
    """
    Return a NEW Course with the updated status and timestamps.
    Raises StateError if the transition is invalid and ValidationError if a
    draft is not ready to publish. Active-enrollment guards live in the
    storage layer because they must hold at write time.
    """
    if course.status == new_status:
        return course.model_copy()

    if not can_transition(course.status, new_status):
        raise StateError(
            f"Invalid transition from {course.status} to {new_status}",
            from_status=course.status,
            to_status=new_status,
        )

    if new_status == "published":
        missing = publish_readiness(course)
        if missing:
            raise ValidationError(
                f"Course is not ready to publish: {', '.join(missing)} required",
                field=missing[0],
                missing=missing,
            )

    updates: dict[str, Any] = {"status": new_status, "updated_at": now}
    if new_status == "published":
        updates["published_at"] = now

    return course.model_copy(update=updates)
