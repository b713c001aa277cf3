"""
Courses component - course records and lifecycle.

Invariants:
- Code unique among live courses
- published -> archived only with zero active enrollments
- draft -> published only with title, description and code present
- Delete only with zero active enrollments (soft delete)
"""

from __future__ import annotations

from coursecore.domain.entities import Course
from coursecore.domain.envelope import Envelope

from ._impl import CourseRegistry
from .models import (
    ArchiveCourseInput,
    CourseSearchOutput,
    CreateCourseInput,
    DeleteCourseInput,
    GetCourseInput,
    GetPrerequisitesInput,
    ListCategoriesInput,
    PrerequisitesOutput,
    PublishCourseInput,
    SearchCoursesInput,
    UpdateCourseInput,
)

# --- Component Entry Points ---


def run_create(inp: CreateCourseInput, *, registry: CourseRegistry) -> Envelope[Course]:
    """
    Create a draft course owned by the actor.

    Args:
        inp: Draft fields plus the acting principal.
        registry: Course registry service.

    Returns:
        Envelope with the new course, or a validation/conflict/authorization error.
    """
    draft = {
        "code": inp.code,
        "title": inp.title,
        "description": inp.description,
        "capacity": inp.capacity,
        "credits": inp.credits,
        "schedule": inp.schedule,
        "category": inp.category,
        "level": inp.level,
        "tags": list(inp.tags),
        "prerequisites": list(inp.prerequisites),
        "enrollment_deadline": inp.enrollment_deadline,
        "instructor_id": inp.instructor_id,
    }
    return Envelope.capture(registry.create, inp.actor, draft)


def run_get(inp: GetCourseInput, *, registry: CourseRegistry) -> Envelope[Course]:
    return Envelope.capture(registry.get, inp.actor, inp.course_id)


def run_update(inp: UpdateCourseInput, *, registry: CourseRegistry) -> Envelope[Course]:
    """
    Patch editable fields. Status is not patchable; capacity may not drop
    below the live active count.
    """
    return Envelope.capture(registry.update, inp.actor, inp.course_id, dict(inp.patch))


def run_publish(inp: PublishCourseInput, *, registry: CourseRegistry) -> Envelope[Course]:
    """Publish a draft or archived course. Publishing twice is a no-op."""
    return Envelope.capture(registry.publish, inp.actor, inp.course_id)


def run_archive(inp: ArchiveCourseInput, *, registry: CourseRegistry) -> Envelope[Course]:
    return Envelope.capture(registry.archive, inp.actor, inp.course_id)


def run_delete(inp: DeleteCourseInput, *, registry: CourseRegistry) -> Envelope[Course]:
    return Envelope.capture(registry.delete, inp.actor, inp.course_id)


def run_search(
    inp: SearchCoursesInput, *, registry: CourseRegistry
) -> Envelope[CourseSearchOutput]:
    """
    Search courses.

    Callers without unpublished-read rights only ever see published courses,
    whatever status filter they pass.
    """
    return Envelope.capture(
        registry.search,
        inp.actor,
        text=inp.text,
        category=inp.category,
        level=inp.level,
        tags=list(inp.tags),
        status=inp.status,
        instructor_id=inp.instructor_id,
        min_credits=inp.min_credits,
        max_credits=inp.max_credits,
        has_available_spots=inp.has_available_spots,
        limit=inp.limit,
        offset=inp.offset,
        sort_by=inp.sort_by,
        sort_order=inp.sort_order,
    )


def run_list_categories(
    inp: ListCategoriesInput, *, registry: CourseRegistry
) -> Envelope[list[str]]:
    return Envelope.capture(registry.list_categories, inp.actor)


def run_list_levels(*, registry: CourseRegistry) -> Envelope[list[str]]:
    return Envelope.ok(registry.list_levels())


def run_get_prerequisites(
    inp: GetPrerequisitesInput, *, registry: CourseRegistry
) -> Envelope[PrerequisitesOutput]:
    return Envelope.capture(
        registry.get_prerequisites, inp.actor, inp.course_id, inp.student_id
    )
