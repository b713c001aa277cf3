"""
CourseRegistry - canonical course records and lifecycle.

Key behaviors:
- Codes are upper-cased on write and unique among live courses
- Lifecycle moves only through publish/archive (see domain.state)
- Archive, delete and capacity changes are conditional writes so a racing
  enroll can never leave active enrollments above capacity or on an
  archived/deleted course
- Students only ever see published courses
"""

from __future__ import annotations

import logging
import re
from collections import deque
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from coursecore.domain.entities import Course, CourseStatus, Principal
from coursecore.domain.errors import (
    ConflictError,
    DuplicateCodeError,
    NotFoundError,
    StateError,
    ValidationError,
)
from coursecore.domain.policy import AccessGuard, Target
from coursecore.domain.state import publish_readiness, transition
from coursecore.rules.models import Rules

from .models import (
    PATCHABLE_FIELDS,
    SORT_FIELDS,
    SORT_ORDERS,
    CourseSearchOutput,
    PrerequisitesOutput,
)
from .ports import CompletionReaderPort, CourseRepoPort, TimePort

logger = logging.getLogger(__name__)


def _as_uuid(value: Any, field: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as e:
        raise ValidationError(f"Invalid id '{value}'", field=field) from e


class CourseRegistry:
    def __init__(
        self,
        repo: CourseRepoPort,
        completions: CompletionReaderPort,
        guard: AccessGuard,
        rules: Rules,
        clock: TimePort,
    ):
        self.repo = repo
        self.completions = completions
        self.guard = guard
        self.rules = rules
        self.clock = clock
        self._code_re = re.compile(rules.courses.code_pattern)

    # --- Validation ---

    def _normalize(
        self,
        values: dict[str, Any],
        course_id: UUID | None = None,
        kept: frozenset[UUID] = frozenset(),
    ) -> dict[str, Any]:
        """Validate and normalize editable fields. Raises ValidationError."""
        limits = self.rules.courses
        out: dict[str, Any] = {}

        code = values.get("code")
        if not isinstance(code, str) or not code.strip():
            raise ValidationError("Course code is required", field="code")
        out["code"] = code.strip().upper()
        if not self._code_re.match(out["code"]):
            raise ValidationError(f"Invalid course code '{out['code']}'", field="code")

        title = values.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Course title is required", field="title")
        out["title"] = title.strip()
        if len(out["title"]) > limits.title_max:
            raise ValidationError(
                f"Title must not exceed {limits.title_max} characters", field="title"
            )

        description = values.get("description") or ""
        if not isinstance(description, str):
            raise ValidationError("Description must be text", field="description")
        if len(description) > limits.description_max:
            raise ValidationError(
                f"Description must not exceed {limits.description_max} characters",
                field="description",
            )
        out["description"] = description.strip()

        for name in ("capacity", "credits"):
            value = values.get(name, 0)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"{name.capitalize()} must be an integer", field=name)
            if value < 0:
                raise ValidationError(f"{name.capitalize()} cannot be negative", field=name)
            out[name] = value
        if out["capacity"] > limits.max_capacity:
            raise ValidationError(
                f"Capacity must not exceed {limits.max_capacity}", field="capacity"
            )

        level = values.get("level") or "beginner"
        if level not in limits.levels:
            raise ValidationError(
                f"Level must be one of: {', '.join(limits.levels)}", field="level"
            )
        out["level"] = level

        for name in ("schedule", "category"):
            value = values.get(name) or ""
            if not isinstance(value, str):
                raise ValidationError(f"{name.capitalize()} must be text", field=name)
            out[name] = value.strip()

        tags: list[str] = []
        for tag in values.get("tags") or []:
            if not isinstance(tag, str):
                raise ValidationError("Tags must be text", field="tags")
            tag = tag.strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
        out["tags"] = tags

        deadline = values.get("enrollment_deadline")
        if deadline is not None:
            if not isinstance(deadline, datetime):
                raise ValidationError(
                    "Enrollment deadline must be a datetime", field="enrollment_deadline"
                )
            if deadline.tzinfo is None:
                deadline = deadline.replace(tzinfo=UTC)
        out["enrollment_deadline"] = deadline

        prerequisites: list[UUID] = []
        for raw in values.get("prerequisites") or []:
            prereq_id = _as_uuid(raw, "prerequisites")
            if prereq_id not in prerequisites:
                prerequisites.append(prereq_id)
        if course_id is not None and course_id in prerequisites:
            raise ValidationError("A course cannot require itself", field="prerequisites")
        # Ids already on the course were validated when they were added
        added = [p for p in prerequisites if p not in kept]
        if added:
            found = {c.id for c in self.repo.get_many(added)}
            unknown = [str(p) for p in added if p not in found]
            if unknown:
                raise ValidationError(
                    f"Unknown prerequisite courses: {', '.join(unknown)}",
                    field="prerequisites",
                    unknown=unknown,
                )
        out["prerequisites"] = prerequisites

        return out

    def _requires_transitively(self, start: list[UUID], target: UUID) -> bool:
        """True if any course reachable from start through prerequisites is target."""
        seen: set[UUID] = set()
        queue = deque(start)
        while queue:
            batch = []
            while queue:
                course_id = queue.popleft()
                if course_id == target:
                    return True
                if course_id not in seen:
                    seen.add(course_id)
                    batch.append(course_id)
            for course in self.repo.get_many(batch):
                queue.extend(course.prerequisites)
        return False

    def _require_course(self, course_id: UUID) -> Course:
        course = self.repo.get_by_id(course_id)
        if course is None:
            raise NotFoundError("Course not found", course_id=str(course_id))
        return course

    # --- Operations ---

    def create(self, actor: Principal, draft: dict[str, Any]) -> Course:
        self.guard.require(actor, "course:create")

        instructor_id = draft.get("instructor_id")
        instructor_id = _as_uuid(instructor_id, "instructor_id") if instructor_id else actor.id
        if instructor_id != actor.id:
            self.guard.require(actor, "course:assign_instructor")

        values = self._normalize(draft)
        if self.repo.get_by_code(values["code"]) is not None:
            raise DuplicateCodeError(values["code"])

        now = self.clock.now_utc()
        course = Course(
            **values,
            instructor_id=instructor_id,
            status="draft",
            created_at=now,
            updated_at=now,
        )
        saved = self.repo.insert(course)
        logger.info("Created course %s (%s)", saved.code, saved.id)
        return saved

    def get(self, actor: Principal, course_id: UUID) -> Course:
        course = self._require_course(course_id)
        self.guard.require(actor, "course:read", Target(course=course))
        if course.status != "published" and not self.guard.allows(
            actor, "course:read_unpublished", Target(course=course)
        ):
            # Unpublished courses do not exist as far as this caller can tell
            raise NotFoundError("Course not found", course_id=str(course_id))
        return course

    def update(self, actor: Principal, course_id: UUID, patch: dict[str, Any]) -> Course:
        course = self._require_course(course_id)
        self.guard.require(actor, "course:update", Target(course=course))

        rejected = sorted(set(patch) - PATCHABLE_FIELDS)
        if rejected:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(rejected)}", field=rejected[0]
            )

        instructor_id = course.instructor_id
        if patch.get("instructor_id") is not None:
            instructor_id = _as_uuid(patch["instructor_id"], "instructor_id")
            if instructor_id != course.instructor_id:
                self.guard.require(actor, "course:assign_instructor", Target(course=course))

        merged = course.model_dump(include=set(PATCHABLE_FIELDS - {"instructor_id"}))
        merged.update({k: v for k, v in patch.items() if k != "instructor_id"})
        values = self._normalize(
            merged, course_id=course.id, kept=frozenset(course.prerequisites)
        )

        added = [p for p in values["prerequisites"] if p not in course.prerequisites]
        if added and self._requires_transitively(added, course.id):
            raise ValidationError("Prerequisites would create a cycle", field="prerequisites")

        if values["code"] != course.code:
            existing = self.repo.get_by_code(values["code"])
            if existing is not None and existing.id != course.id:
                raise DuplicateCodeError(values["code"])

        if values["capacity"] < course.enrolled_count:
            raise ConflictError(
                "Capacity cannot be lower than the active enrollment count",
                capacity=values["capacity"],
                enrolled=course.enrolled_count,
            )

        updated = course.model_copy(
            update={**values, "instructor_id": instructor_id, "updated_at": self.clock.now_utc()}
        )
        if updated.status == "published":
            missing = publish_readiness(updated)
            if missing:
                raise ValidationError(
                    f"Published courses require: {', '.join(missing)}", field=missing[0]
                )

        if not self.repo.update_fields(updated):
            current = self._require_course(course_id)
            raise ConflictError(
                "Capacity cannot be lower than the active enrollment count",
                capacity=updated.capacity,
                enrolled=current.enrolled_count,
            )
        logger.info("Updated course %s", course_id)
        return self._require_course(course_id)

    def _set_status(self, course: Course, to_status: CourseStatus) -> Course:
        moved = transition(course, to_status, self.clock.now_utc())

        # Conditional on the status this transition was validated from
        ok = self.repo.set_status(
            course.id,
            [course.status],
            moved.status,
            moved.updated_at,
            require_no_active=moved.status == "archived",
        )

        current = self._require_course(course.id)
        if ok or current.status == to_status:
            logger.info("Course %s is now %s", course.id, to_status)
            return current
        if to_status == "archived" and current.enrolled_count > 0:
            raise ConflictError(
                "Course has active enrollments", active=current.enrolled_count
            )
        raise StateError(
            f"Invalid transition from {current.status} to {to_status}",
            from_status=current.status,
            to_status=to_status,
        )

    def publish(self, actor: Principal, course_id: UUID) -> Course:
        course = self._require_course(course_id)
        self.guard.require(actor, "course:publish", Target(course=course))
        if course.status == "published":
            return course
        return self._set_status(course, "published")

    def archive(self, actor: Principal, course_id: UUID) -> Course:
        course = self._require_course(course_id)
        self.guard.require(actor, "course:archive", Target(course=course))
        if course.status == "archived":
            return course
        if course.status == "published" and course.enrolled_count > 0:
            raise ConflictError("Course has active enrollments", active=course.enrolled_count)
        return self._set_status(course, "archived")

    def delete(self, actor: Principal, course_id: UUID) -> Course:
        course = self._require_course(course_id)
        self.guard.require(actor, "course:delete", Target(course=course))
        if course.enrolled_count > 0:
            raise ConflictError("Course has active enrollments", active=course.enrolled_count)
        self._reject_dependents(course_id)

        if not self.repo.soft_delete(course_id, self.clock.now_utc()):
            current = self._require_course(course_id)
            self._reject_dependents(course_id)
            raise ConflictError(
                "Course has active enrollments", active=current.enrolled_count
            )

        logger.info("Deleted course %s", course_id)
        deleted = self.repo.get_by_id(course_id, include_deleted=True)
        assert deleted is not None
        return deleted

    def _reject_dependents(self, course_id: UUID) -> None:
        dependents = self.repo.list_dependents(course_id)
        if dependents:
            codes = [c.code for c in dependents]
            raise ConflictError(
                f"Course is a prerequisite of: {', '.join(codes)}", dependents=codes
            )

    def search(
        self,
        actor: Principal,
        *,
        text: str | None = None,
        category: str | None = None,
        level: str | None = None,
        status: str | None = "published",
        tags: list[str] | None = None,
        instructor_id: UUID | None = None,
        min_credits: int | None = None,
        max_credits: int | None = None,
        has_available_spots: bool = False,
        limit: int | None = None,
        offset: int = 0,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> CourseSearchOutput:
        self.guard.require(actor, "course:search")
        limits = self.rules.search

        if limit is None:
            limit = limits.default_limit
        if limit < 1:
            raise ValidationError("Limit must be at least 1", field="limit")
        limit = min(limit, limits.max_limit)
        if offset < 0:
            raise ValidationError("Offset cannot be negative", field="offset")
        if sort_by not in SORT_FIELDS:
            raise ValidationError(
                f"Sort field must be one of: {', '.join(SORT_FIELDS)}", field="sort_by"
            )
        if sort_order not in SORT_ORDERS:
            raise ValidationError("Sort order must be asc or desc", field="sort_order")
        if level is not None and level not in self.rules.courses.levels:
            raise ValidationError(
                f"Level must be one of: {', '.join(self.rules.courses.levels)}", field="level"
            )
        if status is not None and status not in ("draft", "published", "archived"):
            raise ValidationError(f"Unknown status '{status}'", field="status")

        sees_all = self.guard.allows(actor, "course:read_unpublished")
        own_listing = instructor_id is not None and instructor_id == actor.id
        statuses: list[CourseStatus] | None
        if sees_all or own_listing:
            statuses = [status] if status else None  # type: ignore[list-item]
        elif status in (None, "published"):
            statuses = ["published"]
        else:
            # Drafts and archived courses do not exist for this caller
            return CourseSearchOutput(items=[], total=0, limit=limit, offset=offset, has_more=False)

        wanted = sorted({t.strip().lower() for t in tags or [] if t.strip()})

        items, total = self.repo.search(
            text=text,
            category=category,
            level=level,
            tags=wanted or None,
            statuses=statuses,
            instructor_id=instructor_id,
            min_credits=min_credits,
            max_credits=max_credits,
            has_available_spots=has_available_spots,
            sort_by=sort_by,
            sort_order=sort_order,
            limit=limit,
            offset=offset,
        )
        return CourseSearchOutput(
            items=items,
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(items) < total,
        )

    def list_categories(self, actor: Principal) -> list[str]:
        self.guard.require(actor, "course:search")
        return self.repo.list_categories()

    def list_levels(self) -> list[str]:
        return list(self.rules.courses.levels)

    def get_prerequisites(
        self, actor: Principal, course_id: UUID, student_id: UUID | None = None
    ) -> PrerequisitesOutput:
        course = self.get(actor, course_id)
        self.guard.require(actor, "course:prerequisites", Target(course=course))
        prerequisites = self.repo.get_many(course.prerequisites)

        if student_id is None:
            return PrerequisitesOutput(course_id=course.id, prerequisites=prerequisites)

        self.guard.require(
            actor, "eligibility:check", Target(course=course, student_id=student_id)
        )
        done = {
            e.course_id for e in self.completions.list_by_student(student_id, ["completed"])
        }
        completed = [p for p in course.prerequisites if p in done]
        missing = [p for p in course.prerequisites if p not in done]
        return PrerequisitesOutput(
            course_id=course.id,
            prerequisites=prerequisites,
            completed=completed,
            missing=missing,
            satisfied=not missing,
        )
