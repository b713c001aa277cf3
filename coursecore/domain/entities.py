from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
RoleType = Literal["student", "teacher", "admin", "staff"]
CourseStatus = Literal["draft", "published", "archived"]
CourseLevel = Literal["beginner", "intermediate", "advanced"]
EnrollmentStatus = Literal["active", "dropped", "completed"]


def utc_now() -> datetime:
    return datetime.now(UTC)


# --- Identity ---

class Principal(BaseModel):
    """Authenticated caller as supplied by the identity provider."""

    id: UUID
    role: RoleType


# --- Courses ---

class Course(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    code: str
    title: str
    description: str = ""
    status: CourseStatus = "draft"
    capacity: int = Field(default=0, ge=0)
    credits: int = Field(default=0, ge=0)
    instructor_id: UUID
    prerequisites: list[UUID] = Field(default_factory=list)
    schedule: str = ""

    category: str = ""
    level: CourseLevel = "beginner"
    tags: list[str] = Field(default_factory=list)
    enrollment_deadline: datetime | None = None

    enrolled_count: int = 0
    version: int = 1

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    published_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def available_seats(self) -> int:
        return max(self.capacity - self.enrolled_count, 0)


# --- Enrollment ---

class Enrollment(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    student_id: UUID
    course_id: UUID
    status: EnrollmentStatus = "active"
    enrolled_at: datetime = Field(default_factory=utc_now)
    ended_at: datetime | None = None


# --- Progress ---

class Progress(BaseModel):
    student_id: UUID
    course_id: UUID
    completion_percentage: float = Field(default=0.0, ge=0, le=100)
    completed_modules: list[str] = Field(default_factory=list)
    last_accessed_at: datetime = Field(default_factory=utc_now)


# --- Feedback ---

class Feedback(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    student_id: UUID
    course_id: UUID
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    categories: dict[str, int] = Field(default_factory=dict)
    submitted_at: datetime = Field(default_factory=utc_now)
