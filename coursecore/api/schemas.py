from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


# --- Courses ---
class CourseCreateRequest(BaseModel):
    code: str = ""
    title: str = ""
    description: str = ""
    capacity: int = 0
    credits: int = 0
    schedule: str = ""
    category: str = ""
    level: str = "beginner"
    tags: list[str] = Field(default_factory=list)
    prerequisites: list[UUID] = Field(default_factory=list)
    enrollment_deadline: datetime | None = None
    instructor_id: UUID | None = None


class CourseUpdateRequest(BaseModel):
    code: str | None = None
    title: str | None = None
    description: str | None = None
    capacity: int | None = None
    credits: int | None = None
    schedule: str | None = None
    category: str | None = None
    level: str | None = None
    tags: list[str] | None = None
    prerequisites: list[UUID] | None = None
    enrollment_deadline: datetime | None = None
    instructor_id: UUID | None = None
    # Accepted so the core can reject it with a clear message
    status: str | None = None

    def to_patch(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# --- Enrollment ---
class EnrollRequest(BaseModel):
    student_id: UUID | None = None


# --- Progress ---
class ProgressUpdateRequest(BaseModel):
    percentage: float
    completed_modules: list[str] = Field(default_factory=list)


# --- Feedback ---
class FeedbackSubmitRequest(BaseModel):
    rating: int
    comment: str = ""
    categories: dict[str, int] = Field(default_factory=dict)
    student_id: UUID | None = None
