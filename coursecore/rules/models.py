import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class RbacRules(BaseModel):
    roles: dict[str, list[str]]
    public_permissions: list[str] = Field(default_factory=list)

class AbacRule(BaseModel):
    if_condition: dict[str, Any] = Field(alias="if")
    allow: list[str]

    model_config = ConfigDict(populate_by_name=True)

class AbacRules(BaseModel):
    rules: list[AbacRule]

class CourseRules(BaseModel):
    code_pattern: str
    title_max: int = Field(gt=0)
    description_max: int = Field(gt=0)
    max_capacity: int = Field(ge=0)
    levels: list[str] = Field(min_length=1)

    @field_validator("code_pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid code pattern: {e}") from e
        return v

class EnrollmentRules(BaseModel):
    max_attempts: int = Field(ge=1)
    retry_backoff_ms: int = Field(default=0, ge=0)

class ProgressRules(BaseModel):
    # Upper-exclusive bucket edges, e.g. [25, 50, 75, 100]
    distribution_edges: list[int] = Field(min_length=1)

    @field_validator("distribution_edges")
    @classmethod
    def validate_edges(cls, v: list[int]) -> list[int]:
        if any(b <= a for a, b in zip(v, v[1:], strict=False)) or v[0] <= 0:
            raise ValueError("Distribution edges must be positive and strictly increasing")
        if v[-1] != 100:
            raise ValueError("Last distribution edge must be 100")
        return v

class FeedbackRules(BaseModel):
    comment_max: int = Field(gt=0)
    max_categories: int = Field(ge=0)

class SearchRules(BaseModel):
    default_limit: int = Field(ge=1)
    max_limit: int = Field(ge=1)

class StorageRules(BaseModel):
    busy_timeout_seconds: float = Field(gt=0)

class Rules(BaseModel):
    project: ProjectRules
    rbac: RbacRules
    abac: AbacRules
    courses: CourseRules
    enrollment: EnrollmentRules
    progress: ProgressRules
    feedback: FeedbackRules
    search: SearchRules
    storage: StorageRules
