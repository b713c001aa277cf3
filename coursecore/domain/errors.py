"""
Error taxonomy for the enrollment core.

Every business failure raised by a service derives from CoreError and carries
a stable machine-readable ``kind`` plus a human-readable message. Shell
functions convert these into error envelopes; nothing is half-applied when one
is raised.
"""

from __future__ import annotations

from typing import Any


class CoreError(Exception):
    """Base class for all business and storage failures."""

    kind: str = "error"

    def __init__(self, message: str, **details: Any) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(CoreError):
    """Malformed, missing or out-of-range input."""

    kind = "validation"

    def __init__(self, message: str, field: str | None = None, **details: Any) -> None:
        self.field = field
        super().__init__(message, **details)


class AuthorizationError(CoreError):
    """Role or ownership violation. Always carries the same message."""

    kind = "authorization"
    MESSAGE = "Not authorized to perform this operation"

    def __init__(self, message: str | None = None, **details: Any) -> None:
        super().__init__(message or self.MESSAGE, **details)


class ForbiddenError(CoreError):
    """Caller is authorized by role but lacks the required enrollment."""

    kind = "forbidden"


class NotFoundError(CoreError):
    """Unknown id, or an idempotent call on an already-terminal record."""

    kind = "not-found"


class ConflictError(CoreError):
    """Duplicate code, enrollment or feedback."""

    kind = "conflict"


class CapacityError(ConflictError):
    """Course has no free seat."""

    kind = "capacity"


class DuplicateCodeError(ValidationError, ConflictError):
    """Course code already used by a non-deleted course."""

    kind = "conflict"

    def __init__(self, code: str) -> None:
        super().__init__(f"Course code '{code}' already exists", field="code", code=code)


class PrerequisiteError(ValidationError):
    """Student has not completed every prerequisite course."""

    kind = "missing-prerequisite"

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Missing prerequisite courses: {', '.join(missing)}",
            field="prerequisites",
            missing=missing,
        )


class StateError(CoreError):
    """Illegal lifecycle transition or operation on a course in the wrong state."""

    kind = "state"


class ServiceUnavailable(CoreError):
    """Storage timed out or is unreachable. Safe to retry."""

    kind = "service-unavailable"
