"""
Eligibility component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from .models import EligibilitySnapshot


class EligibilityReaderPort(Protocol):
    """Reads course, pair and completion state in one read transaction."""

    def read(self, student_id: UUID, course_id: UUID) -> EligibilitySnapshot | None:
        """Return the snapshot, or None if the course does not exist."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
