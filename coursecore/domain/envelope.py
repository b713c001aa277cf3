from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from coursecore.domain.errors import CoreError

T = TypeVar("T")


@dataclass(frozen=True)
class ErrorInfo:
    """Machine-readable error kind plus message."""

    kind: str
    message: str
    details: dict[str, Any]


@dataclass(frozen=True)
class Envelope(Generic[T]):
    """Uniform response envelope returned by every shell operation."""

    success: bool
    data: T | None = None
    error: ErrorInfo | None = None

    @classmethod
    def ok(cls, data: T) -> Envelope[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: CoreError) -> Envelope[T]:
        return cls(
            success=False,
            error=ErrorInfo(kind=exc.kind, message=exc.message, details=dict(exc.details)),
        )

    @classmethod
    def capture(cls, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Envelope[T]:
        """Call fn and wrap its result; a CoreError becomes a failure envelope."""
        try:
            return cls.ok(fn(*args, **kwargs))
        except CoreError as e:
            return cls.fail(e)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        assert self.error is not None
        return {
            "success": False,
            "error": {"kind": self.error.kind, "message": self.error.message},
        }
