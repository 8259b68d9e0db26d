"""Analysis job schemas."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .layout import LayoutResult


class JobStatus(str, Enum):
    """Lifecycle status of one analysis job."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PENDING


@dataclass(frozen=True)
class JobHandle:
    """Reference to a submitted job.

    Attributes:
        operation_location: Server-supplied completion-tracking URL
        api_key: Credential reused for status checks
    """
    operation_location: str
    api_key: str


@dataclass
class AnalysisJob:
    """One submitted analysis request and its lifecycle status.

    Status moves Pending -> Succeeded or Pending -> Failed exactly once.
    """
    handle: Optional[JobHandle] = None
    status: JobStatus = JobStatus.PENDING
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    result: Optional[LayoutResult] = None
    error: Optional[str] = None

    def succeed(self, result: LayoutResult) -> None:
        self._ensure_pending()
        self.status = JobStatus.SUCCEEDED
        self.result = result

    def fail(self, reason: str) -> None:
        self._ensure_pending()
        self.status = JobStatus.FAILED
        self.error = reason

    def _ensure_pending(self) -> None:
        if self.status.is_terminal:
            raise RuntimeError(f"Job already terminal (status={self.status.value})")
