from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

IMAGE = "image"
CONTAINER = "container"


class OutcomeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class RemovalOutcome:
    kind: str                       # image / container
    resource_id: str
    status: OutcomeStatus
    reason: Optional[str] = None
    size: int = 0                   # bytes freed, images only
    image_id: Optional[str] = None  # owning image for cascaded containers

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED


@dataclass
class RunResult:
    """Aggregated outcome of one removal pass."""
    outcomes: List[RemovalOutcome] = field(default_factory=list)
    error: Optional[str] = None     # failure surfaced as the run's error signal
    aborted: bool = False           # sequential default path stopped early

    def _count(self, status: OutcomeStatus, kind: str | None) -> int:
        return sum(
            1 for o in self.outcomes
            if o.status is status and (kind is None or o.kind == kind)
        )

    def succeeded(self, kind: str | None = None) -> int:
        return self._count(OutcomeStatus.SUCCEEDED, kind)

    def failed(self, kind: str | None = None) -> int:
        return self._count(OutcomeStatus.FAILED, kind)

    def skipped(self, kind: str | None = None) -> int:
        return self._count(OutcomeStatus.SKIPPED, kind)

    @property
    def reclaimed_bytes(self) -> int:
        return sum(o.size for o in self.outcomes if o.succeeded)

    @property
    def ok(self) -> bool:
        return self.error is None and self.failed() == 0
