"""Terminal outcome of measuring one target."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .latency import Sample


class Classification(Enum):
    """Outcome buckets. Mutually exclusive and set once per target.

    - READY: every object in the readiness chain converged; a Sample exists
    - NOT_READY: the service or a dependency has not converged yet
    - NOT_FOUND: the top-level service does not exist
    - FAIL: unexpected lookup error on the top-level service
    """

    READY = "ready"
    NOT_READY = "not_ready"
    NOT_FOUND = "not_found"
    FAIL = "fail"


@dataclass(frozen=True)
class ResolveResult:
    classification: Classification
    sample: Optional[Sample] = None
    # Chain step that decided a non-ready outcome (for logs)
    step: Optional[str] = None
    reason: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.classification is Classification.READY

    @classmethod
    def ready(cls, sample: Sample) -> "ResolveResult":
        return cls(Classification.READY, sample=sample)

    @classmethod
    def not_ready(cls, step: str, reason: str) -> "ResolveResult":
        return cls(Classification.NOT_READY, step=step, reason=reason)

    @classmethod
    def not_found(cls, reason: str) -> "ResolveResult":
        return cls(Classification.NOT_FOUND, step="service", reason=reason)

    @classmethod
    def fail(cls, step: str, reason: str) -> "ResolveResult":
        return cls(Classification.FAIL, step=step, reason=reason)
