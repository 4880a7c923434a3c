"""Data models for merged measurement results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..core.domain.snapshots import PlatformInfo


@dataclass(frozen=True)
class ServiceCounts:
    ready: int = 0
    not_ready: int = 0
    not_found: int = 0
    fail: int = 0

    @property
    def total(self) -> int:
        return self.ready + self.not_ready + self.not_found + self.fail

    def percent(self, count: int) -> float:
        if self.total == 0:
            return 0.0
        return count / self.total * 100

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "ready": self.ready,
            "not_ready": self.not_ready,
            "not_found": self.not_found,
            "fail": self.fail,
        }


@dataclass(frozen=True)
class MeasureTotals:
    """Field-wise sum of every worker accumulator."""

    counts: ServiceCounts
    partial_count: int
    stage_sums: Dict[str, float]
    # Sorted ascending so the merge result does not depend on worker order
    overall_ready_samples: Tuple[float, ...]


@dataclass(frozen=True)
class OverallStats:
    """Statistics over overall_ready durations (seconds)."""

    total: float
    average: float
    median: float
    min: float
    max: float
    p50: float
    p90: float
    p95: float
    p98: float
    p99: float

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "average": self.average,
            "median": self.median,
            "min": self.min,
            "max": self.max,
            "p50": self.p50,
            "p90": self.p90,
            "p95": self.p95,
            "p98": self.p98,
            "p99": self.p99,
        }


@dataclass(frozen=True)
class GlobalAggregate:
    """Run-wide result. Written once by the coordinator after all workers join."""

    counts: ServiceCounts
    partial_count: int
    stage_sums: Dict[str, float]
    overall_ready_samples: Tuple[float, ...]
    platform: PlatformInfo = field(default_factory=PlatformInfo)

    # Only present when counts.ready > 0
    stage_averages: Optional[Dict[str, float]] = None
    overall: Optional[OverallStats] = None

    @property
    def has_statistics(self) -> bool:
        return self.overall is not None

    def to_dict(self) -> dict:
        return {
            "platform": self.platform.to_dict(),
            "service": self.counts.to_dict(),
            "partial_count": self.partial_count,
            "sums": dict(self.stage_sums),
            "averages": dict(self.stage_averages) if self.stage_averages is not None else None,
            "overall": self.overall.to_dict() if self.overall is not None else None,
            "overall_ready_samples": list(self.overall_ready_samples),
        }
