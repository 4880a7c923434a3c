"""Concurrent latency measurement engine for serving workloads.

Modules:
- core: domain types, resolver chain, target enumeration
- pool: worker pool + shared result tables
- metrics: per-worker accumulators, merge, statistics
- platform: kubectl-backed and in-memory platform clients
- engine: coordinator (MeasureEngine)
"""

from .core.domain import (
    Target,
    Classification,
    ResolveResult,
    Sample,
    LatencyChain,
    PlatformInfo,
    IPlatformClient,
    PlatformError,
    PlatformNotFoundError,
    PlatformLookupError,
    NoTargetsError,
)
from .engine import MeasureEngine, MeasureOutcome, measure_targets
from .metrics import GlobalAggregate, OverallStats, ServiceCounts

__all__ = [
    "Target",
    "Classification",
    "ResolveResult",
    "Sample",
    "LatencyChain",
    "PlatformInfo",
    "IPlatformClient",
    "PlatformError",
    "PlatformNotFoundError",
    "PlatformLookupError",
    "NoTargetsError",
    "MeasureEngine",
    "MeasureOutcome",
    "measure_targets",
    "GlobalAggregate",
    "OverallStats",
    "ServiceCounts",
]
