"""Statistics over the merged overall_ready sample.

Percentiles use linear interpolation between closest ranks (numpy default).
Nothing is computed when there are no ready targets.
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from ..core.domain.snapshots import PlatformInfo
from .models import GlobalAggregate, MeasureTotals, OverallStats

PERCENTILE_RANKS: Tuple[int, ...] = (50, 90, 95, 98, 99)


def compute_overall_stats(samples: Sequence[float]) -> OverallStats:
    if len(samples) == 0:
        raise ValueError("cannot compute statistics over an empty sample")

    arr = np.asarray(samples, dtype=float)
    p50, p90, p95, p98, p99 = (float(v) for v in np.percentile(arr, PERCENTILE_RANKS))
    total = math.fsum(samples)
    return OverallStats(
        total=total,
        average=total / len(samples),
        median=float(np.median(arr)),
        min=float(arr.min()),
        max=float(arr.max()),
        p50=p50,
        p90=p90,
        p95=p95,
        p98=p98,
        p99=p99,
    )


def compute_stage_averages(stage_sums: Dict[str, float], ready_count: int) -> Dict[str, float]:
    if ready_count <= 0:
        raise ValueError("stage averages need at least one ready target")
    return {name: total / ready_count for name, total in stage_sums.items()}


def summarize(totals: MeasureTotals, platform: Optional[PlatformInfo] = None) -> GlobalAggregate:
    """Build the final aggregate; statistics only when ready > 0."""
    averages = None
    overall = None
    if totals.counts.ready > 0:
        averages = compute_stage_averages(totals.stage_sums, totals.counts.ready)
        overall = compute_overall_stats(totals.overall_ready_samples)

    return GlobalAggregate(
        counts=totals.counts,
        partial_count=totals.partial_count,
        stage_sums=dict(totals.stage_sums),
        overall_ready_samples=totals.overall_ready_samples,
        platform=platform or PlatformInfo(),
        stage_averages=averages,
        overall=overall,
    )
