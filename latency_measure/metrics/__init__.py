"""Accumulation, merge and statistics of measurement results."""

from .accumulator import WorkerAccumulator, AccumulatorOwnershipError
from .aggregator import merge_accumulators
from .models import ServiceCounts, MeasureTotals, OverallStats, GlobalAggregate
from .statistics import PERCENTILE_RANKS, compute_overall_stats, compute_stage_averages, summarize

__all__ = [
    "WorkerAccumulator",
    "AccumulatorOwnershipError",
    "merge_accumulators",
    "ServiceCounts",
    "MeasureTotals",
    "OverallStats",
    "GlobalAggregate",
    "PERCENTILE_RANKS",
    "compute_overall_stats",
    "compute_stage_averages",
    "summarize",
]
