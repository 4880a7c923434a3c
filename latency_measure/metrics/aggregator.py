"""Merges worker accumulators into run-wide totals.

Merge is commutative: float sums use math.fsum (exactly rounded, so any
worker order yields identical bits) and samples are sorted.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List

from ..core.domain.latency import STAGE_NAMES
from .accumulator import WorkerAccumulator
from .models import MeasureTotals, ServiceCounts

logger = logging.getLogger(__name__)


def merge_accumulators(accumulators: Iterable[WorkerAccumulator]) -> MeasureTotals:
    accs: List[WorkerAccumulator] = list(accumulators)

    counts = ServiceCounts(
        ready=sum(a.ready_count for a in accs),
        not_ready=sum(a.not_ready_count for a in accs),
        not_found=sum(a.not_found_count for a in accs),
        fail=sum(a.fail_count for a in accs),
    )
    stage_sums = {
        name: math.fsum(a.stage_sums.get(name, 0.0) for a in accs) for name in STAGE_NAMES
    }
    samples = sorted(s for a in accs for s in a.overall_ready_samples)

    logger.debug(
        "[AGG] merged workers=%d total=%d ready=%d samples=%d",
        len(accs), counts.total, counts.ready, len(samples),
    )

    return MeasureTotals(
        counts=counts,
        partial_count=sum(a.partial_count for a in accs),
        stage_sums=stage_sums,
        overall_ready_samples=tuple(samples),
    )
