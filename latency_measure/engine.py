"""Measurement engine - coordinates pool, merge and statistics.

Inputs: ordered targets + concurrency. Outputs: the GlobalAggregate and
both result tables sorted by service-name numeric suffix. No file I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from .core.domain.errors import NoTargetsError, PlatformError
from .core.domain.latency import DURATION_HEADER, RAW_HEADER
from .core.domain.platform_interface import IPlatformClient
from .core.domain.snapshots import PlatformInfo
from .core.domain.target import Target
from .core.resolver import LatencyChainResolver
from .metrics.aggregator import merge_accumulators
from .metrics.models import GlobalAggregate
from .metrics.statistics import summarize
from .pool.result_tables import ResultTables
from .pool.worker_pool import MeasureWorkerPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeasureOutcome:
    aggregate: GlobalAggregate
    duration_rows: List[List[str]]
    raw_rows: List[List[str]]

    @property
    def duration_header(self) -> List[str]:
        return list(DURATION_HEADER)

    @property
    def raw_header(self) -> List[str]:
        return list(RAW_HEADER)


class MeasureEngine:
    def __init__(self, client: IPlatformClient, concurrency: int, verbose: bool = False):
        if concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, given {concurrency}")
        self._client = client
        self._concurrency = concurrency
        self._verbose = verbose

    def measure(self, targets: Sequence[Target]) -> MeasureOutcome:
        if not targets:
            raise NoTargetsError()

        tables = ResultTables()
        pool = MeasureWorkerPool(
            LatencyChainResolver(self._client),
            self._concurrency,
            tables=tables,
            verbose=self._verbose,
        )
        accumulators = pool.run(targets)

        # All workers have joined: the coordinator is the only writer from here on
        totals = merge_accumulators(accumulators)
        if totals.counts.total != len(targets):
            logger.error(
                "[ENGINE] classification count mismatch targets=%d classified=%d",
                len(targets), totals.counts.total,
            )

        aggregate = summarize(totals, self._platform_info())
        logger.info(
            "[ENGINE] done total=%d ready=%d not_ready=%d not_found=%d fail=%d partial=%d",
            aggregate.counts.total,
            aggregate.counts.ready,
            aggregate.counts.not_ready,
            aggregate.counts.not_found,
            aggregate.counts.fail,
            aggregate.partial_count,
        )
        return MeasureOutcome(
            aggregate=aggregate,
            duration_rows=tables.sorted_duration_rows(),
            raw_rows=tables.sorted_raw_rows(),
        )

    def _platform_info(self) -> PlatformInfo:
        try:
            return self._client.get_platform_info()
        except PlatformError as e:
            logger.warning("[ENGINE] platform info unavailable: %s", e)
            return PlatformInfo()


def measure_targets(
    client: IPlatformClient,
    targets: Sequence[Target],
    concurrency: int,
    verbose: bool = False,
) -> MeasureOutcome:
    return MeasureEngine(client, concurrency, verbose=verbose).measure(targets)
