"""Fixed-size worker pool that measures targets.

- Coordinator enqueues targets; workers take them in queue order
- Each worker owns one pre-sized WorkerAccumulator (no lock)
- READY rows go to the shared ResultTables (locked)
- queue.join() is the "all dispatched targets processed" signal
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import List, Optional, Sequence

from ..breakdown import log_breakdown
from ..core.domain.classification import Classification, ResolveResult
from ..core.domain.errors import NoTargetsError
from ..core.domain.target import Target
from ..core.resolver import LatencyChainResolver
from ..metrics.accumulator import WorkerAccumulator
from .result_tables import ResultTables

logger = logging.getLogger(__name__)

_STOP = object()


class MeasureWorkerPool:
    """Runs ``concurrency`` threads over one batch of targets."""

    def __init__(
        self,
        resolver: LatencyChainResolver,
        concurrency: int,
        tables: Optional[ResultTables] = None,
        verbose: bool = False,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, given {concurrency}")
        self._resolver = resolver
        self._concurrency = concurrency
        self._tables = tables if tables is not None else ResultTables()
        self._verbose = verbose

    @property
    def tables(self) -> ResultTables:
        return self._tables

    def run(self, targets: Sequence[Target]) -> List[WorkerAccumulator]:
        """Measure every target exactly once; returns one accumulator per worker."""
        if not targets:
            raise NoTargetsError()

        accumulators = [WorkerAccumulator(worker_index=i) for i in range(self._concurrency)]
        work: "queue.Queue[object]" = queue.Queue(maxsize=self._concurrency)

        workers: List[threading.Thread] = []
        for i in range(self._concurrency):
            t = threading.Thread(
                target=self._worker_loop,
                args=(i, work, accumulators[i]),
                daemon=True,
                name=f"measure-worker-{i}",
            )
            t.start()
            workers.append(t)
        logger.info("[POOL] Started workers=%d targets=%d", self._concurrency, len(targets))

        for target in targets:
            work.put(target)
        work.join()

        for _ in workers:
            work.put(_STOP)
        for t in workers:
            t.join()

        logger.info("[POOL] Finished targets=%d rows=%d", len(targets), len(self._tables))
        return accumulators

    def _worker_loop(self, worker_id: int, work: "queue.Queue[object]", acc: WorkerAccumulator) -> None:
        acc.bind()
        try:
            while True:
                item = work.get()
                try:
                    if item is _STOP:
                        return
                    self._measure_one(worker_id, item, acc)
                finally:
                    work.task_done()
        finally:
            acc.release()

    def _measure_one(self, worker_id: int, target: Target, acc: WorkerAccumulator) -> None:
        try:
            result = self._resolver.resolve(target)
        except Exception as e:
            logger.exception("[POOL] Worker %d unexpected error target=%s", worker_id, target)
            result = ResolveResult.fail("resolver", str(e))

        if result.is_ready:
            self._tables.append(result.sample)
            if self._verbose:
                log_breakdown(result.sample)
        else:
            self._log_outcome(target, result)

        acc.record(result)

    @staticmethod
    def _log_outcome(target: Target, result: ResolveResult) -> None:
        if result.classification is Classification.FAIL:
            logger.warning(
                "[POOL] fail target=%s step=%s reason=%s", target, result.step, result.reason,
            )
        elif result.classification is Classification.NOT_FOUND:
            logger.info("[POOL] not_found target=%s reason=%s", target, result.reason)
        else:
            logger.info(
                "[POOL] not_ready target=%s step=%s reason=%s, skip measuring",
                target, result.step, result.reason,
            )
