"""Per-worker accumulator.

Each worker owns exactly one accumulator for its lifetime, so no lock is
needed. Ownership is enforced: once bound to a thread, mutation from any
other thread raises.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.domain.classification import Classification, ResolveResult
from ..core.domain.latency import STAGE_NAMES


def zero_stage_sums() -> Dict[str, float]:
    return {name: 0.0 for name in STAGE_NAMES}


class AccumulatorOwnershipError(RuntimeError):
    pass


@dataclass
class WorkerAccumulator:
    """Running sums and counters of one worker."""

    worker_index: int

    ready_count: int = 0
    not_ready_count: int = 0
    not_found_count: int = 0
    fail_count: int = 0
    partial_count: int = 0

    stage_sums: Dict[str, float] = field(default_factory=zero_stage_sums)
    # Growth-only; input for percentiles
    overall_ready_samples: List[float] = field(default_factory=list)

    _owner: Optional[int] = field(default=None, repr=False, compare=False)

    def bind(self) -> None:
        """Claim the accumulator for the calling thread."""
        if self._owner is not None and self._owner != threading.get_ident():
            raise AccumulatorOwnershipError(
                f"accumulator {self.worker_index} already owned by thread {self._owner}"
            )
        self._owner = threading.get_ident()

    def release(self) -> None:
        self._check_owner()
        self._owner = None

    def _check_owner(self) -> None:
        if self._owner is not None and self._owner != threading.get_ident():
            raise AccumulatorOwnershipError(
                f"accumulator {self.worker_index} mutated outside its owning worker"
            )

    @property
    def total(self) -> int:
        return self.ready_count + self.not_ready_count + self.not_found_count + self.fail_count

    def record(self, result: ResolveResult) -> None:
        self._check_owner()
        c = result.classification
        if c is Classification.READY:
            self._add_sample(result)
        elif c is Classification.NOT_READY:
            self.not_ready_count += 1
        elif c is Classification.NOT_FOUND:
            self.not_found_count += 1
        else:
            self.fail_count += 1

    def _add_sample(self, result: ResolveResult) -> None:
        sample = result.sample
        if sample is None:
            raise ValueError("READY result without sample")
        self.ready_count += 1
        if sample.partial:
            self.partial_count += 1
        for name, seconds in sample.chain.as_dict().items():
            self.stage_sums[name] += seconds
        self.overall_ready_samples.append(sample.chain.overall_ready)
