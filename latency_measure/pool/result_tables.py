"""Shared result tables written by every worker.

The only state mutated by more than one worker. Both rows of a target are
appended inside one critical section, so a reader never sees half a target.
"""

from __future__ import annotations

import threading
from typing import List, Tuple

from ..core.domain.latency import Sample
from ..core.domain.target import numeric_suffix

Row = List[str]


def row_sort_key(row: Row) -> Tuple[int, str, str]:
    """Numeric suffix of the service name first (svc-2 < svc-10)."""
    suffix = numeric_suffix(row[0])
    return (suffix if suffix is not None else -1, row[0], row[1])


def sort_rows(rows: List[Row]) -> List[Row]:
    return sorted(rows, key=row_sort_key)


class ResultTables:
    """Duration rows and raw-timestamp rows, one pair per READY target."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._duration_rows: List[Row] = []
        self._raw_rows: List[Row] = []

    def append(self, sample: Sample) -> None:
        duration_row = sample.duration_row()
        raw_row = sample.raw_row()
        with self._lock:
            self._duration_rows.append(duration_row)
            self._raw_rows.append(raw_row)

    def __len__(self) -> int:
        with self._lock:
            return len(self._duration_rows)

    def sorted_duration_rows(self) -> List[Row]:
        with self._lock:
            rows = list(self._duration_rows)
        return sort_rows(rows)

    def sorted_raw_rows(self) -> List[Row]:
        with self._lock:
            rows = list(self._raw_rows)
        return sort_rows(rows)
