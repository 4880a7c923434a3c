"""Target - one workload service instance to measure."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_NUMERIC_SUFFIX = re.compile(r"(\d+)$")


@dataclass(frozen=True)
class Target:
    """Service identity (name + namespace).

    Produced by the enumerator, consumed exactly once by one worker.
    """

    name: str
    namespace: str

    @property
    def is_complete(self) -> bool:
        return bool(self.name) and bool(self.namespace)

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


def numeric_suffix(name: str) -> Optional[int]:
    """Trailing integer of a service name (``svc-42`` -> 42), or None."""
    match = _NUMERIC_SUFFIX.search(name or "")
    if match is None:
        return None
    return int(match.group(1))
