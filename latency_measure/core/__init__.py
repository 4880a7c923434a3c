"""Per-target logic: resolver chain and target enumeration."""

from .resolver import LatencyChainResolver
from .enumerator import enumerate_targets, targets_from_range, discover_targets, parse_range

__all__ = [
    "LatencyChainResolver",
    "enumerate_targets",
    "targets_from_range",
    "discover_targets",
    "parse_range",
]
