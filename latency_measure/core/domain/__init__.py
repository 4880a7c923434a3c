"""Domain types of the measurement engine."""

from .target import Target, numeric_suffix
from .conditions import ConditionKind
from .snapshots import (
    ResourceSnapshot,
    ServiceSnapshot,
    ConfigurationSnapshot,
    PodSnapshot,
    PlatformInfo,
)
from .latency import (
    STAGE_NAMES,
    POD_STAGES,
    DURATION_HEADER,
    RAW_HEADER,
    LatencyChain,
    RawTimestamps,
    Sample,
)
from .classification import Classification, ResolveResult
from .errors import PlatformError, PlatformNotFoundError, PlatformLookupError, NoTargetsError
from .platform_interface import IPlatformClient

__all__ = [
    "Target",
    "numeric_suffix",
    "ConditionKind",
    "ResourceSnapshot",
    "ServiceSnapshot",
    "ConfigurationSnapshot",
    "PodSnapshot",
    "PlatformInfo",
    "STAGE_NAMES",
    "POD_STAGES",
    "DURATION_HEADER",
    "RAW_HEADER",
    "LatencyChain",
    "RawTimestamps",
    "Sample",
    "Classification",
    "ResolveResult",
    "PlatformError",
    "PlatformNotFoundError",
    "PlatformLookupError",
    "NoTargetsError",
    "IPlatformClient",
]
