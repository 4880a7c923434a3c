"""Read-only snapshots of platform objects.

Each snapshot is a single read of one object; the resolver never polls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from .conditions import ConditionKind


@dataclass(frozen=True)
class ResourceSnapshot:
    """Common shape: creation time plus condition transition times."""

    name: str
    namespace: str
    created: datetime
    conditions: Dict[ConditionKind, datetime] = field(default_factory=dict)

    def condition_time(self, kind: ConditionKind) -> Optional[datetime]:
        return self.conditions.get(kind)


@dataclass(frozen=True)
class ServiceSnapshot(ResourceSnapshot):
    ready: bool = False


@dataclass(frozen=True)
class ConfigurationSnapshot(ResourceSnapshot):
    latest_ready_revision: Optional[str] = None


@dataclass(frozen=True)
class PodSnapshot(ResourceSnapshot):
    # container name -> running.startedAt
    container_started: Dict[str, datetime] = field(default_factory=dict)

    def started_at(self, container: str) -> Optional[datetime]:
        return self.container_started.get(container)


@dataclass(frozen=True)
class PlatformInfo:
    """Versions of the serving stack the run was measured against."""

    serving_version: str = "Unknown"
    eventing_version: str = "Unknown"
    ingress_controller: str = "Unknown"
    ingress_version: str = "Unknown"

    def to_dict(self) -> dict:
        return {
            "serving_version": self.serving_version,
            "eventing_version": self.eventing_version,
            "ingress_controller": self.ingress_controller,
            "ingress_version": self.ingress_version,
        }
