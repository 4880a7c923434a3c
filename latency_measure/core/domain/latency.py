"""Latency tree of one ready target and the timestamps it was derived from.

Every duration is ``end - start`` for a pair of platform timestamps. Stage
order below is also the column order of the duration table.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from .target import Target

# (LatencyChain field, duration table column)
STAGE_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("configuration_ready", "configuration_ready"),
    ("revision_ready", "revision_ready"),
    ("deployment_created", "deployment_created"),
    ("pod_scheduled", "pod_scheduled"),
    ("containers_ready", "containers_ready"),
    ("queue_proxy_started", "queue-proxy_started"),
    ("user_container_started", "user-container_started"),
    ("routes_ready", "route_ready"),
    ("autoscaler_active", "kpa_active"),
    ("mesh_ready", "sks_ready"),
    ("mesh_activator_endpoints_populated", "sks_activator_endpoints_populated"),
    ("mesh_endpoints_populated", "sks_endpoints_populated"),
    ("ingress_ready", "ingress_ready"),
    ("ingress_network_configured", "ingress_config_ready"),
    ("ingress_load_balancer_ready", "ingress_lb_ready"),
    ("overall_ready", "overall_ready"),
)

STAGE_NAMES: Tuple[str, ...] = tuple(name for name, _ in STAGE_COLUMNS)

# Stages that come from the first pod of the revision
POD_STAGES: Tuple[str, ...] = (
    "pod_scheduled",
    "containers_ready",
    "queue_proxy_started",
    "user_container_started",
)

# (RawTimestamps field, raw table column)
RAW_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("service_created", "svc_created"),
    ("configurations_ready", "configuration_ready"),
    ("revision_created", "revision_created"),
    ("revision_ready", "revision_ready"),
    ("deployment_created", "deployment_created"),
    ("pod_created", "pod_created"),
    ("pod_scheduled", "pod_scheduled"),
    ("containers_ready", "containers_ready"),
    ("queue_proxy_started", "queue-proxy_started"),
    ("user_container_started", "user-container_started"),
    ("routes_ready", "route_ready"),
    ("autoscaler_created", "kpa_created"),
    ("autoscaler_active", "kpa_active"),
    ("mesh_created", "sks_created"),
    ("mesh_activator_endpoints_populated", "sks_activator_endpoints_populated"),
    ("mesh_endpoints_populated", "sks_endpoints_populated"),
    ("mesh_ready", "sks_ready"),
    ("ingress_created", "ingress_created"),
    ("ingress_network_configured", "ingress_config_ready"),
    ("ingress_load_balancer_ready", "ingress_lb_ready"),
)

DURATION_HEADER: List[str] = ["svc_name", "svc_namespace"] + [col for _, col in STAGE_COLUMNS]
RAW_HEADER: List[str] = ["svc_name", "svc_namespace"] + [col for _, col in RAW_COLUMNS]


def seconds_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds()


def format_timestamp(value: Optional[datetime]) -> str:
    """RFC 3339 in UTC; empty string when the pod was not observed."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class RawTimestamps:
    service_created: datetime
    configurations_ready: datetime
    revision_created: datetime
    revision_ready: datetime
    deployment_created: datetime
    routes_ready: datetime
    autoscaler_created: datetime
    autoscaler_active: datetime
    mesh_created: datetime
    mesh_activator_endpoints_populated: datetime
    mesh_endpoints_populated: datetime
    mesh_ready: datetime
    ingress_created: datetime
    ingress_network_configured: datetime
    ingress_load_balancer_ready: datetime
    # Absent when the revision had no pod at lookup time
    pod_created: Optional[datetime] = None
    pod_scheduled: Optional[datetime] = None
    containers_ready: Optional[datetime] = None
    queue_proxy_started: Optional[datetime] = None
    user_container_started: Optional[datetime] = None

    @property
    def has_pod(self) -> bool:
        return self.pod_created is not None


@dataclass(frozen=True)
class LatencyChain:
    """Durations in seconds (float, full precision)."""

    configuration_ready: float
    revision_ready: float
    deployment_created: float
    pod_scheduled: float
    containers_ready: float
    queue_proxy_started: float
    user_container_started: float
    routes_ready: float
    autoscaler_active: float
    mesh_ready: float
    mesh_activator_endpoints_populated: float
    mesh_endpoints_populated: float
    ingress_ready: float
    ingress_network_configured: float
    ingress_load_balancer_ready: float
    overall_ready: float

    @classmethod
    def from_timestamps(cls, ts: RawTimestamps) -> "LatencyChain":
        pod = {name: 0.0 for name in POD_STAGES}
        if ts.has_pod:
            pod["pod_scheduled"] = seconds_between(ts.pod_created, ts.pod_scheduled)
            pod["containers_ready"] = seconds_between(ts.pod_created, ts.containers_ready)
            pod["queue_proxy_started"] = seconds_between(ts.pod_created, ts.queue_proxy_started)
            pod["user_container_started"] = seconds_between(ts.pod_created, ts.user_container_started)

        return cls(
            configuration_ready=seconds_between(ts.service_created, ts.configurations_ready),
            revision_ready=seconds_between(ts.revision_created, ts.revision_ready),
            deployment_created=seconds_between(ts.revision_created, ts.deployment_created),
            routes_ready=seconds_between(ts.service_created, ts.routes_ready),
            autoscaler_active=seconds_between(ts.autoscaler_created, ts.autoscaler_active),
            mesh_ready=seconds_between(ts.mesh_created, ts.mesh_ready),
            mesh_activator_endpoints_populated=seconds_between(
                ts.mesh_created, ts.mesh_activator_endpoints_populated
            ),
            mesh_endpoints_populated=seconds_between(ts.mesh_created, ts.mesh_endpoints_populated),
            ingress_ready=seconds_between(ts.ingress_created, ts.ingress_load_balancer_ready),
            ingress_network_configured=seconds_between(
                ts.ingress_created, ts.ingress_network_configured
            ),
            # Relative to network-configured, not to ingress creation
            ingress_load_balancer_ready=seconds_between(
                ts.ingress_network_configured, ts.ingress_load_balancer_ready
            ),
            overall_ready=seconds_between(ts.service_created, ts.routes_ready),
            **pod,
        )

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Sample:
    """Everything recorded for one READY target."""

    target: Target
    chain: LatencyChain
    timestamps: RawTimestamps

    @property
    def partial(self) -> bool:
        """True when pod-derived stages were not observed and are zero."""
        return not self.timestamps.has_pod

    def duration_row(self) -> List[str]:
        # Integer seconds, truncated toward zero
        return [self.target.name, self.target.namespace] + [
            str(int(getattr(self.chain, name))) for name in STAGE_NAMES
        ]

    def raw_row(self) -> List[str]:
        return [self.target.name, self.target.namespace] + [
            format_timestamp(getattr(self.timestamps, name)) for name, _ in RAW_COLUMNS
        ]
