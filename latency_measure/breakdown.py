"""Opt-in per-target breakdown. Logging only; never affects results."""

from __future__ import annotations

import logging

from .core.domain.latency import Sample

logger = logging.getLogger(__name__)

# (stage, label, indent level)
_TREE = (
    ("configuration_ready", "Service Configuration Ready", 0),
    ("revision_ready", "Service Revision Ready", 1),
    ("deployment_created", "Service Deployment Created", 2),
    ("pod_scheduled", "Service Pod Scheduled", 3),
    ("containers_ready", "Service Pod Containers Ready", 3),
    ("queue_proxy_started", "Service Pod queue-proxy Started", 4),
    ("user_container_started", "Service Pod user-container Started", 4),
    ("autoscaler_active", "Service PodAutoscaler Active", 2),
    ("mesh_ready", "Service ServerlessService Ready", 3),
    ("mesh_activator_endpoints_populated", "Service ServerlessService ActivatorEndpointsPopulated", 4),
    ("mesh_endpoints_populated", "Service ServerlessService EndpointsPopulated", 4),
    ("routes_ready", "Service Route Ready", 0),
    ("ingress_ready", "Service Ingress Ready", 1),
    ("ingress_network_configured", "Service Ingress Network Configured", 2),
    ("ingress_load_balancer_ready", "Service Ingress LoadBalancer Ready", 2),
    ("overall_ready", "Overall Service Ready", 0),
)


def tree_label(label: str, level: int) -> str:
    if level == 0:
        return label
    return "  " * (level - 1) + "- " + label


def log_breakdown(sample: Sample) -> None:
    durations = sample.chain.as_dict()
    # Same truncation as the duration table
    for stage, label, level in _TREE:
        logger.info(
            "[Verbose] Service %s: %s Duration is %ds",
            sample.target.name, tree_label(label, level), int(durations[stage]),
        )
    if sample.partial:
        logger.info("[Verbose] Service %s: no pod observed, pod stages are zero", sample.target.name)
