"""Resolver chain - rebuilds the latency tree of one target.

Lookups follow the reconciliation order of the serving pipeline:

    service -> configuration -> revision -> pods/deployment
            -> autoscaler -> mesh (ServerlessService) -> ingress

The first failing step decides the classification and no further lookups
are made for that target. Each object is read exactly once; nothing is
retried or polled.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Optional

from .domain.classification import ResolveResult
from .domain.conditions import ConditionKind
from .domain.errors import PlatformError, PlatformNotFoundError
from .domain.latency import LatencyChain, RawTimestamps, Sample
from .domain.platform_interface import IPlatformClient
from .domain.snapshots import ResourceSnapshot, ServiceSnapshot
from .domain.target import Target

logger = logging.getLogger(__name__)

REVISION_LABEL = "serving.knative.dev/revision"
QUEUE_PROXY_CONTAINER = "queue-proxy"
USER_CONTAINER = "user-container"


class _ChainBroken(Exception):
    """Internal short-circuit: a dependency has not converged."""

    def __init__(self, step: str, reason: str):
        super().__init__(reason)
        self.step = step
        self.reason = reason


def revision_selector(revision_name: str) -> str:
    return f"{REVISION_LABEL}={revision_name}"


def deployment_name(revision_name: str) -> str:
    return f"{revision_name}-deployment"


def _condition(step: str, snapshot: ResourceSnapshot, kind: ConditionKind) -> datetime:
    value = snapshot.condition_time(kind)
    if value is None:
        raise _ChainBroken(step, f"condition {kind.value} absent on {snapshot.name}")
    return value


class LatencyChainResolver:
    """Per-target resolution. Holds no mutable state; safe to share across workers."""

    def __init__(self, client: IPlatformClient):
        self._client = client

    def resolve(self, target: Target) -> ResolveResult:
        if not target.is_complete:
            return ResolveResult.fail("target", "lack of service name or service namespace")

        # Step 1: top-level service decides NotFound / Fail / NotReady
        try:
            service = self._client.get_service(target.name, target.namespace)
        except PlatformNotFoundError as e:
            return ResolveResult.not_found(str(e))
        except PlatformError as e:
            return ResolveResult.fail("service", str(e))

        if not service.ready:
            return ResolveResult.not_ready("service", "service not ready")

        try:
            timestamps = self._collect(target, service)
        except _ChainBroken as e:
            return ResolveResult.not_ready(e.step, e.reason)

        return ResolveResult.ready(
            Sample(
                target=target,
                chain=LatencyChain.from_timestamps(timestamps),
                timestamps=timestamps,
            )
        )

    def _collect(self, target: Target, service: ServiceSnapshot) -> RawTimestamps:
        ns = target.namespace
        configurations_ready = _condition("service", service, ConditionKind.CONFIGURATIONS_READY)
        routes_ready = _condition("service", service, ConditionKind.ROUTES_READY)

        # Step 2: configuration lag means "not converged yet"
        configuration = self._lookup("configuration", self._client.get_configuration, target.name, ns)
        revision_name = configuration.latest_ready_revision
        if not revision_name:
            raise _ChainBroken("configuration", "no latest ready revision")

        # Step 3
        revision = self._lookup("revision", self._client.get_revision, revision_name, ns)
        revision_ready = _condition("revision", revision, ConditionKind.READY)

        # Step 4
        try:
            pods = self._client.list_pods(ns, revision_selector(revision_name))
        except PlatformError as e:
            raise _ChainBroken("pods", str(e))
        deployment = self._lookup(
            "deployment", self._client.get_deployment, deployment_name(revision_name), ns
        )

        # Step 5: first pod only; an empty list leaves pod stages unset
        pod_times: Dict[str, Optional[datetime]] = {}
        if pods:
            pod = pods[0]
            pod_times["pod_created"] = pod.created
            pod_times["pod_scheduled"] = _condition("pod", pod, ConditionKind.POD_SCHEDULED)
            pod_times["containers_ready"] = _condition("pod", pod, ConditionKind.CONTAINERS_READY)
            for field_name, container in (
                ("queue_proxy_started", QUEUE_PROXY_CONTAINER),
                ("user_container_started", USER_CONTAINER),
            ):
                started = pod.started_at(container)
                if started is None:
                    raise _ChainBroken("pod", f"{container} container status absent on {pod.name}")
                pod_times[field_name] = started
        else:
            logger.warning(
                "[RESOLVER] no_pods target=%s revision=%s pod stages left at zero",
                target, revision_name,
            )

        # Step 6
        autoscaler = self._lookup("autoscaler", self._client.get_autoscaler, revision_name, ns)
        autoscaler_active = _condition("autoscaler", autoscaler, ConditionKind.ACTIVE)

        # Step 7
        mesh = self._lookup("mesh", self._client.get_mesh_resource, revision_name, ns)
        mesh_activator = _condition("mesh", mesh, ConditionKind.ACTIVATOR_ENDPOINTS_POPULATED)
        mesh_endpoints = _condition("mesh", mesh, ConditionKind.ENDPOINTS_POPULATED)
        mesh_ready = _condition("mesh", mesh, ConditionKind.READY)

        # Step 8: ingress is keyed by the service name, not the revision
        ingress = self._lookup("ingress", self._client.get_ingress, target.name, ns)
        network_configured = _condition("ingress", ingress, ConditionKind.NETWORK_CONFIGURED)
        load_balancer_ready = _condition("ingress", ingress, ConditionKind.LOAD_BALANCER_READY)

        return RawTimestamps(
            service_created=service.created,
            configurations_ready=configurations_ready,
            revision_created=revision.created,
            revision_ready=revision_ready,
            deployment_created=deployment.created,
            routes_ready=routes_ready,
            autoscaler_created=autoscaler.created,
            autoscaler_active=autoscaler_active,
            mesh_created=mesh.created,
            mesh_activator_endpoints_populated=mesh_activator,
            mesh_endpoints_populated=mesh_endpoints,
            mesh_ready=mesh_ready,
            ingress_created=ingress.created,
            ingress_network_configured=network_configured,
            ingress_load_balancer_ready=load_balancer_ready,
            **pod_times,
        )

    @staticmethod
    def _lookup(step: str, fetch, name: str, namespace: str):
        try:
            return fetch(name, namespace)
        except PlatformError as e:
            raise _ChainBroken(step, str(e))
