"""In-memory platform for tests and offline runs.

Objects are registered up front; lookups are recorded so callers can assert
which collaborators were (or were not) called for a target.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from ..core.domain.conditions import ConditionKind
from ..core.domain.errors import PlatformError, PlatformLookupError, PlatformNotFoundError
from ..core.domain.platform_interface import IPlatformClient
from ..core.domain.snapshots import (
    ConfigurationSnapshot,
    PlatformInfo,
    PodSnapshot,
    ResourceSnapshot,
    ServiceSnapshot,
)

Key = Tuple[str, str, str]  # (kind, namespace, name)


class InMemoryPlatform(IPlatformClient):
    def __init__(self, platform_info: Optional[PlatformInfo] = None) -> None:
        self._objects: Dict[Key, object] = {}
        self._errors: Dict[Key, PlatformError] = {}
        self._platform_info = platform_info or PlatformInfo()
        self._lock = threading.Lock()
        self.calls: List[Key] = []

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def put(self, kind: str, namespace: str, name: str, obj: object) -> None:
        self._objects[(kind, namespace, name)] = obj

    def fail(self, kind: str, namespace: str, name: str, error: Optional[PlatformError] = None) -> None:
        """Make one lookup raise instead of returning an object."""
        self._errors[(kind, namespace, name)] = error or PlatformLookupError(kind, name, namespace, "injected failure")

    def calls_for(self, namespace: str, name: str) -> List[Key]:
        with self._lock:
            return [c for c in self.calls if c[1] == namespace and c[2] == name]

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _lookup(self, kind: str, name: str, namespace: str):
        key = (kind, namespace, name)
        with self._lock:
            self.calls.append(key)
        if key in self._errors:
            raise self._errors[key]
        if key not in self._objects:
            raise PlatformNotFoundError(kind, name, namespace, f'{kind} "{name}" not found')
        return self._objects[key]

    def get_service(self, name: str, namespace: str) -> ServiceSnapshot:
        return self._lookup("service", name, namespace)

    def get_configuration(self, name: str, namespace: str) -> ConfigurationSnapshot:
        return self._lookup("configuration", name, namespace)

    def get_revision(self, name: str, namespace: str) -> ResourceSnapshot:
        return self._lookup("revision", name, namespace)

    def list_pods(self, namespace: str, label_selector: str) -> List[PodSnapshot]:
        key = ("pods", namespace, label_selector)
        with self._lock:
            self.calls.append(key)
        if key in self._errors:
            raise self._errors[key]
        return list(self._objects.get(key, []))

    def get_deployment(self, name: str, namespace: str) -> ResourceSnapshot:
        return self._lookup("deployment", name, namespace)

    def get_autoscaler(self, name: str, namespace: str) -> ResourceSnapshot:
        return self._lookup("autoscaler", name, namespace)

    def get_mesh_resource(self, name: str, namespace: str) -> ResourceSnapshot:
        return self._lookup("mesh", name, namespace)

    def get_ingress(self, name: str, namespace: str) -> ResourceSnapshot:
        return self._lookup("ingress", name, namespace)

    def list_services(self, namespace: str) -> List[ServiceSnapshot]:
        key = ("services", namespace, "*")
        if key in self._errors:
            raise self._errors[key]
        return [
            obj for (kind, ns, _), obj in sorted(self._objects.items(), key=lambda kv: kv[0])
            if kind == "service" and ns == namespace
        ]

    def get_platform_info(self) -> PlatformInfo:
        return self._platform_info

    # ------------------------------------------------------------------
    # Scenario builder
    # ------------------------------------------------------------------

    def add_ready_service(
        self,
        name: str,
        namespace: str,
        created: datetime,
        overall_seconds: int = 5,
        with_pod: bool = True,
        ready: bool = True,
    ) -> str:
        """Register a fully converged chain; returns the revision name.

        Stage offsets (seconds after service creation) are fixed so every
        derived duration is predictable; routes become ready after
        ``overall_seconds``.
        """
        def at(seconds: int) -> datetime:
            return created + timedelta(seconds=seconds)

        mid = max(overall_seconds - 1, 0)
        revision = f"{name}-00001"

        self.put("service", namespace, name, ServiceSnapshot(
            name=name, namespace=namespace, created=created, ready=ready,
            conditions={
                ConditionKind.CONFIGURATIONS_READY: at(mid),
                ConditionKind.ROUTES_READY: at(overall_seconds),
                ConditionKind.READY: at(overall_seconds),
            },
        ))
        self.put("configuration", namespace, name, ConfigurationSnapshot(
            name=name, namespace=namespace, created=created, latest_ready_revision=revision,
        ))
        self.put("revision", namespace, revision, ResourceSnapshot(
            name=revision, namespace=namespace, created=at(0),
            conditions={ConditionKind.READY: at(mid)},
        ))
        self.put("deployment", namespace, f"{revision}-deployment", ResourceSnapshot(
            name=f"{revision}-deployment", namespace=namespace, created=at(0),
        ))
        pods: List[PodSnapshot] = []
        if with_pod:
            pods.append(PodSnapshot(
                name=f"{revision}-deployment-abc", namespace=namespace, created=at(0),
                conditions={
                    ConditionKind.POD_SCHEDULED: at(0),
                    ConditionKind.CONTAINERS_READY: at(mid),
                },
                container_started={"queue-proxy": at(0), "user-container": at(0)},
            ))
        self.put("pods", namespace, f"serving.knative.dev/revision={revision}", pods)
        self.put("autoscaler", namespace, revision, ResourceSnapshot(
            name=revision, namespace=namespace, created=at(0),
            conditions={ConditionKind.ACTIVE: at(mid)},
        ))
        self.put("mesh", namespace, revision, ResourceSnapshot(
            name=revision, namespace=namespace, created=at(0),
            conditions={
                ConditionKind.READY: at(mid),
                ConditionKind.ACTIVATOR_ENDPOINTS_POPULATED: at(0),
                ConditionKind.ENDPOINTS_POPULATED: at(mid),
            },
        ))
        self.put("ingress", namespace, name, ResourceSnapshot(
            name=name, namespace=namespace, created=at(0),
            conditions={
                ConditionKind.NETWORK_CONFIGURED: at(0),
                ConditionKind.LOAD_BALANCER_READY: at(overall_seconds),
            },
        ))
        return revision
