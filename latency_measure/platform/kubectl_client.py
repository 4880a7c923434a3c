"""Platform client backed by the kubectl CLI.

Every lookup is one ``kubectl get ... -o json`` with a process timeout, so a
stuck API call cannot block a worker forever. Thread-safe: no shared state
besides immutable configuration.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError

from ..core.domain.errors import PlatformLookupError, PlatformNotFoundError
from ..core.domain.platform_interface import IPlatformClient
from ..core.domain.snapshots import (
    ConfigurationSnapshot,
    PlatformInfo,
    PodSnapshot,
    ResourceSnapshot,
    ServiceSnapshot,
)
from .parsers import (
    parse_configuration,
    parse_pod_list,
    parse_resource,
    parse_service,
    parse_service_list,
)

logger = logging.getLogger(__name__)

DEFAULT_LOOKUP_TIMEOUT = 30.0

SERVICE_RESOURCE = "services.serving.knative.dev"
CONFIGURATION_RESOURCE = "configurations.serving.knative.dev"
REVISION_RESOURCE = "revisions.serving.knative.dev"
AUTOSCALER_RESOURCE = "podautoscalers.autoscaling.internal.knative.dev"
MESH_RESOURCE = "serverlessservices.networking.internal.knative.dev"
INGRESS_RESOURCE = "ingresses.networking.internal.knative.dev"

SERVING_NAMESPACE = "knative-serving"
EVENTING_NAMESPACE = "knative-eventing"
NETWORK_CONFIGMAP = "config-network"
VERSION_LABELS = ("app.kubernetes.io/version", "serving.knative.dev/release", "eventing.knative.dev/release")

# ingress class substring -> (display name, controller namespace)
INGRESS_CONTROLLERS = (
    ("kourier", "Kourier", "kourier-system"),
    ("istio", "Istio", "istio-system"),
    ("contour", "Contour", "contour-external"),
)

_NOT_FOUND_TOKENS = ("notfound", "not found")


def is_not_found(stderr: str) -> bool:
    lowered = (stderr or "").lower()
    return any(token in lowered for token in _NOT_FOUND_TOKENS)


class KubectlPlatformClient(IPlatformClient):
    def __init__(
        self,
        kubectl_bin: str = "kubectl",
        context: Optional[str] = None,
        lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.kubectl_bin = kubectl_bin
        self.context = context
        self.lookup_timeout = lookup_timeout
        self._runner = runner

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _command(self, args: Sequence[str]) -> List[str]:
        cmd = [self.kubectl_bin]
        if self.context:
            cmd.extend(["--context", self.context])
        cmd.extend(args)
        return cmd

    def _run_json(self, args: Sequence[str], kind: str, name: str, namespace: str) -> Dict[str, Any]:
        cmd = self._command(args)
        try:
            result = self._runner(cmd, capture_output=True, text=True, timeout=self.lookup_timeout)
        except subprocess.TimeoutExpired:
            raise PlatformLookupError(kind, name, namespace, f"timed out after {self.lookup_timeout:.1f}s")
        except OSError as e:
            raise PlatformLookupError(kind, name, namespace, f"cannot run {self.kubectl_bin}: {e}")

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            if is_not_found(stderr):
                raise PlatformNotFoundError(kind, name, namespace, stderr)
            raise PlatformLookupError(kind, name, namespace, stderr or "kubectl command failed")

        try:
            return json.loads(result.stdout)
        except ValueError as e:
            raise PlatformLookupError(kind, name, namespace, f"invalid JSON: {e}")

    def _get(self, resource: str, name: str, namespace: str) -> Dict[str, Any]:
        return self._run_json(
            ("get", resource, name, "-n", namespace, "-o", "json"), resource, name, namespace,
        )

    @staticmethod
    def _parse(parser: Callable[[Dict[str, Any]], Any], payload: Dict[str, Any], kind: str, name: str, namespace: str):
        try:
            return parser(payload)
        except ValidationError as e:
            raise PlatformLookupError(kind, name, namespace, f"unexpected object shape: {e.error_count()} errors")

    def _get_parsed(self, resource: str, parser, name: str, namespace: str):
        return self._parse(parser, self._get(resource, name, namespace), resource, name, namespace)

    # ------------------------------------------------------------------
    # IPlatformClient
    # ------------------------------------------------------------------

    def get_service(self, name: str, namespace: str) -> ServiceSnapshot:
        return self._get_parsed(SERVICE_RESOURCE, parse_service, name, namespace)

    def get_configuration(self, name: str, namespace: str) -> ConfigurationSnapshot:
        return self._get_parsed(CONFIGURATION_RESOURCE, parse_configuration, name, namespace)

    def get_revision(self, name: str, namespace: str) -> ResourceSnapshot:
        return self._get_parsed(REVISION_RESOURCE, parse_resource, name, namespace)

    def list_pods(self, namespace: str, label_selector: str) -> List[PodSnapshot]:
        payload = self._run_json(
            ("get", "pods", "-n", namespace, "-l", label_selector, "-o", "json"),
            "pods", label_selector, namespace,
        )
        return self._parse(parse_pod_list, payload, "pods", label_selector, namespace)

    def get_deployment(self, name: str, namespace: str) -> ResourceSnapshot:
        return self._get_parsed("deployments", parse_resource, name, namespace)

    def get_autoscaler(self, name: str, namespace: str) -> ResourceSnapshot:
        return self._get_parsed(AUTOSCALER_RESOURCE, parse_resource, name, namespace)

    def get_mesh_resource(self, name: str, namespace: str) -> ResourceSnapshot:
        return self._get_parsed(MESH_RESOURCE, parse_resource, name, namespace)

    def get_ingress(self, name: str, namespace: str) -> ResourceSnapshot:
        return self._get_parsed(INGRESS_RESOURCE, parse_resource, name, namespace)

    def list_services(self, namespace: str) -> List[ServiceSnapshot]:
        payload = self._run_json(
            ("get", SERVICE_RESOURCE, "-n", namespace, "-o", "json"),
            SERVICE_RESOURCE, "*", namespace,
        )
        return self._parse(parse_service_list, payload, SERVICE_RESOURCE, "*", namespace)

    # ------------------------------------------------------------------
    # Platform metadata
    # ------------------------------------------------------------------

    def get_platform_info(self) -> PlatformInfo:
        controller, controller_ns = self._ingress_controller()
        return PlatformInfo(
            serving_version=self._namespace_version(SERVING_NAMESPACE),
            eventing_version=self._namespace_version(EVENTING_NAMESPACE),
            ingress_controller=controller,
            ingress_version=self._namespace_version(controller_ns) if controller_ns else "Unknown",
        )

    def _namespace_version(self, namespace: str) -> str:
        try:
            payload = self._run_json(
                ("get", "namespace", namespace, "-o", "json"), "namespace", namespace, "",
            )
        except (PlatformNotFoundError, PlatformLookupError) as e:
            logger.debug("[KUBECTL] version lookup failed namespace=%s: %s", namespace, e)
            return "Unknown"
        labels = (payload.get("metadata") or {}).get("labels") or {}
        for key in VERSION_LABELS:
            if labels.get(key):
                return labels[key]
        return "Unknown"

    def _ingress_controller(self):
        try:
            payload = self._run_json(
                ("get", "configmap", NETWORK_CONFIGMAP, "-n", SERVING_NAMESPACE, "-o", "json"),
                "configmap", NETWORK_CONFIGMAP, SERVING_NAMESPACE,
            )
        except (PlatformNotFoundError, PlatformLookupError) as e:
            logger.debug("[KUBECTL] ingress class lookup failed: %s", e)
            return "Unknown", None
        data = payload.get("data") or {}
        ingress_class = data.get("ingress-class") or data.get("ingress.class") or ""
        for token, display, namespace in INGRESS_CONTROLLERS:
            if token in ingress_class:
                return display, namespace
        return ingress_class or "Unknown", None
