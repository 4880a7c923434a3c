"""Tests for platform JSON parsing and the kubectl-backed client.

Ejecutar:
    pytest tests/test_platform.py -v
"""

import json
import subprocess
from datetime import datetime, timezone

import pytest

from latency_measure.core.domain.conditions import ConditionKind
from latency_measure.core.domain.errors import PlatformLookupError, PlatformNotFoundError
from latency_measure.core.domain.target import Target
from latency_measure.core.resolver import LatencyChainResolver
from latency_measure.platform.kubectl_client import KubectlPlatformClient, is_not_found
from latency_measure.platform.parsers import (
    parse_configuration,
    parse_pod_list,
    parse_resource,
    parse_service,
    truncate_time,
)


def _meta(name, namespace="ns", created="2024-03-01T12:00:00Z", **extra):
    meta = {"name": name, "namespace": namespace, "creationTimestamp": created}
    meta.update(extra)
    return meta


def _cond(type_, at, status="True"):
    return {"type": type_, "status": status, "lastTransitionTime": at}


SERVICE = {
    "metadata": _meta("svc-1", created="2024-03-01T12:00:00.750Z", generation=1),
    "status": {
        "observedGeneration": 1,
        "conditions": [
            _cond("ConfigurationsReady", "2024-03-01T12:00:04Z"),
            _cond("Ready", "2024-03-01T12:00:05Z"),
            _cond("RoutesReady", "2024-03-01T12:00:05Z"),
        ],
    },
}

CONFIGURATION = {
    "metadata": _meta("svc-1"),
    "status": {"latestReadyRevisionName": "svc-1-00001", "conditions": []},
}

REVISION = {
    "metadata": _meta("svc-1-00001", created="2024-03-01T12:00:01Z"),
    "status": {"conditions": [_cond("Ready", "2024-03-01T12:00:04Z")]},
}

DEPLOYMENT = {"metadata": _meta("svc-1-00001-deployment", created="2024-03-01T12:00:01Z")}

PODS = {
    "items": [{
        "metadata": _meta("svc-1-00001-deployment-abc", created="2024-03-01T12:00:02Z"),
        "status": {
            "conditions": [
                _cond("PodScheduled", "2024-03-01T12:00:02Z"),
                _cond("ContainersReady", "2024-03-01T12:00:04Z"),
            ],
            "containerStatuses": [
                {"name": "queue-proxy", "state": {"running": {"startedAt": "2024-03-01T12:00:03Z"}}},
                {"name": "user-container", "state": {"running": {"startedAt": "2024-03-01T12:00:03Z"}}},
            ],
        },
    }],
}

AUTOSCALER = {
    "metadata": _meta("svc-1-00001", created="2024-03-01T12:00:01Z"),
    "status": {"conditions": [_cond("Active", "2024-03-01T12:00:04Z")]},
}

MESH = {
    "metadata": _meta("svc-1-00001", created="2024-03-01T12:00:01Z"),
    "status": {"conditions": [
        _cond("Ready", "2024-03-01T12:00:04Z"),
        _cond("ActivatorEndpointsPopulated", "2024-03-01T12:00:02Z"),
        _cond("EndpointsPopulated", "2024-03-01T12:00:04Z"),
    ]},
}

INGRESS = {
    "metadata": _meta("svc-1", created="2024-03-01T12:00:02Z"),
    "status": {"conditions": [
        _cond("NetworkConfigured", "2024-03-01T12:00:03Z"),
        _cond("LoadBalancerReady", "2024-03-01T12:00:05Z"),
    ]},
}


class FakeKubectl:
    """Stands in for subprocess.run; the first token found in the command wins."""

    def __init__(self, responses):
        self.responses = responses
        self.commands = []

    def __call__(self, cmd, capture_output, text, timeout):
        self.commands.append(cmd)
        for token, response in self.responses.items():
            if token in cmd:
                if isinstance(response, BaseException):
                    raise response
                code, payload = response
                if code == 0:
                    return subprocess.CompletedProcess(cmd, 0, stdout=payload, stderr="")
                return subprocess.CompletedProcess(cmd, code, stdout="", stderr=payload)
        return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="Error from server (NotFound): x not found")


def _ok(obj):
    return 0, json.dumps(obj)


# =============================================================================
# PARSERS
# =============================================================================

class TestParsers:

    def test_truncate_time(self):
        value = datetime(2024, 3, 1, 12, 0, 0, 999999, tzinfo=timezone.utc)

        assert truncate_time(value) == datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert truncate_time(None) is None

    def test_naive_time_is_utc(self):
        assert truncate_time(datetime(2024, 3, 1, 12, 0, 0)).tzinfo == timezone.utc

    def test_parse_service(self):
        svc = parse_service(SERVICE)

        assert svc.ready is True
        assert svc.created == datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert svc.condition_time(ConditionKind.ROUTES_READY) == datetime(
            2024, 3, 1, 12, 0, 5, tzinfo=timezone.utc
        )

    def test_stale_generation_not_ready(self):
        payload = json.loads(json.dumps(SERVICE))
        payload["metadata"]["generation"] = 2

        assert parse_service(payload).ready is False

    def test_ready_false_status(self):
        payload = json.loads(json.dumps(SERVICE))
        payload["status"]["conditions"][1]["status"] = "False"

        assert parse_service(payload).ready is False

    def test_unknown_conditions_ignored(self):
        payload = {"metadata": _meta("x"), "status": {"conditions": [
            _cond("SomethingElse", "2024-03-01T12:00:01Z"),
            {"type": "Ready", "status": "Unknown"},
        ]}}

        assert parse_resource(payload).conditions == {}

    def test_parse_configuration(self):
        assert parse_configuration(CONFIGURATION).latest_ready_revision == "svc-1-00001"

    def test_parse_pods(self):
        pods = parse_pod_list(PODS)

        assert len(pods) == 1
        assert pods[0].started_at("queue-proxy") == datetime(2024, 3, 1, 12, 0, 3, tzinfo=timezone.utc)
        assert pods[0].started_at("missing") is None

    def test_waiting_container_has_no_start(self):
        payload = {"items": [{"metadata": _meta("p"), "status": {
            "containerStatuses": [{"name": "user-container", "state": {"waiting": {"reason": "Pull"}}}],
        }}]}

        assert parse_pod_list(payload)[0].container_started == {}


# =============================================================================
# KUBECTL CLIENT
# =============================================================================

class TestKubectlClient:

    def _client(self, responses, **kwargs):
        runner = FakeKubectl(responses)
        return KubectlPlatformClient(runner=runner, **kwargs), runner

    def test_full_chain_resolves(self):
        client, runner = self._client({
            "services.serving.knative.dev": _ok(SERVICE),
            "configurations.serving.knative.dev": _ok(CONFIGURATION),
            "revisions.serving.knative.dev": _ok(REVISION),
            "pods": _ok(PODS),
            "deployments": _ok(DEPLOYMENT),
            "podautoscalers.autoscaling.internal.knative.dev": _ok(AUTOSCALER),
            "serverlessservices.networking.internal.knative.dev": _ok(MESH),
            "ingresses.networking.internal.knative.dev": _ok(INGRESS),
        })

        result = LatencyChainResolver(client).resolve(Target("svc-1", "ns"))

        assert result.is_ready
        chain = result.sample.chain
        assert chain.overall_ready == 5.0
        assert chain.revision_ready == 3.0
        assert chain.pod_scheduled == 0.0
        assert chain.queue_proxy_started == 1.0
        assert chain.ingress_load_balancer_ready == 2.0
        assert len(runner.commands) == 8

    def test_command_shape(self):
        client, runner = self._client(
            {"services.serving.knative.dev": _ok(SERVICE)}, context="bench", kubectl_bin="/bin/kubectl",
        )

        client.get_service("svc-1", "ns")

        assert runner.commands[0] == [
            "/bin/kubectl", "--context", "bench",
            "get", "services.serving.knative.dev", "svc-1", "-n", "ns", "-o", "json",
        ]

    def test_pods_use_label_selector(self):
        client, runner = self._client({"pods": _ok({"items": []})})

        assert client.list_pods("ns", "serving.knative.dev/revision=r") == []
        assert "-l" in runner.commands[0]
        assert "serving.knative.dev/revision=r" in runner.commands[0]

    def test_not_found(self):
        client, _ = self._client({})

        with pytest.raises(PlatformNotFoundError):
            client.get_service("svc-1", "ns")

    def test_other_error(self):
        client, _ = self._client({
            "services.serving.knative.dev": (1, "Unable to connect to the server"),
        })

        with pytest.raises(PlatformLookupError, match="Unable to connect"):
            client.get_service("svc-1", "ns")

    def test_timeout(self):
        client, _ = self._client(
            {"services.serving.knative.dev": subprocess.TimeoutExpired("kubectl", 0.5)},
            lookup_timeout=0.5,
        )

        with pytest.raises(PlatformLookupError, match="timed out"):
            client.get_service("svc-1", "ns")

    def test_missing_binary(self):
        client, _ = self._client({"services.serving.knative.dev": FileNotFoundError("kubectl")})

        with pytest.raises(PlatformLookupError, match="cannot run"):
            client.get_service("svc-1", "ns")

    def test_invalid_json(self):
        client, _ = self._client({"services.serving.knative.dev": (0, "{not json")})

        with pytest.raises(PlatformLookupError, match="invalid JSON"):
            client.get_service("svc-1", "ns")

    def test_unexpected_shape(self):
        client, _ = self._client({"services.serving.knative.dev": _ok({"metadata": {}})})

        with pytest.raises(PlatformLookupError, match="unexpected object shape"):
            client.get_service("svc-1", "ns")

    def test_list_services(self):
        client, _ = self._client({
            "services.serving.knative.dev": _ok({"items": [SERVICE]}),
        })

        services = client.list_services("ns")

        assert [s.name for s in services] == ["svc-1"]

    def test_platform_info(self):
        client, _ = self._client({
            "config-network": _ok({"data": {"ingress-class": "kourier.ingress.networking.knative.dev"}}),
            "knative-serving": _ok({"metadata": {"labels": {"app.kubernetes.io/version": "v1.12.0"}}}),
            "kourier-system": _ok({"metadata": {"labels": {"app.kubernetes.io/version": "v1.12.2"}}}),
        })

        info = client.get_platform_info()

        assert info.serving_version == "v1.12.0"
        assert info.eventing_version == "Unknown"
        assert info.ingress_controller == "Kourier"
        assert info.ingress_version == "v1.12.2"

    def test_platform_info_unreachable(self):
        client, _ = self._client({})

        info = client.get_platform_info()

        assert info.to_dict() == {
            "serving_version": "Unknown",
            "eventing_version": "Unknown",
            "ingress_controller": "Unknown",
            "ingress_version": "Unknown",
        }


@pytest.mark.parametrize("stderr,expected", [
    ('Error from server (NotFound): services.serving.knative.dev "x" not found', True),
    ("Unable to connect to the server: dial tcp", False),
    ("", False),
])
def test_is_not_found(stderr, expected):
    assert is_not_found(stderr) is expected
