"""Shared fixtures for the measurement engine tests."""

from datetime import datetime, timezone

import pytest

from latency_measure.core.domain.snapshots import PlatformInfo
from latency_measure.core.domain.target import Target
from latency_measure.platform.in_memory import InMemoryPlatform

T0 = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def platform() -> InMemoryPlatform:
    """Plataforma vacía con versiones conocidas."""
    return InMemoryPlatform(
        platform_info=PlatformInfo(
            serving_version="v1.12.0",
            eventing_version="v1.12.1",
            ingress_controller="Kourier",
            ingress_version="v1.12.0",
        )
    )


@pytest.fixture
def ready_target(platform, t0) -> Target:
    """svc-1/ns totalmente listo, overall_ready = 5s."""
    platform.add_ready_service("svc-1", "ns", t0, overall_seconds=5)
    return Target(name="svc-1", namespace="ns")
