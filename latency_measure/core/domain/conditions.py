"""Closed set of condition kinds the resolver reads from platform objects.

Conditions are modelled as a mapping ``ConditionKind -> transition time``.
A missing key means the condition is absent; callers must never substitute
a zero timestamp.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ConditionKind(str, Enum):
    # Service
    CONFIGURATIONS_READY = "ConfigurationsReady"
    ROUTES_READY = "RoutesReady"
    # Revision / ServerlessService
    READY = "Ready"
    # Pod
    POD_SCHEDULED = "PodScheduled"
    CONTAINERS_READY = "ContainersReady"
    # PodAutoscaler
    ACTIVE = "Active"
    # ServerlessService
    ACTIVATOR_ENDPOINTS_POPULATED = "ActivatorEndpointsPopulated"
    ENDPOINTS_POPULATED = "EndpointsPopulated"
    # Ingress
    NETWORK_CONFIGURED = "NetworkConfigured"
    LOAD_BALANCER_READY = "LoadBalancerReady"

    @classmethod
    def from_type(cls, value: str) -> Optional["ConditionKind"]:
        """Map a raw condition ``type`` string; unknown types return None."""
        try:
            return cls(value)
        except ValueError:
            return None
